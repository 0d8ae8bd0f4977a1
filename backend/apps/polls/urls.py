"""
Poll routes: feed, creation, detail and the per-poll close/report actions.
"""

from rest_framework.routers import SimpleRouter

from .views import PollViewSet

router = SimpleRouter()
router.register(r"polls", PollViewSet, basename="poll")

urlpatterns = router.urls
