"""
Vote routes: ``votes/cast/`` and ``votes/status/``.
"""

from rest_framework.routers import SimpleRouter

from .views import VoteViewSet

# config.urls serves the API root, so no per-app root view
router = SimpleRouter()
router.register(r"votes", VoteViewSet, basename="vote")

urlpatterns = router.urls
