"""
Per-identity statistics routes.
"""

from rest_framework.routers import SimpleRouter

from .views import StatsViewSet

router = SimpleRouter()
router.register(r"stats", StatsViewSet, basename="stats")

urlpatterns = router.urls
