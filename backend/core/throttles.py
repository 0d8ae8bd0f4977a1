"""
Request throttles for Django REST Framework.

These cap raw request rates per endpoint and are separate from the poll
creation limit (5 per trailing 24 hours), which is enforced by the poll
service against the creation log.

Provides:
- Per-endpoint scopes keyed on the caller's user id, or IP before an identity exists
- Admin bypass
- Load test bypass
"""

from django.conf import settings
from rest_framework.throttling import SimpleRateThrottle


class LoadTestBypassMixin:
    """Mixin to bypass rate limiting for load tests."""

    def allow_request(self, request, view):
        """Check if request should bypass rate limiting."""
        if getattr(settings, "DISABLE_RATE_LIMITING", False):
            return True

        # Check for load test header (allows bypassing rate limits for load tests)
        if request.META.get("HTTP_X_LOAD_TEST") == "true":
            return True

        return super().allow_request(request, view)


class EndpointRateThrottle(LoadTestBypassMixin, SimpleRateThrottle):
    """
    Per-endpoint throttle.

    Anonymous-session accounts are real users, so most callers are keyed by
    user id; only callers without any identity fall back to their IP.
    """

    scope = "default"
    rate = "60/min"

    def get_cache_key(self, request, view):
        user = request.user
        if user and user.is_authenticated:
            if user.is_staff or user.is_superuser:
                return None  # No limit for admins
            ident = f"user:{user.pk}"
        else:
            ident = f"ip:{self.get_ident(request)}"
        return self.cache_format % {"scope": self.scope, "ident": ident}


class VoteCastRateThrottle(EndpointRateThrottle):
    """Rate throttle for vote casting endpoint."""

    scope = "vote_cast"
    rate = "60/min"


class PollCreateRateThrottle(EndpointRateThrottle):
    """Rate throttle for poll creation requests (the daily creation limit is separate)."""

    scope = "poll_create"
    rate = "10/min"


class PollReadRateThrottle(EndpointRateThrottle):
    """Rate throttle for poll read endpoints."""

    scope = "poll_read"
    rate = "300/min"


class ReportRateThrottle(EndpointRateThrottle):
    """Rate throttle for poll reports."""

    scope = "poll_report"
    rate = "20/min"
