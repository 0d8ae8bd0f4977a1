"""
Audit logging middleware for WhichOneTho.

One line per API request: method, path, client address, the identity that
made it (``anonymous:<id>``, ``permanent:<id>`` or ``none``), the response
status and how long the request took.
"""

import logging
import time

from apps.users.identity import identity_for_user

logger = logging.getLogger("whichonetho.audit")

SKIPPED_PREFIXES = ("/admin/", "/static/", "/media/", "/api/docs/", "/api/redoc/", "/api/schema/")


class AuditLogMiddleware:
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if request.path.startswith(SKIPPED_PREFIXES):
            return self.get_response(request)

        started = time.monotonic()
        response = self.get_response(request)
        elapsed_ms = (time.monotonic() - started) * 1000

        # Read after the view ran: DRF authentication sets request.user then
        identity = identity_for_user(getattr(request, "user", None))
        logger.info(
            f"{request.method} {request.path} "
            f"from {self.get_client_ip(request)} "
            f"identity={identity or 'none'} "
            f"status={response.status_code} "
            f"{elapsed_ms:.0f}ms"
        )
        return response

    @staticmethod
    def get_client_ip(request):
        x_forwarded_for = request.META.get("HTTP_X_FORWARDED_FOR")
        if x_forwarded_for:
            return x_forwarded_for.split(",")[0].strip()
        return request.META.get("REMOTE_ADDR", "unknown")
