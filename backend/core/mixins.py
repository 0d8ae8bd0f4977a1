"""
Mixin classes for Django REST Framework views.
"""


class RateLimitHeadersMixin:
    """
    Mixin to add rate limit headers to API responses.

    Adds standard rate limit headers:
    - X-RateLimit-Limit: The rate limit ceiling
    - X-RateLimit-Remaining: Number of creations left in current window
    - X-RateLimit-Reset: Unix timestamp when a slot frees up (only when exhausted)
    """

    def finalize_response(self, request, response, *args, **kwargs):
        """Add rate limit headers to response."""
        response = super().finalize_response(request, response, *args, **kwargs)

        # Set by the view after a rate limit check
        rate_limit_status = getattr(request, "rate_limit_status", None)
        if rate_limit_status is not None:
            for header, value in rate_limit_status.as_headers().items():
                response[header] = value

        return response
