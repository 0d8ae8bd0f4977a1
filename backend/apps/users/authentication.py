"""
DRF authentication for anonymous session accounts.
"""

from django.conf import settings
from rest_framework.authentication import BaseAuthentication

from .identity import get_user_for_anon_token


class AnonymousCookieAuthentication(BaseAuthentication):
    """
    Authenticate requests carrying the HttpOnly anonymous-id cookie.

    Listed after SessionAuthentication, so a signed-in permanent account
    always wins over a leftover anonymous cookie. An unknown or stale cookie
    is not an error; the request simply has no identity yet.
    """

    def authenticate(self, request):
        token = request.COOKIES.get(settings.ANON_ID_COOKIE_NAME)
        user = get_user_for_anon_token(token)
        if user is None:
            return None
        return (user, None)
