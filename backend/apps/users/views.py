"""
Views for Users app.
"""

from django.conf import settings
from django.middleware.csrf import get_token
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from core.exceptions import IdentityRequiredError

from .identity import (
    get_or_create_anonymous_user,
    identity_for_user,
    new_anon_token,
    resolve_identity,
)
from .serializers import SignInSerializer, SignUpSerializer, UsernameQuerySerializer
from .services import (
    check_username_available,
    get_current_user,
    get_profile,
    sign_in,
    sign_out,
    sign_up,
)


def _identity_payload(identity, created=None):
    data = {
        "id": identity.id,
        "kind": identity.kind.value,
        "is_anonymous": identity.is_anonymous,
    }
    if not identity.is_anonymous:
        profile = get_profile(identity.id)
        data["username"] = profile.username if profile else None
    if created is not None:
        data["created"] = created
    return data


def _set_anon_cookie(response, token):
    response.set_cookie(
        settings.ANON_ID_COOKIE_NAME,
        token,
        max_age=settings.ANON_ID_COOKIE_MAX_AGE,
        secure=settings.ANON_ID_COOKIE_SECURE,
        httponly=True,
        samesite="Lax",
    )


def _clear_anon_cookie(response):
    response.delete_cookie(settings.ANON_ID_COOKIE_NAME, samesite="Lax")


def _issue_csrf_cookie(request):
    # Session (permanent) writes are CSRF-checked; CsrfViewMiddleware sets the cookie
    get_token(request._request)


class AuthViewSet(viewsets.ViewSet):
    """
    Identity endpoints.

    - GET  /auth/anonymous/           issue (or return) the anonymous identity
    - POST /auth/signup/              create a permanent account
    - POST /auth/signin/              sign in with email and password
    - POST /auth/signout/             end the session
    - GET  /auth/me/                  current identity
    - GET  /auth/username-available/  username pre-check
    """

    @action(detail=False, methods=["get"])
    def anonymous(self, request):
        """
        Issue an anonymous identity bound to an HttpOnly cookie.

        Idempotent: a request that already carries a valid anonymous cookie or
        a permanent session gets its current identity back.
        """
        identity = resolve_identity(request)
        if identity is not None:
            _issue_csrf_cookie(request)
            return Response(_identity_payload(identity, created=False))

        token = new_anon_token()
        user, created = get_or_create_anonymous_user(token)
        identity = identity_for_user(user)

        response = Response(
            _identity_payload(identity, created=created),
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )
        _issue_csrf_cookie(request)
        _set_anon_cookie(response, token)
        return response

    @action(detail=False, methods=["post"])
    def signup(self, request):
        serializer = SignUpSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = sign_up(
            request,
            email=serializer.validated_data["email"],
            password=serializer.validated_data["password"],
            username=serializer.validated_data["username"],
        )
        response = Response(
            _identity_payload(identity_for_user(user)),
            status=status.HTTP_201_CREATED,
        )
        _clear_anon_cookie(response)
        _issue_csrf_cookie(request)
        return response

    @action(detail=False, methods=["post"])
    def signin(self, request):
        serializer = SignInSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = sign_in(
            request,
            email=serializer.validated_data["email"],
            password=serializer.validated_data["password"],
        )
        response = Response(_identity_payload(identity_for_user(user)))
        _clear_anon_cookie(response)
        _issue_csrf_cookie(request)
        return response

    @action(detail=False, methods=["post"])
    def signout(self, request):
        sign_out(request)
        response = Response(status=status.HTTP_204_NO_CONTENT)
        _clear_anon_cookie(response)
        return response

    @action(detail=False, methods=["get"])
    def me(self, request):
        identity = get_current_user(request)
        if identity is None:
            raise IdentityRequiredError()
        _issue_csrf_cookie(request)
        return Response(_identity_payload(identity))

    @action(detail=False, methods=["get"], url_path="username-available")
    def username_available(self, request):
        serializer = UsernameQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        username = serializer.validated_data["username"]
        return Response(
            {"username": username.lower(), "available": check_username_available(username)}
        )
