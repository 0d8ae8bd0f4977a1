"""
Tests for CSRF handling on signed-in (session) writes.
"""

import pytest
from django.conf import settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from apps.polls.factories import PollFactory
from apps.users.factories import UserFactory
from client import IdentityResolver, WhichOneThoClient

PASSWORD = "Outfit-Check-2024"


@pytest.fixture
def csrf_client():
    return APIClient(enforce_csrf_checks=True)


@pytest.mark.django_db
class TestCsrfCookie:
    def test_anonymous_issuance_sets_csrf_cookie(self, csrf_client):
        response = csrf_client.get(reverse("auth-anonymous"))

        assert settings.CSRF_COOKIE_NAME in response.cookies

    def test_signup_sets_fresh_csrf_cookie(self, csrf_client):
        csrf_client.get(reverse("auth-anonymous"))

        response = csrf_client.post(
            reverse("auth-signup"),
            {"email": "new@example.com", "password": PASSWORD, "username": "new_user"},
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.cookies[settings.CSRF_COOKIE_NAME].value

    def test_anonymous_writes_need_no_token(self, csrf_client):
        poll = PollFactory(created_by=UserFactory())
        csrf_client.get(reverse("auth-anonymous"))

        response = csrf_client.post(
            reverse("vote-cast"), {"poll_id": poll.id, "side": "A"}, format="json"
        )

        assert response.status_code == status.HTTP_201_CREATED


@pytest.mark.django_db
class TestSignedInWrites:
    @pytest.fixture
    def signed_in_client(self, csrf_client):
        csrf_client.get(reverse("auth-anonymous"))
        csrf_client.post(
            reverse("auth-signup"),
            {"email": "new@example.com", "password": PASSWORD, "username": "new_user"},
            format="json",
        )
        return csrf_client

    def test_write_without_token_is_rejected(self, signed_in_client):
        poll = PollFactory(created_by=UserFactory())

        response = signed_in_client.post(
            reverse("vote-cast"), {"poll_id": poll.id, "side": "A"}, format="json"
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_write_with_token_from_cookie_succeeds(self, signed_in_client):
        poll = PollFactory(created_by=UserFactory())
        token = signed_in_client.cookies[settings.CSRF_COOKIE_NAME].value

        response = signed_in_client.post(
            reverse("vote-cast"),
            {"poll_id": poll.id, "side": "A"},
            format="json",
            HTTP_X_CSRFTOKEN=token,
        )

        assert response.status_code == status.HTTP_201_CREATED

    def test_signout_with_token(self, signed_in_client):
        token = signed_in_client.cookies[settings.CSRF_COOKIE_NAME].value

        response = signed_in_client.post(reverse("auth-signout"), HTTP_X_CSRFTOKEN=token)

        assert response.status_code == status.HTTP_204_NO_CONTENT


@pytest.mark.django_db(transaction=True)
def test_python_client_can_write_after_signup(live_server):
    poll = PollFactory(created_by=UserFactory())
    client = WhichOneThoClient(base_url=f"{live_server.url}/api/v1", timeout=5)
    resolver = IdentityResolver(client)

    assert resolver.resolve().is_anonymous
    identity = resolver.sign_up("new@example.com", PASSWORD, "new_user")
    assert identity.kind == "permanent"

    result = client.cast_vote(poll.id, "A")
    assert result["success"] is True
    assert client.vote_status(poll.id)["has_voted"] is True

    resolver.sign_out()
    assert resolver.identity is None
