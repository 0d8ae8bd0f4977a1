"""
Pytest configuration and fixtures for all tests.
This file makes fixtures available to all tests in backend/.
"""

import pytest
from django.conf import settings

from apps.polls.factories import PollFactory
from apps.users.factories import AnonymousProfileFactory, PermanentProfileFactory
from apps.users.identity import identity_for_user


@pytest.fixture
def anonymous_profile(db):
    """Create an anonymous identity bound to a cookie token."""
    return AnonymousProfileFactory()


@pytest.fixture
def anonymous_user(anonymous_profile):
    return anonymous_profile.user


@pytest.fixture
def permanent_user(db):
    """Create a signed-up user with a username."""
    return PermanentProfileFactory(user__username="testuser", user__email="test@example.com").user


@pytest.fixture
def other_user(db):
    return PermanentProfileFactory(user__username="otheruser").user


@pytest.fixture
def anonymous_identity(anonymous_user):
    return identity_for_user(anonymous_user)


@pytest.fixture
def permanent_identity(permanent_user):
    return identity_for_user(permanent_user)


@pytest.fixture
def poll(db, other_user):
    """Create an open poll owned by another user."""
    return PollFactory(created_by=other_user)


@pytest.fixture
def own_poll(db, permanent_user):
    """Create an open poll owned by ``permanent_user``."""
    return PollFactory(created_by=permanent_user)


@pytest.fixture
def api_client():
    """Create a DRF API client."""
    from rest_framework.test import APIClient

    return APIClient()


@pytest.fixture
def anon_client(api_client, anonymous_profile):
    """API client carrying the anonymous-id cookie."""
    api_client.cookies[settings.ANON_ID_COOKIE_NAME] = anonymous_profile.anon_token
    return api_client


@pytest.fixture
def authenticated_client(api_client, permanent_user):
    """API client with a logged-in session for ``permanent_user``."""
    api_client.force_login(permanent_user)
    return api_client


@pytest.fixture
def media_root(settings, tmp_path):
    """Store uploaded images under a per-test directory."""
    settings.MEDIA_ROOT = str(tmp_path)
    return tmp_path
