"""
Identity resolution.

Every caller is one of two kinds of identity: an anonymous session account
(issued on first visit and bound to an HttpOnly cookie) or a permanent
account created through sign-up. Both carry a real ``User.id``; upgrading an
anonymous account to a permanent one keeps that id.
"""

import logging
import secrets
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from django.contrib.auth.models import User
from django.db import IntegrityError, transaction

from core.exceptions import IdentityRequiredError

from .models import UserProfile

logger = logging.getLogger(__name__)


class IdentityKind(str, Enum):
    ANONYMOUS = "anonymous"
    PERMANENT = "permanent"


@dataclass(frozen=True)
class Identity:
    """Who is making a request."""

    kind: IdentityKind
    id: int

    @property
    def is_anonymous(self) -> bool:
        return self.kind is IdentityKind.ANONYMOUS

    def __str__(self):
        return f"{self.kind.value}:{self.id}"


def identity_for_user(user) -> Optional[Identity]:
    """
    Build the identity for an authenticated user.

    Users without a profile (e.g. superusers created from the shell) count
    as permanent.

    Returns:
        Identity or None when the user is not authenticated
    """
    if user is None or not user.is_authenticated:
        return None
    profile = getattr(user, "profile", None)
    if profile is not None and profile.is_anonymous:
        return Identity(kind=IdentityKind.ANONYMOUS, id=user.id)
    return Identity(kind=IdentityKind.PERMANENT, id=user.id)


def resolve_identity(request) -> Optional[Identity]:
    """
    Resolve the caller's identity from an authenticated request.

    Session authentication (permanent accounts) takes precedence over the
    anonymous-id cookie, so reads and writes always key on the same id.
    A request without either is a valid "no identity yet" state.
    """
    return identity_for_user(getattr(request, "user", None))


def require_identity(request) -> Identity:
    """Resolve the caller's identity or raise IdentityRequiredError."""
    identity = resolve_identity(request)
    if identity is None:
        raise IdentityRequiredError()
    return identity


def new_anon_token() -> str:
    """Generate an unguessable anonymous-id cookie value."""
    return secrets.token_urlsafe(32)


def get_user_for_anon_token(token: Optional[str]) -> Optional[User]:
    """Look up the active anonymous account bound to a cookie token."""
    if not token:
        return None
    profile = (
        UserProfile.objects.select_related("user")
        .filter(anon_token=token, user__is_active=True)
        .first()
    )
    return profile.user if profile else None


def get_or_create_anonymous_user(token: str) -> Tuple[User, bool]:
    """
    Return the anonymous account bound to ``token``, creating it once.

    A concurrent request that created the same token first wins; the loser's
    IntegrityError is read as "already created" and the existing account is
    returned.

    Returns:
        tuple: (User, created: bool)
    """
    existing = get_user_for_anon_token(token)
    if existing is not None:
        return existing, False

    try:
        with transaction.atomic():
            # Hyphenated names never collide with chosen usernames ([a-z0-9_])
            user = User.objects.create_user(username=f"anon-{uuid.uuid4().hex}")
            UserProfile.objects.create(user=user, anon_token=token, is_anonymous=True)
    except IntegrityError:
        existing = get_user_for_anon_token(token)
        if existing is None:
            raise
        return existing, False

    logger.info(f"Anonymous identity created: user_id={user.id}")
    return user, True
