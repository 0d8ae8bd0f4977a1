"""
Auth service for WhichOneTho.

Sign-up, sign-in and sign-out on top of Django's session auth. Signing up from
an anonymous session upgrades that account in place so its history (polls,
votes, reports) stays attached to the same user id.
"""

import logging
import re
from typing import Optional

from django.contrib.auth import authenticate, login, logout
from django.contrib.auth.models import User
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import IntegrityError, transaction
from django.utils import timezone

from core.exceptions import (
    AuthenticationFailedError,
    InvalidUsernameError,
    UsernameTakenError,
)

from .identity import Identity, identity_for_user, resolve_identity
from .migration import migrate_anonymous_history
from .models import UserProfile
from .signals import ANONYMOUS_UPGRADED, SIGNED_IN, SIGNED_OUT, identity_changed

logger = logging.getLogger(__name__)

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30
USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")


def validate_username(username: Optional[str]) -> str:
    """
    Validate a requested username and return its stored (lower-cased) form.

    Raises:
        InvalidUsernameError: If the username is missing, too short/long or
            contains characters other than letters, digits and underscores
    """
    username = (username or "").strip()
    if not username:
        raise InvalidUsernameError("Username is required")
    if len(username) < USERNAME_MIN_LENGTH:
        raise InvalidUsernameError(
            f"Username must be at least {USERNAME_MIN_LENGTH} characters"
        )
    if len(username) > USERNAME_MAX_LENGTH:
        raise InvalidUsernameError(
            f"Username must be at most {USERNAME_MAX_LENGTH} characters"
        )
    if not USERNAME_PATTERN.match(username):
        raise InvalidUsernameError(
            "Username can only contain letters, numbers, and underscores"
        )
    return username.lower()


def check_username_available(username: str) -> bool:
    """Pre-check username availability. The unique column still has the final say."""
    normalized = validate_username(username)
    return not UserProfile.objects.filter(username=normalized).exists()


def _validate_credentials(email: str, password: str, user: Optional[User] = None) -> str:
    email = (email or "").strip().lower()
    try:
        validate_email(email)
    except ValidationError:
        raise AuthenticationFailedError("Enter a valid email address")
    if not password:
        raise AuthenticationFailedError("Password is required")
    try:
        validate_password(password, user=user)
    except ValidationError as e:
        raise AuthenticationFailedError(" ".join(e.messages))
    return email


def _email_in_use(email: str) -> bool:
    return (
        User.objects.filter(email__iexact=email)
        .exclude(profile__is_anonymous=True)
        .exists()
    )


def sign_up(request, email: str, password: str, username: str) -> User:
    """
    Create a permanent account.

    When the request carries an anonymous identity, that account is upgraded
    in place (same ``user.id``); otherwise a new account is created.

    Raises:
        InvalidUsernameError, UsernameTakenError, AuthenticationFailedError
    """
    normalized = validate_username(username)
    if not check_username_available(normalized):
        raise UsernameTakenError()

    previous = resolve_identity(request)
    anonymous_user = request.user if previous is not None and previous.is_anonymous else None

    email = _validate_credentials(email, password, user=anonymous_user)
    if _email_in_use(email):
        raise AuthenticationFailedError("An account with this email already exists")

    try:
        with transaction.atomic():
            if anonymous_user is not None:
                user = User.objects.select_for_update().get(pk=anonymous_user.pk)
                user.username = normalized
                user.email = email
                user.set_password(password)
                user.save()

                profile = UserProfile.objects.select_for_update().get(user=user)
                profile.username = normalized
                profile.is_anonymous = False
                profile.anon_token = None
                profile.upgraded_at = timezone.now()
                profile.save()
            else:
                user = User.objects.create_user(
                    username=normalized, email=email, password=password
                )
                UserProfile.objects.create(user=user, username=normalized, is_anonymous=False)
    except IntegrityError:
        # A concurrent sign-up claimed the name between the pre-check and the insert
        logger.info(f"Username collision on sign-up for '{normalized}'")
        raise UsernameTakenError()

    login(request, user, backend="django.contrib.auth.backends.ModelBackend")
    identity = identity_for_user(user)

    migrate_anonymous_history(user.id, previous.id if anonymous_user is not None else None)

    event = ANONYMOUS_UPGRADED if anonymous_user is not None else SIGNED_IN
    identity_changed.send(sender=User, identity=identity, previous=previous, event=event)
    logger.info(f"User signed up: user_id={user.id}, username={normalized}, event={event}")
    return user


def sign_in(request, email: str, password: str) -> User:
    """
    Sign in with email and password.

    History created by the anonymous identity in use before sign-in is
    migrated to the permanent account.

    Raises:
        AuthenticationFailedError: If the credentials do not match
    """
    email = (email or "").strip()
    if not email or not password:
        raise AuthenticationFailedError()

    account = (
        User.objects.filter(email__iexact=email)
        .exclude(profile__is_anonymous=True)
        .first()
    )
    if account is None:
        raise AuthenticationFailedError()

    user = authenticate(request, username=account.username, password=password)
    if user is None:
        raise AuthenticationFailedError()

    previous = resolve_identity(request)
    login(request, user)
    identity = identity_for_user(user)

    if previous is not None and previous.is_anonymous:
        migrate_anonymous_history(user.id, previous.id)

    identity_changed.send(sender=User, identity=identity, previous=previous, event=SIGNED_IN)
    logger.info(f"User signed in: user_id={user.id}")
    return user


def sign_out(request) -> None:
    """End the session. The caller should also clear the anonymous-id cookie."""
    previous = resolve_identity(request)
    logout(request)
    identity_changed.send(sender=User, identity=None, previous=previous, event=SIGNED_OUT)
    if previous is not None:
        logger.info(f"User signed out: user_id={previous.id}")


def get_current_user(request) -> Optional[Identity]:
    """Return the caller's current identity, or None."""
    return resolve_identity(request)


def get_profile(user_id: int) -> Optional[UserProfile]:
    return UserProfile.objects.filter(user_id=user_id).first()
