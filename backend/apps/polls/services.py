"""
Poll lifecycle services for WhichOneTho.

Creation is not transactional across image upload and the poll insert: images
are stored first, and if anything after that fails the stored images are
deleted as compensation.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import timedelta
from typing import Iterable, List, Optional

from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone

from apps.users.identity import Identity
from core.exceptions import (
    ImageProcessingError,
    InvalidPollError,
    ModerationRejectedError,
    PollCreationError,
    PollNotFoundError,
    PollPermissionError,
    RateLimitExceededError,
)
from core.utils.rate_limiter import RateLimitStatus, SlidingWindowRateLimiter

from .models import (
    BodyType,
    Gender,
    Poll,
    PollContext,
    PollCreationLog,
    PollReport,
    PollStatus,
    allowed_durations,
)
from .moderation import discard_images, moderate_and_upload
from .storage import decode_image_data

logger = logging.getLogger(__name__)

# Expires-within buckets for the feed, in minutes (None = unbounded)
TIME_FILTERS = {
    "soon": 15,
    "hour": 60,
    "4hours": 240,
    "all": None,
}


@dataclass
class PollSpec:
    """Input for create_poll. Images are base64 strings."""

    poster_gender: str
    image_a: str
    image_b: str
    duration_minutes: int = 60
    body_type: Optional[str] = None
    context: Optional[str] = None


def get_poll_group_name(poll_id: int) -> str:
    """Generate channel group name for a poll."""
    return f"poll_{poll_id}"


def serialize_vote_counts(counts) -> dict:
    """Flatten a VoteCounts row (or None) into a plain dict."""
    if counts is None:
        return {"votes_a": 0, "votes_b": 0, "total_votes": 0}
    return counts.as_dict()


def get_poll_rate_limiter() -> SlidingWindowRateLimiter:
    return SlidingWindowRateLimiter(
        limit=settings.POLL_RATE_LIMIT,
        window=timedelta(hours=settings.POLL_RATE_LIMIT_WINDOW_HOURS),
    )


def check_poll_rate_limit(identity: Identity, now=None) -> RateLimitStatus:
    """
    Check how many polls ``identity`` may still create in the trailing window.

    Fails open (and logs) if the creation log cannot be read.
    """
    limiter = get_poll_rate_limiter()
    now = now or timezone.now()
    try:
        timestamps = list(
            PollCreationLog.objects.filter(
                user_id=identity.id,
                created_at__gte=limiter.window_start(now),
            )
            .order_by("created_at")
            .values_list("created_at", flat=True)
        )
    except Exception as e:
        logger.warning(f"Rate limit check failed for {identity}, allowing creation: {e}")
        return limiter.fail_open()

    return limiter.evaluate(timestamps, now=now)


def validate_poll_spec(spec: PollSpec) -> None:
    """
    Validate creation input.

    Raises:
        InvalidPollError: On a missing image or a value outside its allowed set
    """
    if spec.poster_gender not in Gender.values:
        raise InvalidPollError(
            f"Invalid poster gender '{spec.poster_gender}'. Must be one of {Gender.values}."
        )
    if spec.body_type and spec.body_type not in BodyType.values:
        raise InvalidPollError(f"Invalid body type '{spec.body_type}'")
    if spec.context and spec.context not in PollContext.values:
        raise InvalidPollError(f"Invalid context '{spec.context}'")
    if spec.duration_minutes not in allowed_durations():
        raise InvalidPollError(
            f"Invalid duration {spec.duration_minutes}. Must be one of {allowed_durations()} minutes."
        )
    if not spec.image_a or not spec.image_b:
        raise InvalidPollError("Exactly two images are required")
    decode_image_data(spec.image_a, "Image A")
    decode_image_data(spec.image_b, "Image B")


def _raise_if_rate_limited(status: RateLimitStatus, identity: Identity) -> None:
    if not status.can_create:
        logger.info(f"Poll rate limit reached for {identity}, resets at {status.reset_at}")
        raise RateLimitExceededError(reset_at=status.reset_at, limit=status.limit)


def create_poll(identity: Identity, spec: PollSpec) -> Poll:
    """
    Create a poll.

    Steps:
    1. Validate input
    2. Optimistic rate limit check, before any image work
    3. Moderate and store the images under a fresh correlation id
    4. Authoritative rate limit check
    5. Insert poll, vote_counts row and creation log entry in one transaction

    Args:
        identity: The creator's identity
        spec: Poll input

    Returns:
        Poll: The created poll

    Raises:
        InvalidPollError: If the input is invalid
        RateLimitExceededError: If the creator is over the limit
        ModerationRejectedError: If an image is rejected (nothing to clean up)
        ImageProcessingError: If moderation or storage fails
        PollCreationError: If the insert fails after images were stored
    """
    from apps.votes.models import VoteCounts

    validate_poll_spec(spec)

    _raise_if_rate_limited(check_poll_rate_limit(identity), identity)

    folder = uuid.uuid4().hex
    try:
        image_a_url, image_b_url = moderate_and_upload(spec.image_a, spec.image_b, folder)
    except ModerationRejectedError:
        raise
    except ImageProcessingError:
        # Storage may have failed after the first image was written
        discard_images(folder)
        raise

    status = check_poll_rate_limit(identity)
    if not status.can_create:
        discard_images(folder)
        _raise_if_rate_limited(status, identity)

    now = timezone.now()
    try:
        with transaction.atomic():
            poll = Poll.objects.create(
                poster_gender=spec.poster_gender,
                body_type=spec.body_type or None,
                context=spec.context or None,
                image_a_url=image_a_url,
                image_b_url=image_b_url,
                image_folder=folder,
                created_by_id=identity.id,
                created_at=now,
                duration_minutes=spec.duration_minutes,
                expires_at=now + timedelta(minutes=spec.duration_minutes),
            )
            VoteCounts.objects.create(poll=poll)
            PollCreationLog.objects.create(user_id=identity.id, created_at=now)
    except DatabaseError as e:
        logger.error(f"Poll insert failed for {identity} (folder {folder}): {e}", exc_info=True)
        discard_images(folder)
        raise PollCreationError()

    logger.info(f"Poll {poll.id} created by {identity}, expires at {poll.expires_at}")
    return poll


def get_poll_by_id(poll_id: int) -> Poll:
    """
    Get a poll with its vote counts.

    Raises:
        PollNotFoundError: If the poll doesn't exist
    """
    try:
        return Poll.objects.select_related("vote_counts", "created_by__profile").get(pk=poll_id)
    except Poll.DoesNotExist:
        raise PollNotFoundError(f"Poll with id {poll_id} not found")


def get_filtered_polls(
    identity: Optional[Identity],
    genders: Optional[Iterable[str]] = None,
    time_filter: str = "all",
    limit: Optional[int] = None,
    exclude_ids: Optional[Iterable[int]] = None,
) -> List[Poll]:
    """
    Active, unexpired polls for the vote feed, newest first.

    Excludes polls the caller has voted on or reported (evaluated in the same
    query, never cached) and any ids in ``exclude_ids``.

    Args:
        identity: The caller, or None before an identity exists
        genders: Poster genders to include; applied when 1 or 2 of the 3 are given
        time_filter: One of "soon", "hour", "4hours", "all"
        limit: Max polls to return (defaults to FEED_DEFAULT_LIMIT)
        exclude_ids: Poll ids reported locally by the client
    """
    from apps.votes.models import Vote

    if time_filter not in TIME_FILTERS:
        raise InvalidPollError(
            f"Invalid time filter '{time_filter}'. Must be one of {list(TIME_FILTERS)}."
        )

    limit = limit or settings.FEED_DEFAULT_LIMIT
    limit = max(1, min(limit, settings.FEED_MAX_LIMIT))
    now = timezone.now()

    queryset = Poll.objects.select_related("vote_counts", "created_by__profile").filter(
        status=PollStatus.ACTIVE, expires_at__gt=now
    )

    genders = [g for g in (genders or []) if g]
    invalid = [g for g in genders if g not in Gender.values]
    if invalid:
        raise InvalidPollError(f"Invalid gender filter {invalid}")
    if 0 < len(set(genders)) < len(Gender.values):
        queryset = queryset.filter(poster_gender__in=genders)

    window = TIME_FILTERS[time_filter]
    if window is not None:
        queryset = queryset.filter(expires_at__lt=now + timedelta(minutes=window))

    if identity is not None:
        queryset = queryset.exclude(
            id__in=Vote.objects.filter(user_id=identity.id).values("poll_id")
        ).exclude(
            id__in=PollReport.objects.filter(user_id=identity.id).values("poll_id")
        )

    exclude_ids = [pk for pk in (exclude_ids or []) if pk is not None]
    if exclude_ids:
        queryset = queryset.exclude(id__in=exclude_ids)

    return list(queryset.order_by("-created_at")[:limit])


def is_poll_creator(poll: Poll, identity: Optional[Identity]) -> bool:
    return identity is not None and poll.created_by_id == identity.id


def close_poll(poll_id: int, identity: Identity) -> Poll:
    """
    Close a poll early. Only its creator may do this.

    Raises:
        PollNotFoundError, PollPermissionError
    """
    poll = get_poll_by_id(poll_id)
    if not is_poll_creator(poll, identity):
        raise PollPermissionError()
    if poll.close():
        logger.info(f"Poll {poll_id} closed by {identity}")
    return poll


def close_expired_polls(now=None) -> int:
    """Flip every active poll whose expiry has passed to closed."""
    now = now or timezone.now()
    closed = Poll.objects.filter(status=PollStatus.ACTIVE, expires_at__lte=now).update(
        status=PollStatus.CLOSED
    )
    if closed:
        logger.info(f"Closed {closed} expired poll(s)")
    return closed


def get_user_created_polls(identity: Identity, limit: int = 50) -> List[Poll]:
    """Polls created by ``identity``, newest first."""
    return list(
        Poll.objects.select_related("vote_counts", "created_by__profile")
        .filter(created_by_id=identity.id)
        .order_by("-created_at")[:limit]
    )


def get_user_voted_polls(identity: Identity, limit: int = 50) -> List[Poll]:
    """
    Polls ``identity`` has voted on, most recent vote first.

    Each poll carries ``my_vote`` (the side voted for) and ``voted_at``.
    """
    from apps.votes.models import Vote

    votes = (
        Vote.objects.filter(user_id=identity.id)
        .select_related("poll__vote_counts", "poll__created_by__profile")
        .order_by("-created_at")[:limit]
    )
    polls = []
    for vote in votes:
        poll = vote.poll
        poll.my_vote = vote.voted_for
        poll.voted_at = vote.created_at
        polls.append(poll)
    return polls
