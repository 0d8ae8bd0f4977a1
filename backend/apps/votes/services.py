"""
Vote ledger.

Votes are written insert-first: the (poll, user) unique constraint decides
whether a vote is new, and a violation is reported back as "already voted"
rather than raised. Aggregate counts are incremented with F() expressions in
the same transaction as the insert and pushed to websocket subscribers after
commit.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from apps.polls.models import Gender, Poll
from apps.polls.services import get_poll_group_name, serialize_vote_counts
from apps.users.identity import Identity
from apps.votes.models import Vote, VoteCounts, VoteSide
from core.exceptions import (
    InvalidVoteError,
    PollClosedError,
    PollNotFoundError,
    VoteFailedError,
)
from core.utils.db import is_unique_violation
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VoteResult:
    success: bool
    already_voted: bool


@dataclass(frozen=True)
class VoteStatus:
    has_voted: bool
    voted_for: Optional[str] = None


def normalize_side(side) -> str:
    """Return "A" or "B", or raise InvalidVoteError."""
    normalized = str(side or "").strip().upper()
    if normalized not in VoteSide.values:
        raise InvalidVoteError(f"Invalid side '{side}'. Must be 'A' or 'B'.")
    return normalized


def increment_vote_counts(poll_id: int, side: str) -> None:
    """
    Increment the aggregate row for one vote.

    Must run inside the vote-insert transaction.
    """
    field = "votes_a" if side == VoteSide.A else "votes_b"
    # Rows are created with the poll; this covers polls inserted outside create_poll
    VoteCounts.objects.get_or_create(poll_id=poll_id)
    VoteCounts.objects.filter(poll_id=poll_id).update(
        **{
            field: F(field) + 1,
            "total_votes": F("total_votes") + 1,
            "updated_at": timezone.now(),
        }
    )


def cast_vote(
    poll_id: int,
    identity: Identity,
    side: str,
    voter_gender: Optional[str] = None,
) -> VoteResult:
    """
    Record a vote for ``side`` on a poll.

    Args:
        poll_id: The ID of the poll
        identity: The voter's identity
        side: "A" or "B"
        voter_gender: Optional self-reported gender of the voter

    Returns:
        VoteResult: ``success=True`` for a new vote,
        ``already_voted=True`` when this identity had already voted

    Raises:
        InvalidVoteError: If side or voter_gender is not an allowed value
        PollNotFoundError: If the poll doesn't exist
        PollClosedError: If the poll is closed or expired
        VoteFailedError: On any storage error other than a duplicate vote
    """
    side = normalize_side(side)
    if voter_gender and voter_gender not in Gender.values:
        raise InvalidVoteError(f"Invalid voter gender '{voter_gender}'")

    poll = Poll.objects.filter(pk=poll_id).only("id", "status", "expires_at").first()
    if poll is None:
        raise PollNotFoundError(f"Poll with id {poll_id} not found")
    if poll.is_expired():
        raise PollClosedError(f"Poll {poll_id} is closed")

    try:
        with transaction.atomic():
            Vote.objects.create(
                poll_id=poll.id,
                user_id=identity.id,
                voted_for=side,
                voter_gender=voter_gender or None,
            )
            increment_vote_counts(poll.id, side)
            transaction.on_commit(lambda: broadcast_vote_counts(poll.id))
    except IntegrityError as e:
        if is_unique_violation(e):
            logger.info(f"Duplicate vote: {identity} already voted on poll {poll_id}")
            return VoteResult(success=False, already_voted=True)
        logger.error(f"Vote insert failed for poll {poll_id} ({identity}): {e}", exc_info=True)
        raise VoteFailedError()
    except DatabaseError as e:
        logger.error(f"Vote insert failed for poll {poll_id} ({identity}): {e}", exc_info=True)
        raise VoteFailedError()

    logger.info(f"Vote cast: {identity} voted {side} on poll {poll_id}")
    return VoteResult(success=True, already_voted=False)


def has_voted(poll_id: int, identity: Optional[Identity]) -> VoteStatus:
    """
    Read whether ``identity`` has voted on a poll, and for which side.

    Keys on the same identity as cast_vote.
    """
    if identity is None:
        return VoteStatus(has_voted=False)

    voted_for = (
        Vote.objects.filter(poll_id=poll_id, user_id=identity.id)
        .values_list("voted_for", flat=True)
        .first()
    )
    if voted_for is None:
        return VoteStatus(has_voted=False)
    return VoteStatus(has_voted=True, voted_for=voted_for)


def broadcast_vote_counts(poll_id: int):
    """
    Broadcast the poll's current counts to its websocket group.

    Delivery is best-effort; failures are logged.
    """
    try:
        from asgiref.sync import async_to_sync
        from channels.layers import get_channel_layer

        channel_layer = get_channel_layer()
        if not channel_layer:
            logger.warning("Channel layer not configured, skipping broadcast")
            return

        counts = VoteCounts.objects.filter(poll_id=poll_id).first()
        group_name = get_poll_group_name(poll_id)

        async_to_sync(channel_layer.group_send)(
            group_name,
            {
                "type": "vote_counts_update",
                "poll_id": poll_id,
                "counts": serialize_vote_counts(counts),
            },
        )

        logger.debug(f"Broadcasted vote counts for poll {poll_id} to group {group_name}")
    except Exception as e:
        logger.error(f"Error broadcasting vote counts for poll {poll_id}: {e}")
