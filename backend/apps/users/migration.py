"""
Identity migration.

Re-points the history owned by a previous anonymous identity to a permanent
account. Upgrading an anonymous session in place keeps the user id, so in the
normal flow this is a no-op; it still runs after every sign-up and sign-in so
that a future identity scheme that changes ids on upgrade has a single place
to hook into.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from django.db import transaction

logger = logging.getLogger(__name__)


@dataclass
class MigrationResult:
    migrated_polls: int = 0
    migrated_votes: int = 0
    migrated_reports: int = 0
    migrated_log_entries: int = 0

    @property
    def total(self) -> int:
        return (
            self.migrated_polls
            + self.migrated_votes
            + self.migrated_reports
            + self.migrated_log_entries
        )


def _repoint_owned_rows(queryset, field: str, new_id: int) -> int:
    with transaction.atomic():
        return queryset.update(**{field: new_id})


def _repoint_unique_rows(model, previous_id: int, new_id: int) -> int:
    """
    Re-point (poll, user) rows, skipping polls the target already has a row for.

    Skipped rows stay with the previous identity.
    """
    with transaction.atomic():
        taken = model.objects.filter(user_id=new_id).values("poll_id")
        return (
            model.objects.filter(user_id=previous_id)
            .exclude(poll_id__in=taken)
            .update(user_id=new_id)
        )


def migrate_anonymous_history(
    new_permanent_id: int, previous_identity_id: Optional[int] = None
) -> MigrationResult:
    """
    Move polls, votes, reports and creation-log entries to the permanent id.

    Each entity type is migrated independently; a failure is logged and the
    counts gathered so far are returned. Never raises into the auth flow.

    Args:
        new_permanent_id: User id of the permanent account
        previous_identity_id: User id of the anonymous identity used before
            sign-in, if any

    Returns:
        MigrationResult with per-entity row counts
    """
    from apps.polls.models import Poll, PollCreationLog, PollReport
    from apps.votes.models import Vote

    result = MigrationResult()

    if previous_identity_id is None or previous_identity_id == new_permanent_id:
        logger.debug(f"Identity migration skipped for user {new_permanent_id}: id unchanged")
        return result

    steps = [
        (
            "migrated_polls",
            lambda: _repoint_owned_rows(
                Poll.objects.filter(created_by_id=previous_identity_id),
                "created_by_id",
                new_permanent_id,
            ),
        ),
        (
            "migrated_votes",
            lambda: _repoint_unique_rows(Vote, previous_identity_id, new_permanent_id),
        ),
        (
            "migrated_reports",
            lambda: _repoint_unique_rows(PollReport, previous_identity_id, new_permanent_id),
        ),
        (
            "migrated_log_entries",
            lambda: _repoint_owned_rows(
                PollCreationLog.objects.filter(user_id=previous_identity_id),
                "user_id",
                new_permanent_id,
            ),
        ),
    ]

    for field, step in steps:
        try:
            setattr(result, field, step())
        except Exception as e:
            logger.error(
                f"Identity migration step {field} failed "
                f"({previous_identity_id} -> {new_permanent_id}): {e}",
                exc_info=True,
            )

    logger.info(
        f"Migrated anonymous history {previous_identity_id} -> {new_permanent_id}: "
        f"polls={result.migrated_polls}, votes={result.migrated_votes}, "
        f"reports={result.migrated_reports}, log_entries={result.migrated_log_entries}"
    )
    return result
