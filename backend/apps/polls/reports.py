"""
Report ledger.

Same insert-first pattern as votes: the (poll, user) unique constraint decides
whether a report is new, and a violation comes back as "already reported".
"""

import logging
from dataclasses import dataclass

from django.db import DatabaseError, IntegrityError, transaction

from apps.users.identity import Identity
from core.exceptions import InvalidReportError, PollNotFoundError, ReportFailedError
from core.utils.db import is_unique_violation

from .models import Poll, PollReport, ReportReason

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportResult:
    success: bool
    already_reported: bool


def report_poll(poll_id: int, identity: Identity, reason: str) -> ReportResult:
    """
    Report a poll.

    Raises:
        InvalidReportError: If reason is not an allowed value
        PollNotFoundError: If the poll doesn't exist
        ReportFailedError: On any storage error other than a duplicate report
    """
    if reason not in ReportReason.values:
        raise InvalidReportError(
            f"Invalid report reason '{reason}'. Must be one of {ReportReason.values}."
        )
    if not Poll.objects.filter(pk=poll_id).exists():
        raise PollNotFoundError(f"Poll with id {poll_id} not found")

    try:
        with transaction.atomic():
            PollReport.objects.create(poll_id=poll_id, user_id=identity.id, reason=reason)
    except IntegrityError as e:
        if is_unique_violation(e):
            logger.info(f"Duplicate report: {identity} already reported poll {poll_id}")
            return ReportResult(success=False, already_reported=True)
        logger.error(f"Report insert failed for poll {poll_id} ({identity}): {e}", exc_info=True)
        raise ReportFailedError()
    except DatabaseError as e:
        logger.error(f"Report insert failed for poll {poll_id} ({identity}): {e}", exc_info=True)
        raise ReportFailedError()

    logger.info(f"Poll {poll_id} reported by {identity}: {reason}")
    return ReportResult(success=True, already_reported=False)
