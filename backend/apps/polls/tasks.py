"""
Celery tasks for polls app.
"""

import logging

from celery import shared_task
from django.utils import timezone

logger = logging.getLogger(__name__)


@shared_task
def close_expired_polls():
    """
    Periodic task that flips expired active polls to closed.

    Reads never depend on this running (an expired poll is treated as closed
    at read time); it keeps the stored status in line with ``expires_at``.
    Scheduled every minute via Celery Beat.

    Returns:
        dict: Summary with the number of polls closed
    """
    from apps.polls.services import close_expired_polls as close_expired

    now = timezone.now()
    try:
        closed_count = close_expired(now=now)
    except Exception as e:
        logger.error(f"Error closing expired polls: {e}", exc_info=True)
        return {
            "success": False,
            "error": str(e),
        }

    return {
        "success": True,
        "closed_count": closed_count,
        "processed_at": now.isoformat(),
    }
