"""
Sliding window rate limiting.

Provides:
- A trailing-window counter over recorded event timestamps
- Reset time derived from the oldest event still inside the window
- Rate limit headers for API responses
- Fail-open status for when the event log cannot be read
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Iterable, Optional

from django.utils import timezone


@dataclass(frozen=True)
class RateLimitStatus:
    """Outcome of a rate limit check."""

    can_create: bool
    remaining: int
    reset_at: Optional[datetime]
    limit: int

    def as_headers(self) -> Dict[str, str]:
        """Standard X-RateLimit-* headers for this status."""
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
        }
        if self.reset_at:
            headers["X-RateLimit-Reset"] = str(int(self.reset_at.timestamp()))
        return headers


class SlidingWindowRateLimiter:
    """
    Sliding window rate limiter.

    Counts events whose timestamp falls inside the trailing window ending at
    ``now``. The window slides continuously: a slot frees up when the oldest
    counted event ages out, not at a calendar boundary.
    """

    def __init__(self, limit: int, window: timedelta):
        """
        Initialize rate limiter.

        Args:
            limit: Maximum number of events allowed inside the window
            window: Length of the trailing window
        """
        self.limit = limit
        self.window = window

    def window_start(self, now: Optional[datetime] = None) -> datetime:
        """Earliest timestamp still counted at ``now`` (inclusive)."""
        return (now or timezone.now()) - self.window

    def evaluate(
        self,
        timestamps: Iterable[datetime],
        now: Optional[datetime] = None,
    ) -> RateLimitStatus:
        """
        Evaluate the limit against recorded event timestamps.

        Args:
            timestamps: Event timestamps for one identity (any order; events
                outside the window are ignored)
            now: Evaluation time (defaults to current time)

        Returns:
            RateLimitStatus: ``reset_at`` is set only when the limit is reached,
            and equals the oldest in-window event plus the window length.
            The window start is inclusive, so that event still counts at
            exactly ``reset_at``; creation is allowed once that instant has
            passed.
        """
        now = now or timezone.now()
        start = self.window_start(now)
        in_window = sorted(ts for ts in timestamps if start <= ts <= now)

        remaining = max(0, self.limit - len(in_window))
        can_create = remaining > 0

        reset_at = None
        if not can_create and in_window:
            reset_at = in_window[0] + self.window

        return RateLimitStatus(
            can_create=can_create,
            remaining=remaining,
            reset_at=reset_at,
            limit=self.limit,
        )

    def fail_open(self) -> RateLimitStatus:
        """Permissive status used when the event log cannot be read."""
        return RateLimitStatus(
            can_create=True,
            remaining=self.limit,
            reset_at=None,
            limit=self.limit,
        )
