"""
Personal stats for the profile/stats pages.

All figures are computed per identity from the poll, vote_counts and votes
tables; nothing is cached.
"""

import logging
from datetime import timedelta
from typing import Dict, List

from django.db.models import Count, Sum
from django.db.models.functions import Coalesce, TruncDate
from django.utils import timezone

from apps.users.identity import Identity

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_DAYS = 7


def get_user_stats(identity: Identity) -> Dict:
    """
    Summarize the polls ``identity`` created and the votes it cast.

    Returns:
        dict with:
        - total_polls, total_votes_received, total_votes_cast
        - a_wins, b_wins, ties (polls with no votes count as none of these)
        - avg_votes_per_poll (rounded)
        - context_counts: {context or "none": poll count}
        - recent_polls, recent_votes (last 7 days)
    """
    from apps.polls.models import Poll
    from apps.votes.models import Vote

    polls = Poll.objects.filter(created_by_id=identity.id).annotate(
        a=Coalesce(Sum("vote_counts__votes_a"), 0),
        b=Coalesce(Sum("vote_counts__votes_b"), 0),
        total=Coalesce(Sum("vote_counts__total_votes"), 0),
    )

    total_polls = 0
    total_votes_received = 0
    a_wins = b_wins = ties = 0
    context_counts: Dict[str, int] = {}

    for poll in polls.values("context", "a", "b", "total"):
        total_polls += 1
        total_votes_received += poll["total"]
        if poll["a"] > poll["b"]:
            a_wins += 1
        elif poll["b"] > poll["a"]:
            b_wins += 1
        elif poll["a"] > 0:
            ties += 1
        ctx = poll["context"] or "none"
        context_counts[ctx] = context_counts.get(ctx, 0) + 1

    since = timezone.now() - timedelta(days=RECENT_ACTIVITY_DAYS)
    votes = Vote.objects.filter(user_id=identity.id)

    return {
        "total_polls": total_polls,
        "total_votes_received": total_votes_received,
        "total_votes_cast": votes.count(),
        "a_wins": a_wins,
        "b_wins": b_wins,
        "ties": ties,
        "avg_votes_per_poll": round(total_votes_received / total_polls) if total_polls else 0,
        "context_counts": context_counts,
        "recent_polls": Poll.objects.filter(created_by_id=identity.id, created_at__gt=since).count(),
        "recent_votes": votes.filter(created_at__gt=since).count(),
    }


def get_vote_timeline(identity: Identity, days: int = 7) -> List[Dict]:
    """
    Votes received on ``identity``'s polls per day, oldest day first.

    Every day in the range is present, including days with no votes.

    Returns:
        List of dicts: [{"date": "YYYY-MM-DD", "count": int, "label": "Mon"}, ...]
    """
    from apps.votes.models import Vote

    today = timezone.localdate()
    first_day = today - timedelta(days=days - 1)
    start = timezone.now() - timedelta(days=days)

    per_day = (
        Vote.objects.filter(poll__created_by_id=identity.id, created_at__gte=start)
        .annotate(day=TruncDate("created_at"))
        .values("day")
        .annotate(count=Count("id"))
    )
    counts = {row["day"]: row["count"] for row in per_day}

    timeline = []
    for offset in range(days):
        day = first_day + timedelta(days=offset)
        timeline.append(
            {
                "date": day.isoformat(),
                "count": counts.get(day, 0),
                "label": day.strftime("%a"),
            }
        )
    return timeline
