"""
Tests for the vote feed.
"""

from datetime import timedelta

import pytest
from django.utils import timezone

from apps.polls.factories import PollFactory, PollReportFactory
from apps.polls.services import get_filtered_polls
from apps.votes.factories import VoteFactory
from core.exceptions import InvalidPollError


def ids(polls):
    return [p.id for p in polls]


@pytest.mark.django_db
class TestFeedFiltering:
    """Test get_filtered_polls."""

    def test_excludes_voted_and_reported_polls(self, permanent_user, permanent_identity):
        voted = PollFactory()
        reported = PollFactory()
        fresh = PollFactory()
        VoteFactory(poll=voted, user=permanent_user)
        PollReportFactory(poll=reported, user=permanent_user)

        assert ids(get_filtered_polls(permanent_identity)) == [fresh.id]

    def test_other_identities_votes_do_not_hide_polls(self, permanent_identity, other_user):
        poll = PollFactory()
        VoteFactory(poll=poll, user=other_user)

        assert ids(get_filtered_polls(permanent_identity)) == [poll.id]

    def test_no_identity_sees_everything_open(self, db):
        poll = PollFactory()
        assert ids(get_filtered_polls(None)) == [poll.id]

    def test_excludes_closed_and_expired(self, permanent_identity):
        open_poll = PollFactory()
        PollFactory(status="closed")
        PollFactory(created_at=timezone.now() - timedelta(hours=2))

        assert ids(get_filtered_polls(permanent_identity)) == [open_poll.id]

    def test_newest_first(self, permanent_identity):
        now = timezone.now()
        older = PollFactory(created_at=now - timedelta(minutes=10))
        newer = PollFactory(created_at=now - timedelta(minutes=1))

        assert ids(get_filtered_polls(permanent_identity)) == [newer.id, older.id]

    def test_gender_filter(self, permanent_identity):
        female = PollFactory(poster_gender="female")
        male = PollFactory(poster_gender="male")
        nonbinary = PollFactory(poster_gender="nonbinary")

        assert ids(get_filtered_polls(permanent_identity, genders=["male"])) == [male.id]
        assert set(ids(get_filtered_polls(permanent_identity, genders=["female", "nonbinary"]))) == {
            female.id,
            nonbinary.id,
        }
        assert len(get_filtered_polls(permanent_identity, genders=[])) == 3
        assert len(get_filtered_polls(permanent_identity, genders=["female", "male", "nonbinary"])) == 3

    def test_invalid_gender(self, permanent_identity):
        with pytest.raises(InvalidPollError):
            get_filtered_polls(permanent_identity, genders=["robot"])

    def test_time_filter_by_expiry(self, permanent_identity):
        now = timezone.now()
        ending_soon = PollFactory(created_at=now - timedelta(minutes=50))  # 10 min left
        ending_in_half_hour = PollFactory(created_at=now - timedelta(minutes=30))
        long_running = PollFactory(created_at=now, duration_minutes=480)

        assert ids(get_filtered_polls(permanent_identity, time_filter="soon")) == [ending_soon.id]
        assert set(ids(get_filtered_polls(permanent_identity, time_filter="hour"))) == {
            ending_soon.id,
            ending_in_half_hour.id,
        }
        assert long_running.id in ids(get_filtered_polls(permanent_identity, time_filter="all"))
        assert long_running.id not in ids(get_filtered_polls(permanent_identity, time_filter="4hours"))

    def test_invalid_time_filter(self, permanent_identity):
        with pytest.raises(InvalidPollError):
            get_filtered_polls(permanent_identity, time_filter="week")

    def test_exclude_ids_applied_before_limit(self, permanent_identity):
        now = timezone.now()
        polls = [PollFactory(created_at=now - timedelta(minutes=i)) for i in range(3)]

        result = get_filtered_polls(permanent_identity, limit=2, exclude_ids=[polls[0].id])

        assert ids(result) == [polls[1].id, polls[2].id]

    def test_limit_is_capped(self, permanent_identity, settings):
        settings.FEED_MAX_LIMIT = 2
        for _ in range(3):
            PollFactory()

        assert len(get_filtered_polls(permanent_identity, limit=50)) == 2
