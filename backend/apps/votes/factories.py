"""
Factory Boy factories for Vote models.
"""

import factory

from apps.polls.factories import PollFactory
from apps.users.factories import UserFactory

from .models import Vote, VoteSide


class VoteFactory(factory.django.DjangoModelFactory):
    """
    Factory for a single vote row.

    Counts are not touched; use ``apps.votes.services.cast_vote`` when the
    aggregate must stay in step.
    """

    class Meta:
        model = Vote

    poll = factory.SubFactory(PollFactory)
    user = factory.SubFactory(UserFactory)
    voted_for = VoteSide.A
    voter_gender = None
