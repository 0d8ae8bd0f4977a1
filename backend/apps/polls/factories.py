"""
Factory Boy factories for Poll models.
"""

import uuid
from datetime import timedelta

import factory
from django.utils import timezone

from apps.users.factories import UserFactory

from .models import Gender, Poll, PollCreationLog, PollReport, PollStatus, ReportReason


class PollFactory(factory.django.DjangoModelFactory):
    """Factory for an open poll with its (zeroed) vote counts row."""

    class Meta:
        model = Poll

    poster_gender = Gender.FEMALE
    body_type = None
    context = None
    image_folder = factory.LazyFunction(lambda: uuid.uuid4().hex)
    image_a_url = factory.LazyAttribute(lambda o: f"/media/{o.image_folder}/image_A.jpg")
    image_b_url = factory.LazyAttribute(lambda o: f"/media/{o.image_folder}/image_B.jpg")
    created_by = factory.SubFactory(UserFactory)
    created_at = factory.LazyFunction(timezone.now)
    duration_minutes = 60
    expires_at = factory.LazyAttribute(lambda o: o.created_at + timedelta(minutes=o.duration_minutes))
    status = PollStatus.ACTIVE

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        poll = super()._create(model_class, *args, **kwargs)

        from apps.votes.models import VoteCounts

        VoteCounts.objects.create(poll=poll)
        return poll


class PollReportFactory(factory.django.DjangoModelFactory):
    """Factory for PollReport model."""

    class Meta:
        model = PollReport

    poll = factory.SubFactory(PollFactory)
    user = factory.SubFactory(UserFactory)
    reason = ReportReason.SPAM


class PollCreationLogFactory(factory.django.DjangoModelFactory):
    """Factory for PollCreationLog model."""

    class Meta:
        model = PollCreationLog

    user = factory.SubFactory(UserFactory)
    created_at = factory.LazyFunction(timezone.now)
