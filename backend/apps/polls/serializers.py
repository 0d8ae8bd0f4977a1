"""
Serializers for Polls app.
"""

from django.conf import settings
from django.utils import timezone
from rest_framework import serializers

from .models import BodyType, Gender, Poll, PollContext, ReportReason
from .services import TIME_FILTERS, PollSpec, is_poll_creator, serialize_vote_counts


class PollSerializer(serializers.ModelSerializer):
    """Poll with flattened vote counts and computed expiry state."""

    votes_a = serializers.SerializerMethodField()
    votes_b = serializers.SerializerMethodField()
    total_votes = serializers.SerializerMethodField()
    is_expired = serializers.SerializerMethodField()
    username = serializers.SerializerMethodField()
    is_creator = serializers.SerializerMethodField()

    class Meta:
        model = Poll
        fields = [
            "id",
            "poster_gender",
            "body_type",
            "context",
            "image_a_url",
            "image_b_url",
            "created_at",
            "expires_at",
            "duration_minutes",
            "status",
            "is_expired",
            "votes_a",
            "votes_b",
            "total_votes",
            "username",
            "is_creator",
        ]
        read_only_fields = fields

    def _counts(self, obj):
        return serialize_vote_counts(getattr(obj, "vote_counts", None))

    def get_votes_a(self, obj):
        return self._counts(obj)["votes_a"]

    def get_votes_b(self, obj):
        return self._counts(obj)["votes_b"]

    def get_total_votes(self, obj):
        return self._counts(obj)["total_votes"]

    def get_is_expired(self, obj):
        return obj.is_expired(self.context.get("now") or timezone.now())

    def get_username(self, obj):
        """Public username of the creator (None for anonymous creators)."""
        profile = getattr(obj.created_by, "profile", None)
        if profile is None or profile.is_anonymous:
            return None
        return profile.username

    def get_is_creator(self, obj):
        return is_poll_creator(obj, self.context.get("identity"))


class VotedPollSerializer(PollSerializer):
    """Poll in the caller's voting history, with the side they picked."""

    my_vote = serializers.CharField(read_only=True)
    voted_at = serializers.DateTimeField(read_only=True)

    class Meta(PollSerializer.Meta):
        fields = PollSerializer.Meta.fields + ["my_vote", "voted_at"]
        read_only_fields = fields


class PollCreateSerializer(serializers.Serializer):
    """Poll creation input. Images are base64 (a data-URL prefix is accepted)."""

    poster_gender = serializers.ChoiceField(choices=Gender.choices)
    body_type = serializers.ChoiceField(
        choices=BodyType.choices, required=False, allow_null=True, allow_blank=True
    )
    context = serializers.ChoiceField(
        choices=PollContext.choices, required=False, allow_null=True, allow_blank=True
    )
    duration = serializers.IntegerField(required=False)
    image_a = serializers.CharField(trim_whitespace=True)
    image_b = serializers.CharField(trim_whitespace=True)

    def validate_duration(self, value):
        if value not in settings.POLL_DURATIONS_MINUTES:
            raise serializers.ValidationError(
                f"Duration must be one of {settings.POLL_DURATIONS_MINUTES} minutes."
            )
        return value

    def to_spec(self) -> PollSpec:
        data = self.validated_data
        return PollSpec(
            poster_gender=data["poster_gender"],
            image_a=data["image_a"],
            image_b=data["image_b"],
            duration_minutes=data.get("duration") or settings.POLL_DEFAULT_DURATION_MINUTES,
            body_type=data.get("body_type") or None,
            context=data.get("context") or None,
        )


class PollFeedQuerySerializer(serializers.Serializer):
    """
    Feed query parameters.

    ``genders`` and ``exclude`` accept comma-separated values.
    """

    genders = serializers.CharField(required=False, allow_blank=True)
    time = serializers.ChoiceField(choices=list(TIME_FILTERS), required=False, default="all")
    limit = serializers.IntegerField(required=False, min_value=1)
    exclude = serializers.CharField(required=False, allow_blank=True)

    def validate_genders(self, value):
        genders = [g.strip() for g in value.split(",") if g.strip()]
        invalid = [g for g in genders if g not in Gender.values]
        if invalid:
            raise serializers.ValidationError(f"Invalid genders: {', '.join(invalid)}")
        return genders

    def validate_exclude(self, value):
        try:
            return [int(pk) for pk in value.split(",") if pk.strip()]
        except ValueError:
            raise serializers.ValidationError("exclude must be a comma-separated list of poll ids")


class PollReportSerializer(serializers.Serializer):
    reason = serializers.ChoiceField(choices=ReportReason.choices)
