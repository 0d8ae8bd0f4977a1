"""
Serializers for Votes app.
"""

from apps.polls.models import Gender
from rest_framework import serializers

from .models import VoteSide


class VoteCastSerializer(serializers.Serializer):
    """Serializer for casting a vote."""

    poll_id = serializers.IntegerField(min_value=1)
    side = serializers.ChoiceField(choices=VoteSide.choices)
    voter_gender = serializers.ChoiceField(
        choices=Gender.choices, required=False, allow_null=True, allow_blank=True
    )

    def to_internal_value(self, data):
        # Accept lower-case sides ("a"/"b")
        if hasattr(data, "get") and isinstance(data.get("side"), str):
            data = data.copy()
            data["side"] = data["side"].strip().upper()
        return super().to_internal_value(data)


class VoteStatusQuerySerializer(serializers.Serializer):
    poll_id = serializers.IntegerField(min_value=1)
