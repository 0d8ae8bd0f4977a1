"""
Views for Votes app.
"""

from apps.users.identity import require_identity, resolve_identity
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from core.throttles import VoteCastRateThrottle

from .models import VoteCounts
from .serializers import VoteCastSerializer, VoteStatusQuerySerializer
from .services import cast_vote, has_voted


class VoteViewSet(viewsets.ViewSet):
    """
    Vote endpoints.

    - POST /votes/cast/     cast a vote ({poll_id, side, voter_gender})
    - GET  /votes/status/   whether the caller has voted (?poll_id=)
    """

    def get_throttles(self):
        """Return throttles based on action."""
        if self.action == "cast":
            return [VoteCastRateThrottle()]
        return super().get_throttles()

    @action(detail=False, methods=["post"], url_path="cast")
    def cast(self, request):
        """
        Cast a vote.

        A repeat vote is not an error: it returns 200 with
        ``already_voted: true`` and leaves the counts untouched.
        """
        identity = require_identity(request)

        serializer = VoteCastSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        poll_id = serializer.validated_data["poll_id"]

        result = cast_vote(
            poll_id,
            identity,
            serializer.validated_data["side"],
            serializer.validated_data.get("voter_gender") or None,
        )

        counts = VoteCounts.objects.filter(poll_id=poll_id).first()
        return Response(
            {
                "poll_id": poll_id,
                "success": result.success,
                "already_voted": result.already_voted,
                "counts": counts.as_dict() if counts else None,
            },
            status=status.HTTP_201_CREATED if result.success else status.HTTP_200_OK,
        )

    @action(detail=False, methods=["get"], url_path="status")
    def vote_status(self, request):
        """Report whether the caller has voted on a poll, and which side."""
        query = VoteStatusQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        poll_id = query.validated_data["poll_id"]

        vote_status = has_voted(poll_id, resolve_identity(request))
        return Response(
            {
                "poll_id": poll_id,
                "has_voted": vote_status.has_voted,
                "voted_for": vote_status.voted_for,
            }
        )
