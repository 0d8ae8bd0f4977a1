"""
Views for Polls app.
"""

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.users.identity import require_identity, resolve_identity
from core.mixins import RateLimitHeadersMixin
from core.throttles import PollCreateRateThrottle, PollReadRateThrottle, ReportRateThrottle

from .reports import report_poll
from .serializers import (
    PollCreateSerializer,
    PollFeedQuerySerializer,
    PollReportSerializer,
    PollSerializer,
    VotedPollSerializer,
)
from .services import (
    check_poll_rate_limit,
    close_poll,
    create_poll,
    get_filtered_polls,
    get_poll_by_id,
    get_user_created_polls,
    get_user_voted_polls,
)

HISTORY_LIMIT = 50


class PollViewSet(RateLimitHeadersMixin, viewsets.ViewSet):
    """
    Poll endpoints.

    - GET  /polls/                 vote feed (filters: genders, time, limit, exclude)
    - POST /polls/                 create a poll
    - GET  /polls/{id}/            poll with vote counts
    - GET  /polls/rate-limit/      caller's creation allowance
    - POST /polls/{id}/close/      close early (creator only)
    - POST /polls/{id}/report/     report a poll
    - GET  /polls/mine/            polls the caller created
    - GET  /polls/voted/           polls the caller voted on
    """

    lookup_value_regex = r"\d+"

    def get_throttles(self):
        """Return throttles based on action."""
        if self.action == "create":
            return [PollCreateRateThrottle()]
        if self.action == "report":
            return [ReportRateThrottle()]
        if self.action in ("list", "retrieve"):
            return [PollReadRateThrottle()]
        return super().get_throttles()

    def get_serializer_context(self, identity=None):
        return {"request": self.request, "identity": identity}

    def list(self, request):
        query = PollFeedQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        identity = resolve_identity(request)
        polls = get_filtered_polls(
            identity,
            genders=query.validated_data.get("genders"),
            time_filter=query.validated_data.get("time", "all"),
            limit=query.validated_data.get("limit"),
            exclude_ids=query.validated_data.get("exclude"),
        )
        serializer = PollSerializer(polls, many=True, context=self.get_serializer_context(identity))
        return Response(serializer.data)

    def create(self, request):
        """
        Create a poll.

        Responses carry X-RateLimit-* headers describing the creator's
        remaining allowance.
        """
        identity = require_identity(request)

        serializer = PollCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            poll = create_poll(identity, serializer.to_spec())
        finally:
            request.rate_limit_status = check_poll_rate_limit(identity)

        return Response(
            PollSerializer(poll, context=self.get_serializer_context(identity)).data,
            status=status.HTTP_201_CREATED,
        )

    def retrieve(self, request, pk=None):
        poll = get_poll_by_id(pk)
        identity = resolve_identity(request)
        return Response(PollSerializer(poll, context=self.get_serializer_context(identity)).data)

    @action(detail=False, methods=["get"], url_path="rate-limit")
    def rate_limit(self, request):
        identity = require_identity(request)
        rate_status = check_poll_rate_limit(identity)
        request.rate_limit_status = rate_status
        return Response(
            {
                "can_create": rate_status.can_create,
                "remaining": rate_status.remaining,
                "reset_at": rate_status.reset_at.isoformat() if rate_status.reset_at else None,
                "limit": rate_status.limit,
            }
        )

    @action(detail=True, methods=["post"])
    def close(self, request, pk=None):
        identity = require_identity(request)
        poll = close_poll(pk, identity)
        return Response(PollSerializer(poll, context=self.get_serializer_context(identity)).data)

    @action(detail=True, methods=["post"])
    def report(self, request, pk=None):
        """
        Report a poll.

        Returns 201 for a new report and 200 with ``already_reported`` for a
        repeat; clients should hide the poll locally in both cases.
        """
        identity = require_identity(request)
        serializer = PollReportSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = report_poll(pk, identity, serializer.validated_data["reason"])
        return Response(
            {
                "poll_id": int(pk),
                "success": result.success,
                "already_reported": result.already_reported,
            },
            status=status.HTTP_201_CREATED if result.success else status.HTTP_200_OK,
        )

    @action(detail=False, methods=["get"])
    def mine(self, request):
        identity = resolve_identity(request)
        if identity is None:
            return Response([])
        polls = get_user_created_polls(identity, limit=HISTORY_LIMIT)
        return Response(
            PollSerializer(polls, many=True, context=self.get_serializer_context(identity)).data
        )

    @action(detail=False, methods=["get"])
    def voted(self, request):
        identity = resolve_identity(request)
        if identity is None:
            return Response([])
        polls = get_user_voted_polls(identity, limit=HISTORY_LIMIT)
        return Response(
            VotedPollSerializer(polls, many=True, context=self.get_serializer_context(identity)).data
        )
