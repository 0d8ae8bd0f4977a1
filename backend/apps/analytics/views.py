"""
Views for Analytics app.
"""

from rest_framework import serializers, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.users.identity import require_identity

from .services import get_user_stats, get_vote_timeline

MAX_TIMELINE_DAYS = 90


class TimelineQuerySerializer(serializers.Serializer):
    days = serializers.IntegerField(required=False, min_value=1, max_value=MAX_TIMELINE_DAYS, default=7)


class StatsViewSet(viewsets.ViewSet):
    """
    Personal stats for the calling identity.

    - GET /stats/me/        totals, A/B wins, context breakdown, recent activity
    - GET /stats/timeline/  votes received per day (?days=7)
    """

    @action(detail=False, methods=["get"])
    def me(self, request):
        identity = require_identity(request)
        return Response(get_user_stats(identity))

    @action(detail=False, methods=["get"])
    def timeline(self, request):
        identity = require_identity(request)
        query = TimelineQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        return Response(get_vote_timeline(identity, days=query.validated_data["days"]))
