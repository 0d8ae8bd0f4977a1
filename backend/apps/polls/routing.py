"""
WebSocket URL routing for polls app.
"""

from django.urls import re_path

from .consumers import PollVoteCountsConsumer

websocket_urlpatterns = [
    re_path(r"ws/polls/(?P<poll_id>\d+)/counts/$", PollVoteCountsConsumer.as_asgi()),
]
