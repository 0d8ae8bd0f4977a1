"""
Tests for the live vote counts WebSocket consumer.
"""

import pytest
from channels.db import database_sync_to_async
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator

from apps.polls.routing import websocket_urlpatterns
from apps.votes.services import cast_vote

application = URLRouter(websocket_urlpatterns)


async def connect(poll_id):
    communicator = WebsocketCommunicator(application, f"/ws/polls/{poll_id}/counts/")
    connected, _ = await communicator.connect()
    return communicator, connected


@pytest.mark.django_db(transaction=True)
@pytest.mark.asyncio
class TestVoteCountsConsumer:
    """Test PollVoteCountsConsumer."""

    async def test_sends_current_counts_on_connect(self, poll):
        communicator, connected = await connect(poll.id)
        assert connected is True

        message = await communicator.receive_json_from()
        assert message == {
            "type": "vote_counts",
            "poll_id": poll.id,
            "data": {"votes_a": 0, "votes_b": 0, "total_votes": 0},
        }

        await communicator.disconnect()

    async def test_unknown_poll_is_rejected(self, db):
        communicator, connected = await connect(999999)
        assert connected is False

    async def test_ping(self, poll):
        communicator, _ = await connect(poll.id)
        await communicator.receive_json_from()

        await communicator.send_json_to({"type": "ping"})
        assert await communicator.receive_json_from() == {"type": "pong", "poll_id": poll.id}

        await communicator.disconnect()

    async def test_unknown_message_type(self, poll):
        communicator, _ = await connect(poll.id)
        await communicator.receive_json_from()

        await communicator.send_to(text_data="not json")
        assert (await communicator.receive_json_from())["type"] == "error"

        await communicator.send_json_to({"type": "subscribe"})
        assert (await communicator.receive_json_from())["type"] == "error"

        await communicator.disconnect()

    async def test_vote_pushes_update(self, poll, permanent_identity):
        communicator, _ = await connect(poll.id)
        await communicator.receive_json_from()

        await database_sync_to_async(cast_vote)(poll.id, permanent_identity, "A")

        message = await communicator.receive_json_from(timeout=2)
        assert message["type"] == "vote_counts_update"
        assert message["poll_id"] == poll.id
        assert message["data"] == {"votes_a": 1, "votes_b": 0, "total_votes": 1}

        await communicator.disconnect()
