"""
WebSocket consumers for live vote counts.
"""

import json
import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer

from apps.polls.models import Poll
from apps.polls.services import get_poll_group_name, serialize_vote_counts

logger = logging.getLogger(__name__)


class PollVoteCountsConsumer(AsyncWebsocketConsumer):
    """
    WebSocket consumer for a poll's live vote counts.

    Sends the current counts on connect, then forwards every
    ``vote_counts_update`` broadcast for the poll. Updates are eventually
    consistent with the votes that caused them.
    """

    async def connect(self):
        """Handle WebSocket connection."""
        self.poll_id = int(self.scope["url_route"]["kwargs"]["poll_id"])
        self.group_name = get_poll_group_name(self.poll_id)

        if not await self.poll_exists():
            await self.close(code=4004)  # Not Found
            return

        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()
        await self.send_current_counts()

        logger.info(f"WebSocket connected: poll_id={self.poll_id}")

    async def disconnect(self, close_code):
        """Handle WebSocket disconnection."""
        if hasattr(self, "group_name"):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)

        logger.info(
            f"WebSocket disconnected: poll_id={getattr(self, 'poll_id', None)}, close_code={close_code}"
        )

    async def receive(self, text_data=None, bytes_data=None):
        """Handle messages received from WebSocket."""
        try:
            data = json.loads(text_data or "")
        except json.JSONDecodeError:
            await self.send_json_message({"type": "error", "message": "Invalid JSON format"})
            return

        message_type = data.get("type") if isinstance(data, dict) else None
        if message_type == "ping":
            await self.send_json_message({"type": "pong", "poll_id": self.poll_id})
        elif message_type == "refresh":
            await self.send_current_counts()
        else:
            await self.send_json_message(
                {"type": "error", "message": f"Unknown message type: {message_type}"}
            )

    async def send_current_counts(self):
        """Send the poll's current counts to the client."""
        try:
            counts = await self.get_counts()
        except Exception as e:
            logger.error(f"Error fetching vote counts for poll {self.poll_id}: {e}")
            await self.send_json_message(
                {"type": "error", "message": "Failed to fetch vote counts"}
            )
            return
        await self.send_json_message(
            {"type": "vote_counts", "poll_id": self.poll_id, "data": counts}
        )

    async def vote_counts_update(self, event):
        """Handle a vote counts broadcast for this poll."""
        await self.send_json_message(
            {"type": "vote_counts_update", "poll_id": self.poll_id, "data": event.get("counts")}
        )

    async def send_json_message(self, payload):
        await self.send(text_data=json.dumps(payload))

    @database_sync_to_async
    def poll_exists(self):
        return Poll.objects.filter(pk=self.poll_id).exists()

    @database_sync_to_async
    def get_counts(self):
        from apps.votes.models import VoteCounts

        return serialize_vote_counts(VoteCounts.objects.filter(poll_id=self.poll_id).first())
