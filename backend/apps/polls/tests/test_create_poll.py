"""
Tests for poll creation: validation, moderation gate, image storage and cleanup.
"""

import base64
from datetime import timedelta
from unittest.mock import Mock, patch

import pytest
import requests
from django.db import DatabaseError

from apps.polls.factories import PollCreationLogFactory
from apps.polls.models import Poll, PollCreationLog
from apps.polls.services import PollSpec, create_poll
from apps.polls.storage import list_images
from apps.votes.models import VoteCounts
from core.exceptions import (
    ImageProcessingError,
    InvalidPollError,
    ModerationRejectedError,
    PollCreationError,
    RateLimitExceededError,
)
from core.utils.rate_limiter import RateLimitStatus

IMAGE_A = base64.b64encode(b"\xff\xd8\xff\xe0outfit-a").decode()
IMAGE_B = "data:image/jpeg;base64," + base64.b64encode(b"\xff\xd8\xff\xe0outfit-b").decode()


def make_spec(**overrides):
    data = {
        "poster_gender": "female",
        "image_a": IMAGE_A,
        "image_b": IMAGE_B,
        "duration_minutes": 60,
        "context": "date",
    }
    data.update(overrides)
    return PollSpec(**data)


def stored_files(media_root):
    return [p for p in media_root.rglob("*") if p.is_file()]


@pytest.mark.django_db
class TestCreatePoll:
    """Test create_poll without a moderation endpoint."""

    def test_creates_poll_counts_and_log(self, permanent_user, permanent_identity, media_root):
        poll = create_poll(permanent_identity, make_spec())

        assert poll.created_by_id == permanent_user.id
        assert poll.expires_at - poll.created_at == timedelta(minutes=60)
        assert poll.context == "date"
        assert VoteCounts.objects.get(poll=poll).total_votes == 0
        assert PollCreationLog.objects.filter(user=permanent_user).count() == 1
        assert len(list_images(poll.image_folder)) == 2
        assert poll.image_a_url != poll.image_b_url

    def test_anonymous_identity_can_create(self, anonymous_identity, media_root):
        poll = create_poll(anonymous_identity, make_spec(duration_minutes=15))
        assert poll.duration_minutes == 15

    @pytest.mark.parametrize(
        "overrides",
        [
            {"poster_gender": "robot"},
            {"duration_minutes": 30},
            {"body_type": "tall"},
            {"context": "wedding"},
            {"image_b": ""},
            {"image_a": "not base64 !!"},
        ],
    )
    def test_invalid_input(self, permanent_identity, media_root, overrides):
        with pytest.raises(InvalidPollError):
            create_poll(permanent_identity, make_spec(**overrides))

        assert Poll.objects.count() == 0
        assert stored_files(media_root) == []

    def test_rate_limited_before_any_image_work(self, permanent_user, permanent_identity, media_root):
        for _ in range(5):
            PollCreationLogFactory(user=permanent_user)

        with pytest.raises(RateLimitExceededError) as exc_info:
            create_poll(permanent_identity, make_spec())

        assert exc_info.value.reset_at is not None
        assert exc_info.value.extra["limit"] == 5
        assert stored_files(media_root) == []

    def test_sixth_poll_in_a_day_is_rejected(self, permanent_identity, media_root):
        for _ in range(5):
            create_poll(permanent_identity, make_spec())

        with pytest.raises(RateLimitExceededError):
            create_poll(permanent_identity, make_spec())

        assert Poll.objects.count() == 5

    def test_authoritative_check_cleans_up_images(self, permanent_identity, media_root):
        allowed = RateLimitStatus(can_create=True, remaining=1, reset_at=None, limit=5)
        blocked = RateLimitStatus(can_create=False, remaining=0, reset_at=None, limit=5)

        with patch("apps.polls.services.check_poll_rate_limit", side_effect=[allowed, blocked]):
            with pytest.raises(RateLimitExceededError):
                create_poll(permanent_identity, make_spec())

        assert stored_files(media_root) == []
        assert Poll.objects.count() == 0

    def test_insert_failure_cleans_up_images(self, permanent_identity, media_root):
        with patch.object(Poll.objects, "create", side_effect=DatabaseError("disk full")):
            with pytest.raises(PollCreationError) as exc_info:
                create_poll(permanent_identity, make_spec())

        assert exc_info.value.retryable is True
        assert stored_files(media_root) == []
        assert PollCreationLog.objects.count() == 0

    def test_storage_failure_cleans_up_partial_upload(self, permanent_identity, media_root):
        from django.core.files.storage import default_storage

        real_save = default_storage.save
        calls = []

        def save_then_fail(name, content, *args, **kwargs):
            calls.append(name)
            if len(calls) == 2:
                raise OSError("bucket unavailable")
            return real_save(name, content, *args, **kwargs)

        with patch.object(default_storage, "save", side_effect=save_then_fail):
            with pytest.raises(ImageProcessingError):
                create_poll(permanent_identity, make_spec())

        assert stored_files(media_root) == []


@pytest.mark.django_db
class TestModerationGate:
    """Test create_poll with a moderation endpoint configured."""

    @pytest.fixture(autouse=True)
    def moderation_endpoint(self, settings):
        settings.MODERATION_ENDPOINT_URL = "https://moderation.example.com/check"
        settings.MODERATION_API_KEY = "secret"
        settings.MODERATION_CLEANUP_URL = ""

    @pytest.fixture(autouse=True)
    def mock_delete(self):
        with patch("apps.polls.moderation.requests.delete") as mock_delete:
            mock_delete.return_value = Mock(status_code=204)
            yield mock_delete

    @patch("apps.polls.moderation.requests.post")
    def test_approved_images_use_returned_urls(self, mock_post, permanent_identity):
        mock_post.return_value = Mock(
            status_code=200,
            json=Mock(
                return_value={
                    "success": True,
                    "imageAUrl": "https://cdn.example.com/a.jpg",
                    "imageBUrl": "https://cdn.example.com/b.jpg",
                }
            ),
        )

        poll = create_poll(permanent_identity, make_spec())

        assert poll.image_a_url == "https://cdn.example.com/a.jpg"
        assert poll.image_b_url == "https://cdn.example.com/b.jpg"

        kwargs = mock_post.call_args.kwargs
        assert kwargs["json"]["pollId"] == poll.image_folder
        assert kwargs["json"]["imageA"] == IMAGE_A
        assert kwargs["headers"]["Authorization"] == "Bearer secret"
        assert kwargs["timeout"] == 30

    @patch("apps.polls.moderation.requests.post")
    def test_rejection_creates_nothing(self, mock_post, permanent_identity):
        mock_post.return_value = Mock(
            status_code=200,
            json=Mock(
                return_value={
                    "success": False,
                    "error": "MODERATION_REJECTED",
                    "rejectedImage": "B",
                    "message": "Image B violates our guidelines",
                }
            ),
        )

        with pytest.raises(ModerationRejectedError) as exc_info:
            create_poll(permanent_identity, make_spec())

        assert exc_info.value.rejected_image == "B"
        assert exc_info.value.message == "Image B violates our guidelines"
        assert exc_info.value.status_code == 422
        assert Poll.objects.count() == 0
        assert PollCreationLog.objects.count() == 0

    @patch("apps.polls.moderation.requests.post")
    def test_timeout_is_retryable_failure(self, mock_post, permanent_identity):
        mock_post.side_effect = requests.exceptions.Timeout("timed out")

        with pytest.raises(ImageProcessingError) as exc_info:
            create_poll(permanent_identity, make_spec())

        assert exc_info.value.retryable is True
        assert Poll.objects.count() == 0

    @patch("apps.polls.moderation.requests.post")
    def test_non_json_reply(self, mock_post, permanent_identity):
        mock_post.return_value = Mock(status_code=502, json=Mock(side_effect=ValueError("no json")))

        with pytest.raises(ImageProcessingError):
            create_poll(permanent_identity, make_spec())

    @patch("apps.polls.moderation.requests.post")
    def test_success_without_urls(self, mock_post, permanent_identity):
        mock_post.return_value = Mock(status_code=200, json=Mock(return_value={"success": True}))

        with pytest.raises(ImageProcessingError):
            create_poll(permanent_identity, make_spec())

    @patch("apps.polls.moderation.requests.post")
    def test_other_endpoint_error(self, mock_post, permanent_identity):
        mock_post.return_value = Mock(
            status_code=500,
            json=Mock(return_value={"success": False, "error": "UPLOAD_FAILED", "message": "S3 down"}),
        )

        with pytest.raises(ImageProcessingError) as exc_info:
            create_poll(permanent_identity, make_spec())

        assert exc_info.value.message == "S3 down"

    @patch("apps.polls.moderation.requests.post")
    def test_insert_failure_deletes_images_at_endpoint(
        self, mock_post, mock_delete, permanent_identity
    ):
        mock_post.return_value = Mock(
            status_code=200,
            json=Mock(
                return_value={
                    "success": True,
                    "imageAUrl": "https://cdn.example.com/a.jpg",
                    "imageBUrl": "https://cdn.example.com/b.jpg",
                }
            ),
        )

        with patch.object(Poll.objects, "create", side_effect=DatabaseError("disk full")):
            with pytest.raises(PollCreationError):
                create_poll(permanent_identity, make_spec())

        folder = mock_post.call_args.kwargs["json"]["pollId"]
        mock_delete.assert_called_once()
        args, kwargs = mock_delete.call_args
        assert args == ("https://moderation.example.com/check",)
        assert kwargs["json"] == {"pollId": folder}
        assert kwargs["headers"]["Authorization"] == "Bearer secret"
        assert kwargs["timeout"] == 30

    @patch("apps.polls.moderation.requests.post")
    def test_cleanup_url_setting(self, mock_post, mock_delete, permanent_identity, settings):
        settings.MODERATION_CLEANUP_URL = "https://moderation.example.com/cleanup"
        mock_post.return_value = Mock(
            status_code=200,
            json=Mock(
                return_value={"success": True, "imageAUrl": "https://a", "imageBUrl": "https://b"}
            ),
        )
        blocked = RateLimitStatus(can_create=False, remaining=0, reset_at=None, limit=5)
        allowed = RateLimitStatus(can_create=True, remaining=1, reset_at=None, limit=5)

        with patch("apps.polls.services.check_poll_rate_limit", side_effect=[allowed, blocked]):
            with pytest.raises(RateLimitExceededError):
                create_poll(permanent_identity, make_spec())

        assert mock_delete.call_args.args == ("https://moderation.example.com/cleanup",)

    @patch("apps.polls.moderation.requests.post")
    def test_failed_remote_cleanup_is_logged(
        self, mock_post, mock_delete, permanent_identity, caplog
    ):
        mock_post.return_value = Mock(
            status_code=200,
            json=Mock(
                return_value={"success": True, "imageAUrl": "https://a", "imageBUrl": "https://b"}
            ),
        )
        mock_delete.side_effect = requests.exceptions.ConnectionError("down")

        with patch.object(Poll.objects, "create", side_effect=DatabaseError("disk full")):
            with pytest.raises(PollCreationError):
                create_poll(permanent_identity, make_spec())

        assert "Remote image cleanup failed" in caplog.text

    @patch("apps.polls.moderation.requests.post")
    def test_rejection_sends_no_cleanup(self, mock_post, mock_delete, permanent_identity):
        mock_post.return_value = Mock(
            status_code=200,
            json=Mock(return_value={"success": False, "error": "MODERATION_REJECTED", "rejectedImage": "A"}),
        )

        with pytest.raises(ModerationRejectedError):
            create_poll(permanent_identity, make_spec())

        mock_delete.assert_not_called()
