"""
Tests for custom exceptions and exception handling.
"""

from datetime import datetime, timezone

import pytest
from django.http import Http404
from rest_framework.exceptions import ValidationError
from rest_framework.test import APIRequestFactory

from core.exceptions import (
    IdentityRequiredError,
    ImageProcessingError,
    ModerationRejectedError,
    PollNotFoundError,
    RateLimitExceededError,
    UsernameTakenError,
    VotingError,
)
from core.exceptions.handlers import custom_exception_handler


def handler_context():
    return {"request": APIRequestFactory().get("/"), "view": None}


@pytest.mark.unit
class TestCustomExceptions:
    """Test custom exception classes."""

    def test_voting_error_base_exception(self):
        """Test VotingError base exception."""
        error = VotingError()
        assert error.message == "A voting error occurred"
        assert error.status_code == 400
        assert error.retryable is False
        assert error.extra == {}

    def test_voting_error_custom_message_and_status(self):
        error = VotingError("Error", status_code=422)
        assert error.message == "Error"
        assert error.status_code == 422

    def test_status_codes(self):
        assert PollNotFoundError().status_code == 404
        assert IdentityRequiredError().status_code == 401
        assert UsernameTakenError().status_code == 409
        assert RateLimitExceededError().status_code == 429

    def test_rate_limit_extra(self):
        reset_at = datetime(2026, 1, 10, 13, 0, tzinfo=timezone.utc)
        error = RateLimitExceededError(reset_at=reset_at, limit=5)
        assert error.extra == {"reset_at": "2026-01-10T13:00:00+00:00", "limit": 5}

    def test_moderation_rejected_extra(self):
        error = ModerationRejectedError(rejected_image="both")
        assert error.extra == {"rejected_image": "both"}
        assert "community guidelines" in error.message

    def test_image_processing_is_retryable(self):
        assert ImageProcessingError().retryable is True


@pytest.mark.unit
class TestCustomExceptionHandler:
    """Test custom_exception_handler."""

    def test_voting_error_response(self):
        response = custom_exception_handler(
            RateLimitExceededError(limit=5), handler_context()
        )

        assert response.status_code == 429
        assert response.data["error_code"] == "RateLimitExceededError"
        assert response.data["retryable"] is False
        assert response.data["limit"] == 5
        assert response.data["reset_at"] is None

    def test_validation_error_response(self):
        response = custom_exception_handler(
            ValidationError({"side": ["Invalid choice."]}), handler_context()
        )

        assert response.status_code == 400
        assert response.data["error_code"] == "ValidationError"
        assert response.data["errors"] == {"side": ["Invalid choice."]}

    def test_django_404(self):
        response = custom_exception_handler(Http404("nope"), handler_context())
        assert response.status_code == 404

    def test_unhandled_exception_hides_details(self):
        response = custom_exception_handler(RuntimeError("secret stack"), handler_context())

        assert response.status_code == 500
        assert response.data["error_code"] == "InternalServerError"
        assert "secret" not in response.data["error"]
