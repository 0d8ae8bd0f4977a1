"""
Custom exceptions for polls, votes and identities.
"""


class VotingError(Exception):
    """
    Base exception for WhichOneTho service errors.

    All custom exceptions inherit from this. ``extra`` carries typed fields
    the client needs to render a specific message (e.g. when a rate limit
    resets, which image was rejected).
    """

    default_status_code = 400
    default_message = "A voting error occurred"
    retryable = False

    def __init__(self, message=None, status_code=None):
        """
        Initialize exception.

        Args:
            message: Error message (defaults to default_message)
            status_code: HTTP status code (defaults to default_status_code)
        """
        self.message = message or self.default_message
        self.status_code = status_code or self.default_status_code
        super().__init__(self.message)

    @property
    def extra(self):
        return {}


class PollNotFoundError(VotingError):
    """Raised when a poll is not found."""

    default_status_code = 404
    default_message = "Poll not found"


class InvalidVoteError(VotingError):
    """Raised when a vote is invalid (unknown side or voter gender)."""

    default_status_code = 400
    default_message = "Invalid vote"


class PollClosedError(VotingError):
    """Raised when trying to vote on a closed or expired poll."""

    default_status_code = 400
    default_message = "This poll is closed"


class VoteFailedError(VotingError):
    """Raised when a vote could not be stored for a reason other than a duplicate."""

    default_status_code = 500
    default_message = "Failed to cast vote. Please try again."
    retryable = True


class ReportFailedError(VotingError):
    """Raised when a report could not be stored for a reason other than a duplicate."""

    default_status_code = 500
    default_message = "Failed to report poll. Please try again."
    retryable = True


class InvalidReportError(VotingError):
    """Raised when a report reason is not one of the allowed values."""

    default_status_code = 400
    default_message = "Invalid report reason"


class RateLimitExceededError(VotingError):
    """Raised when the poll creation limit for the trailing window is reached."""

    default_status_code = 429
    default_message = "You've reached the daily poll limit. Please try again later."

    def __init__(self, message=None, reset_at=None, limit=None):
        super().__init__(message)
        self.reset_at = reset_at
        self.limit = limit

    @property
    def extra(self):
        return {
            "reset_at": self.reset_at.isoformat() if self.reset_at else None,
            "limit": self.limit,
        }


class InvalidPollError(VotingError):
    """Raised when poll data is invalid."""

    default_status_code = 400
    default_message = "Invalid poll data"


class PollPermissionError(VotingError):
    """Raised when the caller does not own the poll they try to change."""

    default_status_code = 403
    default_message = "Only the poll creator can do that"


class ModerationRejectedError(VotingError):
    """Raised when the moderation gate rejects one or both images."""

    default_status_code = 422
    default_message = "Image contains content that violates our community guidelines"

    def __init__(self, message=None, rejected_image=None):
        super().__init__(message)
        self.rejected_image = rejected_image

    @property
    def extra(self):
        return {"rejected_image": self.rejected_image}


class ImageProcessingError(VotingError):
    """Raised when the moderation/upload call fails; nothing was stored."""

    default_status_code = 502
    default_message = "Failed to process images. Please try again."
    retryable = True


class PollCreationError(VotingError):
    """Raised when the poll record could not be written after images were stored."""

    default_status_code = 503
    default_message = "Failed to create poll. Please try again."
    retryable = True


class IdentityRequiredError(VotingError):
    """Raised when an operation needs a resolved identity and none is present."""

    default_status_code = 401
    default_message = "No identity for this browser yet. Request an anonymous id first."


class UsernameTakenError(VotingError):
    """Raised when a username is already in use."""

    default_status_code = 409
    default_message = "Username is already taken"


class InvalidUsernameError(VotingError):
    """Raised when a username does not match the allowed format."""

    default_status_code = 400
    default_message = "Invalid username"


class AuthenticationFailedError(VotingError):
    """Raised when sign-up or sign-in credentials are rejected."""

    default_status_code = 400
    default_message = "Invalid email or password"
