from .voting_errors import (  # noqa: F401
    AuthenticationFailedError,
    IdentityRequiredError,
    ImageProcessingError,
    InvalidPollError,
    InvalidReportError,
    InvalidUsernameError,
    InvalidVoteError,
    ModerationRejectedError,
    PollClosedError,
    PollCreationError,
    PollNotFoundError,
    PollPermissionError,
    RateLimitExceededError,
    ReportFailedError,
    UsernameTakenError,
    VoteFailedError,
    VotingError,
)

__all__ = [
    "VotingError",
    "PollNotFoundError",
    "InvalidVoteError",
    "PollClosedError",
    "VoteFailedError",
    "ReportFailedError",
    "InvalidReportError",
    "RateLimitExceededError",
    "InvalidPollError",
    "PollPermissionError",
    "ModerationRejectedError",
    "ImageProcessingError",
    "PollCreationError",
    "IdentityRequiredError",
    "UsernameTakenError",
    "InvalidUsernameError",
    "AuthenticationFailedError",
]
