"""
Database error helpers.
"""

from django.db import IntegrityError

UNIQUE_VIOLATION_SQLSTATE = "23505"
UNIQUE_VIOLATION_MARKERS = (
    "UNIQUE constraint failed",
    "duplicate key value violates unique constraint",
)


def is_unique_violation(exc: Exception) -> bool:
    """
    Return True if ``exc`` is a unique-constraint violation.

    Checks the driver's SQLSTATE where available (PostgreSQL) and falls back
    to the error text (SQLite).
    """
    if not isinstance(exc, IntegrityError):
        return False

    cause = exc.__cause__
    code = getattr(cause, "pgcode", None) or getattr(cause, "sqlstate", None)
    if code is not None:
        return code == UNIQUE_VIOLATION_SQLSTATE

    message = str(exc)
    return any(marker in message for marker in UNIQUE_VIOLATION_MARKERS)
