"""
Tests for database error helpers.
"""

from django.db import DatabaseError, IntegrityError

from core.utils.db import is_unique_violation


class PgError(Exception):
    def __init__(self, pgcode):
        super().__init__("driver error")
        self.pgcode = pgcode


def integrity_error(message, cause=None):
    error = IntegrityError(message)
    error.__cause__ = cause
    return error


class TestIsUniqueViolation:
    def test_sqlite_message(self):
        assert is_unique_violation(
            integrity_error("UNIQUE constraint failed: votes.poll_id, votes.user_id")
        )

    def test_postgres_sqlstate(self):
        assert is_unique_violation(integrity_error("boom", PgError("23505")))

    def test_other_postgres_constraint(self):
        # Foreign key violation
        assert not is_unique_violation(integrity_error("boom", PgError("23503")))

    def test_not_null_message(self):
        assert not is_unique_violation(integrity_error("NOT NULL constraint failed: votes.poll_id"))

    def test_other_database_errors(self):
        assert not is_unique_violation(DatabaseError("UNIQUE constraint failed"))
