"""
Unit tests for the database handle.
"""

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from tagfolio.errors import InternalError
from tagfolio.storage import EntityKind


class TestTransaction:
    """Tests for Database.transaction."""

    def test_database_failure_becomes_internal_error(self, database):
        with pytest.raises(InternalError) as exc:
            with database.transaction():
                raise OperationalError("SELECT 1", {}, Exception("disk I/O error"))

        assert exc.value.status_code == 500
        assert exc.value.code == "INTERNAL_ERROR"
        assert isinstance(exc.value.__cause__, OperationalError)

    def test_constraint_violation_propagates(self, database):
        with pytest.raises(IntegrityError):
            with database.transaction():
                raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

    def test_failed_transaction_rolls_back(self, database):
        with pytest.raises(ValueError):
            with database.transaction() as session:
                database.next_id(session, EntityKind.RECORD)
                raise ValueError("boom")

        with database.transaction() as session:
            assert database.next_id(session, EntityKind.RECORD) == "1"
