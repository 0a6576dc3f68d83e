import sqlite3

import pytest
from sqlalchemy.exc import DatabaseError, IntegrityError, OperationalError, ProgrammingError

from app.utils.exceptions import (
    SQLITE_ERROR_KINDS, BackingErrorKind, BackingStoreError, ErrorCode, classify_db_error,
)


class DriverError(Exception):
    def __init__(self, message, pgcode=None, sqlite_errorname=None):
        super().__init__(message)
        self.pgcode = pgcode
        self.sqlite_errorname = sqlite_errorname


@pytest.mark.parametrize("error, kind", [
    (ProgrammingError("INSERT", {}, DriverError("permission denied", pgcode="42501")),
     BackingErrorKind.PERMISSION_DENIED),
    (ProgrammingError("SELECT", {}, DriverError("relation does not exist", pgcode="42P01")),
     BackingErrorKind.MISSING_RESOURCE),
    (IntegrityError("INSERT", {}, DriverError("duplicate key", pgcode="23505")),
     BackingErrorKind.UNIQUE_VIOLATION),
    (IntegrityError("INSERT", {}, DriverError("UNIQUE constraint failed",
                                              sqlite_errorname="SQLITE_CONSTRAINT_PRIMARYKEY")),
     BackingErrorKind.UNIQUE_VIOLATION),
    (OperationalError("SELECT", {}, DriverError("attempt to write a readonly database",
                                                sqlite_errorname="SQLITE_PERM")),
     BackingErrorKind.PERMISSION_DENIED),
    (OperationalError("SELECT", {}, DriverError("could not connect to server")),
     BackingErrorKind.UNAVAILABLE),
    (IntegrityError("INSERT", {}, DriverError("null value", pgcode="23502")),
     BackingErrorKind.GENERIC),
    (DatabaseError("SELECT", {}, DriverError("something odd", pgcode="XX000")),
     BackingErrorKind.GENERIC),
])
def test_classify_db_error(error, kind):
    assert classify_db_error(error) == kind


def test_classification_ignores_message_text():
    # Mentioning "permission" is not enough without the matching code
    error = DatabaseError("SELECT", {}, DriverError("permission something RLS", pgcode="XX000"))

    assert classify_db_error(error) == BackingErrorKind.GENERIC


def test_sqlite_driver_error_is_classified_by_name():
    conn = sqlite3.connect(":memory:")
    conn.execute("CREATE TABLE t (id INTEGER PRIMARY KEY)")
    conn.execute("INSERT INTO t VALUES (1)")
    with pytest.raises(sqlite3.IntegrityError) as exc_info:
        conn.execute("INSERT INTO t VALUES (1)")
    conn.close()

    assert exc_info.value.sqlite_errorname in SQLITE_ERROR_KINDS
    assert classify_db_error(IntegrityError("INSERT", {}, exc_info.value)) == BackingErrorKind.UNIQUE_VIOLATION


def test_backing_store_error_response_shape():
    error = BackingStoreError.from_exception(
        ProgrammingError("SELECT", {}, DriverError("relation does not exist", pgcode="42P01")),
        table="password_reset_otps",
    )

    assert error.status_code == 503
    assert error.error_code == ErrorCode.DB_RESOURCE_MISSING
    assert "password_reset_otps" in error.message
    assert error.reason == "relation does not exist"
