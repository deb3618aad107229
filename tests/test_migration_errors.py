"""Tests for mapping driver errors onto the migration error taxonomy."""

import sqlite3

import pytest
from sqlalchemy.exc import DBAPIError, OperationalError, ProgrammingError

from src.migrations import (
    ConnectivityError,
    MigrationError,
    MigrationSyntaxError,
    PrivilegeError,
    SchemaConflictError,
    classify_database_error,
)
from src.schemas.types import ErrorCodeEnum


class FakePostgresError(Exception):
    """Stand-in for a driver error carrying a SQLSTATE code."""

    def __init__(self, message: str, sqlstate: str) -> None:
        super().__init__(message)
        self.sqlstate = sqlstate


def _wrap(orig: Exception, cls: type[DBAPIError] = ProgrammingError) -> DBAPIError:
    return cls("CREATE TABLE tasks (...)", {}, orig)


@pytest.mark.parametrize(
    ("orig", "expected"),
    [
        (FakePostgresError('relation "tasks" already exists', "42P07"), SchemaConflictError),
        (FakePostgresError("permission denied for schema public", "42501"), PrivilegeError),
        (FakePostgresError('syntax error at or near "TABLEE"', "42601"), MigrationSyntaxError),
        (FakePostgresError("connection does not exist", "08003"), ConnectivityError),
        (Exception(1050, "Table 'tasks' already exists"), SchemaConflictError),
        (Exception(1142, "CREATE command denied to user 'app'@'localhost' for table 'tasks'"), PrivilegeError),
        (Exception(1064, "You have an error in your SQL syntax"), MigrationSyntaxError),
        (Exception(2003, "Can't connect to MySQL server on 'db'"), ConnectivityError),
        (sqlite3.OperationalError("table tasks already exists"), SchemaConflictError),
        (sqlite3.OperationalError('near "TABLEE": syntax error'), MigrationSyntaxError),
        (sqlite3.OperationalError("attempt to write a readonly database"), PrivilegeError),
        (sqlite3.OperationalError("unable to open database file"), ConnectivityError),
    ],
)
def test_classify_wrapped_driver_errors(orig: Exception, expected: type[MigrationError]) -> None:
    """Test SQLSTATE codes, MySQL error numbers and SQLite messages."""
    # When
    error = classify_database_error(_wrap(orig))

    # Then
    assert type(error) is expected
    assert str(orig.args[-1]) in error.message


def test_classify_socket_errors() -> None:
    """Test that connection failures raised before any DBAPI wrapping are connectivity errors."""
    # When
    refused = classify_database_error(ConnectionRefusedError(111, "Connect call failed"))
    timed_out = classify_database_error(TimeoutError("timed out"))

    # Then
    assert isinstance(refused, ConnectivityError)
    assert isinstance(timed_out, ConnectivityError)
    assert refused.error_code == ErrorCodeEnum.CONNECTIVITY_ERROR


def test_classify_invalidated_connection() -> None:
    """Test that an invalidated connection is reported as unreachable."""
    # Given
    error = OperationalError("SELECT 1", {}, Exception("server closed the connection"), connection_invalidated=True)

    # When / Then
    assert isinstance(classify_database_error(error), ConnectivityError)


def test_classify_unknown_error_falls_back_to_base() -> None:
    """Test that anything unrecognised is a plain MigrationError."""
    # When
    error = classify_database_error(_wrap(Exception("deadlock detected")))

    # Then
    assert type(error) is MigrationError
    assert error.error_code == ErrorCodeEnum.MIGRATION_ERROR


def test_classify_passes_migration_errors_through() -> None:
    """Test that already-classified errors are returned unchanged."""
    # Given
    error = SchemaConflictError("table 'tasks' already exists")

    # When / Then
    assert classify_database_error(error) is error
    assert error.message == "Schema conflict: table 'tasks' already exists"
