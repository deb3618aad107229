"""Errors raised while applying schema migrations."""

from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from src.schemas.types import ErrorCodeEnum

# SQLSTATE codes (PostgreSQL and the ANSI classes MySQL also reports)
_SQLSTATE_DUPLICATE_TABLE: str = "42P07"
_SQLSTATE_INSUFFICIENT_PRIVILEGE: str = "42501"
_SQLSTATE_SYNTAX_ERROR: str = "42601"
_SQLSTATE_CONNECTION_CLASS: str = "08"

# MySQL server / client error numbers
_MYSQL_TABLE_EXISTS: set[int] = {1050}
_MYSQL_ACCESS_DENIED: set[int] = {1044, 1045, 1142}
_MYSQL_SYNTAX: set[int] = {1064}
_MYSQL_CONNECTION: set[int] = {2002, 2003, 2005, 2006, 2013}

# Message fragments, used for SQLite and drivers that expose no codes
_CONFLICT_FRAGMENTS: tuple[str, ...] = ("already exists",)
_PRIVILEGE_FRAGMENTS: tuple[str, ...] = ("permission denied", "access denied", "command denied", "readonly database")
_SYNTAX_FRAGMENTS: tuple[str, ...] = ("syntax error",)
_CONNECTIVITY_FRAGMENTS: tuple[str, ...] = (
    "connection refused",
    "could not connect",
    "can't connect",
    "unable to open database file",
    "name or service not known",
    "timeout expired",
)


class MigrationError(Exception):
    """Base exception for migration failures."""

    def __init__(self, message: str, error_code: str = ErrorCodeEnum.MIGRATION_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__


class SchemaConflictError(MigrationError):
    """Raised when the object a migration creates already exists."""

    def __init__(self, details: str) -> None:
        super().__init__(f"Schema conflict: {details}", error_code=ErrorCodeEnum.SCHEMA_CONFLICT)


class PrivilegeError(MigrationError):
    """Raised when the session lacks the rights a migration needs."""

    def __init__(self, details: str) -> None:
        super().__init__(
            f"Insufficient privilege: {details}", error_code=ErrorCodeEnum.INSUFFICIENT_PRIVILEGE
        )


class ConnectivityError(MigrationError):
    """Raised when the database cannot be reached."""

    def __init__(self, details: str) -> None:
        super().__init__(f"Database unreachable: {details}", error_code=ErrorCodeEnum.CONNECTIVITY_ERROR)


class MigrationSyntaxError(MigrationError):
    """Raised when the database rejects migration DDL as malformed."""

    def __init__(self, details: str) -> None:
        super().__init__(f"Malformed DDL: {details}", error_code=ErrorCodeEnum.SYNTAX_ERROR)


class IrreversibleMigrationError(MigrationError):
    """Raised when a downgrade is requested for a forward-only migration."""

    def __init__(self, revision: str) -> None:
        super().__init__(
            f"Revision {revision!r} is forward-only and cannot be downgraded.",
            error_code=ErrorCodeEnum.IRREVERSIBLE_MIGRATION,
        )


def _sqlstate(orig: BaseException | None) -> str | None:
    """SQLSTATE of a driver exception, across asyncpg, psycopg and friends."""
    if orig is None:
        return None
    for attr in ("sqlstate", "pgcode"):
        code = getattr(orig, attr, None)
        if isinstance(code, str):
            return code
    # SQLAlchemy's asyncpg adapter keeps the asyncpg exception as `__cause__`
    cause = orig.__cause__
    if cause is not None and cause is not orig:
        code = getattr(cause, "sqlstate", None)
        if isinstance(code, str):
            return code
    return None


def _mysql_errno(orig: BaseException | None) -> int | None:
    if orig is None or not orig.args:
        return None
    errno = orig.args[0]
    return errno if isinstance(errno, int) else None


def _matches(message: str, fragments: tuple[str, ...]) -> bool:
    lowered = message.lower()
    return any(fragment in lowered for fragment in fragments)


def classify_database_error(error: BaseException) -> MigrationError:
    """Map a driver or SQLAlchemy exception onto the migration error taxonomy.

    Parameters
    ----------
    error : BaseException
        The exception raised while talking to the database.

    Returns
    -------
    MigrationError
        The most specific subclass that applies, or the base class. The original
        error is not chained here; raise the result with ``from error``.
    """
    if isinstance(error, MigrationError):
        return error

    orig: BaseException | None = error.orig if isinstance(error, DBAPIError) else None
    details: str = str(orig if orig is not None else error).strip()
    sqlstate = _sqlstate(orig)
    errno = _mysql_errno(orig)

    if sqlstate == _SQLSTATE_DUPLICATE_TABLE or errno in _MYSQL_TABLE_EXISTS:
        return SchemaConflictError(details)
    if sqlstate == _SQLSTATE_INSUFFICIENT_PRIVILEGE or errno in _MYSQL_ACCESS_DENIED:
        return PrivilegeError(details)
    if sqlstate == _SQLSTATE_SYNTAX_ERROR or errno in _MYSQL_SYNTAX:
        return MigrationSyntaxError(details)
    if (sqlstate or "").startswith(_SQLSTATE_CONNECTION_CLASS) or errno in _MYSQL_CONNECTION:
        return ConnectivityError(details)

    # Raw socket failures surface before any DBAPI wrapping
    if isinstance(error, (ConnectionError, TimeoutError)):
        return ConnectivityError(details)
    if isinstance(error, DBAPIError) and error.connection_invalidated:
        return ConnectivityError(details)

    if _matches(details, _CONFLICT_FRAGMENTS):
        return SchemaConflictError(details)
    if _matches(details, _PRIVILEGE_FRAGMENTS):
        return PrivilegeError(details)
    if _matches(details, _SYNTAX_FRAGMENTS):
        return MigrationSyntaxError(details)
    if _matches(details, _CONNECTIVITY_FRAGMENTS) or isinstance(error, OSError):
        return ConnectivityError(details)

    if isinstance(error, SQLAlchemyError):
        return MigrationError(details)
    return MigrationError(f"{error.__class__.__name__}: {details}")
