"""Schema migration runner and error taxonomy."""

from src.migrations.errors import (
    ConnectivityError,
    IrreversibleMigrationError,
    MigrationError,
    MigrationSyntaxError,
    PrivilegeError,
    SchemaConflictError,
    classify_database_error,
)
from src.migrations.runner import MigrationRunner, RevisionInfo

__all__ = [
    "ConnectivityError",
    "IrreversibleMigrationError",
    "MigrationError",
    "MigrationRunner",
    "MigrationSyntaxError",
    "PrivilegeError",
    "RevisionInfo",
    "SchemaConflictError",
    "classify_database_error",
]
