"""
Programmatic access to the Alembic migration sequence.

The runner owns a short-lived `NullPool` engine per call and hands Alembic the
synchronous side of an async connection through `run_sync`.
"""

import io
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from alembic.util.exc import CommandError
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine

from src import create_logger
from src.config import app_config, app_settings
from src.config.config import MigrationConfig
from src.migrations.errors import MigrationError, classify_database_error

logger = create_logger("migrations.runner")
T = TypeVar("T")


@dataclass(slots=True, kw_only=True, frozen=True)
class RevisionInfo:
    """A migration script known to the script directory."""

    revision: str = field(metadata={"description": "Revision identifier (timestamp prefix)."})
    down_revision: str | None = field(
        default=None, metadata={"description": "Revision this one applies on top of."}
    )
    doc: str = field(default="", metadata={"description": "First line of the script docstring."})
    path: str = field(default="", metadata={"description": "Path of the script file."})


class MigrationRunner:
    """Apply and inspect schema migrations against one database."""

    def __init__(self, database_url: str | None = None, config: MigrationConfig | None = None) -> None:
        """Initialize the runner.

        Parameters
        ----------
        database_url : str | None
            Async SQLAlchemy URL. Defaults to the application settings.
        config : MigrationConfig | None
            Script location and version table. Defaults to the application config.
        """
        self.database_url: str = database_url or app_settings.database_url
        self.config: MigrationConfig = config or app_config.migration_config

    def _alembic_config(
        self, connection: Connection | None = None, output_buffer: io.StringIO | None = None
    ) -> Config:
        """Build an in-memory Alembic config; no alembic.ini is read."""
        cfg = Config(output_buffer=output_buffer)
        cfg.set_main_option("script_location", str(self.config.script_path))
        # ConfigParser interpolation: percent-encoded passwords must be escaped
        cfg.set_main_option("sqlalchemy.url", self.database_url.replace("%", "%%"))
        cfg.set_main_option("version_table", self.config.version_table)
        if connection is not None:
            cfg.attributes["connection"] = connection
        return cfg

    def _script_directory(self) -> ScriptDirectory:
        return ScriptDirectory.from_config(self._alembic_config())

    async def _arun_sync(self, fn: Callable[..., T], *args: Any) -> T:
        """Run `fn(sync_connection, *args)` in one transaction, mapping failures to MigrationError."""
        engine = create_async_engine(self.database_url, poolclass=pool.NullPool)
        try:
            async with engine.begin() as conn:
                return await conn.run_sync(fn, *args)

        except MigrationError as e:
            logger.error(f"Migration failed: {e}")
            raise

        except CommandError as e:
            logger.error(f"Alembic command failed: {e}")
            raise MigrationError(str(e)) from e

        except (SQLAlchemyError, OSError) as e:
            error = classify_database_error(e)
            logger.error(f"Migration failed [{error.error_code}]: {error}")
            raise error from e

        finally:
            await engine.dispose()

    def _upgrade(self, connection: Connection, target: str) -> None:
        command.upgrade(self._alembic_config(connection=connection), target)

    def _downgrade(self, connection: Connection, target: str) -> None:
        command.downgrade(self._alembic_config(connection=connection), target)

    def _current_revision(self, connection: Connection) -> str | None:
        context = MigrationContext.configure(connection, opts={"version_table": self.config.version_table})
        return context.get_current_revision()

    async def aupgrade(self, target: str = "head") -> str | None:
        """Apply every pending migration up to `target`, oldest first.

        Applied revisions are recorded in the version table, so a repeated call is a no-op.

        Returns
        -------
        str | None
            The revision the database is at afterwards.

        Raises
        ------
        SchemaConflictError
            If an object a migration creates already exists.
        PrivilegeError
            If the session lacks the rights to change the schema.
        ConnectivityError
            If the database is unreachable.
        MigrationSyntaxError
            If the database rejects the DDL.
        MigrationError
            For any other failure, e.g. an unknown target revision.
        """
        logger.info(f"Upgrading schema to {target!r}")
        await self._arun_sync(self._upgrade, target)
        current = await self.acurrent_revision()
        logger.info(f"Schema is at revision {current!r}")
        return current

    async def adowngrade(self, target: str = "-1") -> None:
        """Run downgrade steps. Forward-only revisions raise IrreversibleMigrationError."""
        logger.info(f"Downgrading schema to {target!r}")
        await self._arun_sync(self._downgrade, target)

    async def acurrent_revision(self) -> str | None:
        """Return the applied revision, or None for an unmigrated database."""
        return await self._arun_sync(self._current_revision)

    async def apending_revisions(self) -> list[str]:
        """Return the revisions not applied yet, oldest first."""
        current = await self.acurrent_revision()
        revisions = [info.revision for info in self.history()]
        if current is None:
            return revisions
        if current not in revisions:
            raise MigrationError(f"Database is at unknown revision {current!r}")
        return revisions[revisions.index(current) + 1 :]

    def history(self) -> list[RevisionInfo]:
        """Return every known revision, oldest first. Does not touch the database."""
        scripts = list(self._script_directory().walk_revisions("base", "heads"))
        return [
            RevisionInfo(
                revision=script.revision,
                down_revision=script.down_revision if isinstance(script.down_revision, str) else None,
                doc=script.doc or "",
                path=script.path,
            )
            for script in reversed(scripts)
        ]

    def render_sql(self, target: str = "head") -> str:
        """Render the DDL for `target` in offline mode, without a database connection.

        Parameters
        ----------
        target : str
            A revision, or a ``start:end`` range as accepted by Alembic.

        Returns
        -------
        str
            The SQL script Alembic would execute.
        """
        buffer = io.StringIO()
        try:
            command.upgrade(self._alembic_config(output_buffer=buffer), target, sql=True)
        except CommandError as e:
            raise MigrationError(str(e)) from e
        return buffer.getvalue()
