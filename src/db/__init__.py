from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from src import create_logger
from src.config import app_config, app_settings

logger = create_logger(name="db.pool")


class AsyncDatabasePool:
    """Async engine and session factory for one database URL.

    Sessions from `aget_session` commit on success and roll back on error. The pool
    itself does not reconnect; `pool_pre_ping` discards dead connections on checkout.
    """

    def __init__(self, database_url: str, echo: bool | None = None) -> None:
        """Initialize"""
        self.database_url: str = database_url
        self.echo: bool = app_settings.DEBUG if echo is None else echo
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None
        self._setup_engine()

    def _engine_options(self) -> dict[str, Any]:
        """Pool options for the target backend.

        Note
        -----
        SQLite (aiosqlite) does not use a QueuePool, so sizing options are not passed to it.
        """
        options: dict[str, Any] = {
            "pool_pre_ping": app_config.database_config.pool_pre_ping,
            # Log SQL when debugging to catch issues like N+1 queries, etc.
            "echo": self.echo,
        }
        if make_url(self.database_url).get_backend_name() != "sqlite":
            options.update(
                pool_size=app_config.database_config.pool_size,
                max_overflow=app_config.database_config.max_overflow,
                pool_timeout=app_config.database_config.pool_timeout,
                pool_recycle=app_config.database_config.pool_recycle,
            )
        return options

    def _setup_engine(self) -> None:
        """Set up the async database engine and session factory."""
        self._engine = create_async_engine(self.database_url, **self._engine_options())

        self._session_factory = async_sessionmaker(
            bind=self._engine,
            # Recommended for async to avoid implicit I/O
            expire_on_commit=app_config.database_config.expire_on_commit,
        )
        logger.debug("AsyncDatabase connection pool initialized")

    @asynccontextmanager
    async def aget_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get an async database session with automatic commit/rollback."""
        if not self._session_factory:
            raise RuntimeError("Session factory not initialized")

        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()

            except Exception:
                await session.rollback()
                raise

    async def ahealth_check(self) -> bool:
        """Check if async database is healthy."""
        try:
            async with self.aget_session() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return False

    async def close(self) -> None:
        """Close connection pool."""
        if self._engine:
            await self._engine.dispose()
            logger.debug("AsyncDatabase pool closed")

    @property
    def engine(self) -> AsyncEngine:
        """Get AsyncDatabase engine."""
        if self._engine is None:
            raise RuntimeError("AsyncDatabase engine is not initialized.")
        return self._engine
