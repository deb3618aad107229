"""Database models and utilities."""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncGenerator

from sqlalchemy import Boolean, DateTime, Integer, String, false, func
from sqlalchemy.ext.asyncio.session import AsyncSession
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from src.config import app_settings
from src.db import AsyncDatabasePool
from src.schemas.db.models import DESCRIPTION_MAX_LENGTH


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


# =========================================================
# ==================== Database Models ====================
# =========================================================


class DBTask(Base):
    """Data model for storing task information.

    Mirrors the `create_tasks_table` migration; the migration is the source of truth
    for the live schema.
    """

    __tablename__: str = "tasks"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    description: Mapped[str] = mapped_column(String(DESCRIPTION_MAX_LENGTH), nullable=False)
    completed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    # Set by the database at insertion time and never written by the application
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    def __repr__(self) -> str:
        """
        Returns a string representation of the Task object.

        Returns
        -------
        str
        """
        return (
            f"{self.__class__.__name__}(id={self.id!r}, description={self.description!r}, "
            f"completed={self.completed!r})"
        )


# =========================================================
# ==================== Utilities ==========================
# =========================================================
# Global pool instance
_db_pool: AsyncDatabasePool | None = None


async def aget_db_pool() -> AsyncDatabasePool:
    """Get or create the global async database pool."""
    global _db_pool
    if _db_pool is None:
        _db_pool = AsyncDatabasePool(app_settings.database_url)
    return _db_pool


async def aclose_db_pool() -> None:
    """Dispose the global async database pool, if one was created."""
    global _db_pool
    if _db_pool is not None:
        await _db_pool.close()
        _db_pool = None


@asynccontextmanager
async def aget_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session context manager.

    Use this for manual session management with 'async with' statements.

    Yields
    ------
    AsyncSession
        A database session

    Example
    -------
        async with aget_db_session() as session:
            # use session here
    """
    db_pool = await aget_db_pool()
    async with db_pool.aget_session() as session:
        yield session
