"""
Test configuration and fixtures for the application.
"""

import os
import time
from pathlib import Path
from typing import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from click.testing import CliRunner
from pydantic import SecretStr
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from src.config import app_settings
from src.db.models import Base
from src.migrations import MigrationRunner


# ==========================================================
# ================== ASYNC DATABASE SETUP ==================
# ==========================================================
@pytest_asyncio.fixture(
    # Each test gets a fresh in-memory database/instance
    scope="function",
)
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a test database engine using SQLite."""
    test_engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={
            # Allow usage of the same connection in different threads
            "check_same_thread": False,
        },
        poolclass=StaticPool,
        echo=False,
    )
    yield test_engine
    await test_engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def tables(engine: AsyncEngine) -> AsyncGenerator[None, None]:
    """Create all database tables.

    It uses the engine fixture to get the test database engine.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture(scope="function")
async def db_session(engine: AsyncEngine, tables: None) -> AsyncGenerator[AsyncSession, None]:  # noqa: ARG001
    """Create a test database session with transaction rollback."""
    async_session = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with async_session() as session:
        yield session
        await session.rollback()


# ==========================================================
# ==================== MIGRATIONS ==========================
# ==========================================================
@pytest.fixture(scope="function")
def database_url(tmp_path: Path) -> str:
    """URL of an empty SQLite file. Migrations need a database that outlives one connection."""
    return f"sqlite+aiosqlite:///{tmp_path / 'tasks.db'}"


@pytest.fixture(scope="function")
def migration_runner(database_url: str) -> MigrationRunner:
    return MigrationRunner(database_url=database_url)


# ==========================================================
# ===================== LOCAL TIME =========================
# ==========================================================
@pytest.fixture(scope="function")
def utc_minus_five() -> Generator[None, None, None]:
    """Set the process local time zone to a fixed UTC-5 for the duration of a test."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    original = os.environ.get("TZ")
    os.environ["TZ"] = "EST+05"
    time.tzset()
    yield
    if original is None:
        os.environ.pop("TZ", None)
    else:
        os.environ["TZ"] = original
    time.tzset()


# ==========================================================
# ======================== CLI =============================
# ==========================================================
@pytest.fixture(scope="function")
def cli_database(database_url: str, monkeypatch: pytest.MonkeyPatch) -> Generator[str, None, None]:
    """Point the application settings at the temporary database."""
    monkeypatch.setattr(app_settings, "DATABASE_URL", SecretStr(database_url))
    yield database_url


@pytest.fixture(scope="function")
def cli_runner() -> CliRunner:
    return CliRunner()
