"""Shared test fixtures."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from chatroom.infrastructure.persistence import (
    DatabaseManager,
    SQLiteMessageStore,
    SQLitePresenceRegistry,
)


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self._monotonic = start
        self._wall = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def monotonic(self) -> float:
        return self._monotonic

    def now(self) -> datetime:
        return self._wall

    def advance(self, seconds: float) -> None:
        self._monotonic += seconds
        self._wall += timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    """Create a fake clock."""
    return FakeClock()


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create in-memory SQLite async engine."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine):
    """Create async session factory."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    @asynccontextmanager
    async def get_session() -> AsyncGenerator[AsyncSession, None]:
        async with factory() as session:
            yield session

    return get_session


@pytest.fixture
async def file_db(tmp_path: Path) -> AsyncGenerator[DatabaseManager, None]:
    """File-backed database; each session gets its own connection."""
    manager = DatabaseManager(str(tmp_path / "room.db"))
    await manager.create_tables()
    yield manager
    await manager.close()


@pytest.fixture
def presence_registry(session_factory, clock: FakeClock) -> SQLitePresenceRegistry:
    """Create presence registry on the in-memory database."""
    return SQLitePresenceRegistry(session_factory, clock)


@pytest.fixture
def message_store(session_factory) -> SQLiteMessageStore:
    """Create message store on the in-memory database."""
    return SQLiteMessageStore(session_factory)
