"""Tests for SQLitePresenceRegistry."""

import asyncio

import pytest

from chatroom.domain.exceptions import ConflictError, NotFoundError
from chatroom.infrastructure.persistence import (
    DatabaseError,
    DatabaseManager,
    SQLitePresenceRegistry,
)


class TestJoin:
    """join method tests."""

    async def test_join_new_user(
        self, presence_registry: SQLitePresenceRegistry, clock
    ) -> None:
        """Test joining with a free name."""
        user = await presence_registry.join("alice")

        assert user.name == "alice"
        assert user.last_seen == clock.monotonic()
        assert await presence_registry.find_by_name("alice") == user

    async def test_join_duplicate_name_conflicts(
        self, presence_registry: SQLitePresenceRegistry
    ) -> None:
        """Test that a taken name raises ConflictError."""
        await presence_registry.join("alice")

        with pytest.raises(ConflictError) as exc_info:
            await presence_registry.join("alice")

        assert exc_info.value.name == "alice"
        assert len(await presence_registry.snapshot()) == 1

    async def test_names_are_case_sensitive(
        self, presence_registry: SQLitePresenceRegistry
    ) -> None:
        """Test that names differing in case are distinct users."""
        await presence_registry.join("alice")
        await presence_registry.join("Alice")

        names = [u.name for u in await presence_registry.snapshot()]
        assert names == ["alice", "Alice"]

    async def test_concurrent_joins_admit_exactly_one(
        self, file_db: DatabaseManager, clock
    ) -> None:
        """Test that racing joins of one name leave a single user."""
        registry = SQLitePresenceRegistry(file_db.get_session, clock)

        results = await asyncio.gather(
            registry.join("alice"),
            registry.join("alice"),
            return_exceptions=True,
        )

        conflicts = [r for r in results if isinstance(r, ConflictError)]
        successes = [r for r in results if not isinstance(r, BaseException)]
        assert len(successes) == 1
        assert len(conflicts) == 1
        assert [u.name for u in await registry.snapshot()] == ["alice"]


class TestHeartbeat:
    """heartbeat method tests."""

    async def test_heartbeat_refreshes_last_seen(
        self, presence_registry: SQLitePresenceRegistry, clock
    ) -> None:
        """Test that heartbeat moves last_seen to now."""
        await presence_registry.join("alice")
        clock.advance(5.0)

        await presence_registry.heartbeat("alice")

        user = await presence_registry.find_by_name("alice")
        assert user is not None
        assert user.last_seen == clock.monotonic()

    async def test_heartbeat_unknown_user(
        self, presence_registry: SQLitePresenceRegistry
    ) -> None:
        """Test that heartbeat of an absent user raises NotFoundError."""
        with pytest.raises(NotFoundError):
            await presence_registry.heartbeat("ghost")


class TestSnapshot:
    """snapshot method tests."""

    async def test_snapshot_empty(
        self, presence_registry: SQLitePresenceRegistry
    ) -> None:
        assert await presence_registry.snapshot() == []

    async def test_snapshot_in_join_order(
        self, presence_registry: SQLitePresenceRegistry
    ) -> None:
        """Test that users are listed in join order."""
        for name in ("carol", "alice", "bob"):
            await presence_registry.join(name)

        names = [u.name for u in await presence_registry.snapshot()]

        assert names == ["carol", "alice", "bob"]


class TestEvictIfStale:
    """evict_if_stale method tests."""

    async def test_evicts_when_last_seen_unchanged(
        self, presence_registry: SQLitePresenceRegistry
    ) -> None:
        """Test eviction with a matching last_seen."""
        user = await presence_registry.join("alice")

        evicted = await presence_registry.evict_if_stale("alice", user.last_seen)

        assert evicted is True
        assert await presence_registry.find_by_name("alice") is None

    async def test_keeps_user_renewed_after_snapshot(
        self, presence_registry: SQLitePresenceRegistry, clock
    ) -> None:
        """Test that a heartbeat between snapshot and delete wins."""
        await presence_registry.join("alice")
        (snapshotted,) = await presence_registry.snapshot()
        clock.advance(1.0)
        await presence_registry.heartbeat("alice")

        evicted = await presence_registry.evict_if_stale(
            "alice", snapshotted.last_seen
        )

        assert evicted is False
        assert await presence_registry.find_by_name("alice") is not None

    async def test_evict_absent_user(
        self, presence_registry: SQLitePresenceRegistry
    ) -> None:
        """Test that evicting an absent user is a no-op."""
        assert await presence_registry.evict_if_stale("ghost", 1.0) is False

    async def test_rejoin_after_eviction(
        self, presence_registry: SQLitePresenceRegistry
    ) -> None:
        """Test that an evicted name can join again."""
        user = await presence_registry.join("alice")
        await presence_registry.evict_if_stale("alice", user.last_seen)

        again = await presence_registry.join("alice")

        assert again.name == "alice"


class TestClear:
    """clear method tests."""

    async def test_clear_removes_everyone(
        self, presence_registry: SQLitePresenceRegistry
    ) -> None:
        await presence_registry.join("alice")
        await presence_registry.join("bob")

        removed = await presence_registry.clear()

        assert removed == 2
        assert await presence_registry.snapshot() == []


class TestDatabaseErrors:
    """Storage failure tests."""

    async def test_missing_table_raises_database_error(
        self, tmp_path, clock
    ) -> None:
        """Test that SQLAlchemy failures surface as DatabaseError."""
        manager = DatabaseManager(str(tmp_path / "empty.db"))  # no create_tables
        registry = SQLitePresenceRegistry(manager.get_session, clock)

        try:
            with pytest.raises(DatabaseError):
                await registry.snapshot()
        finally:
            await manager.close()
