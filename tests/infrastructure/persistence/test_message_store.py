"""Tests for SQLiteMessageStore."""

import asyncio
from datetime import datetime, timezone

import pytest

from chatroom.application.services import ReaperLoop
from chatroom.config import ReaperConfig
from chatroom.domain.entities import (
    BROADCAST,
    JOINED_TEXT,
    LEFT_TEXT,
    Message,
    MessageType,
)
from chatroom.domain.exceptions import NotFoundError, ValidationError
from chatroom.infrastructure.persistence import (
    DatabaseManager,
    SQLiteMessageStore,
    SQLitePresenceRegistry,
)

NOW = datetime(2026, 1, 1, 12, 30, 0, tzinfo=timezone.utc)


def create_test_message(
    sender: str = "alice",
    to: str = BROADCAST,
    text: str = "hello",
    type: MessageType = MessageType.MESSAGE,
) -> Message:
    """Create a test Message entity."""
    return Message(sender=sender, to=to, text=text, type=type, timestamp=NOW)


class TestAppend:
    """append method tests."""

    async def test_sequences_start_at_one_and_increase(
        self, message_store: SQLiteMessageStore
    ) -> None:
        """Test sequence assignment."""
        first = await message_store.append(create_test_message(text="one"))
        second = await message_store.append(create_test_message(text="two"))

        assert first == 1
        assert second == 2

    async def test_append_persists_fields(
        self, message_store: SQLiteMessageStore
    ) -> None:
        """Test that all fields round-trip."""
        await message_store.append(
            create_test_message(to="bob", text="psst", type=MessageType.PRIVATE_MESSAGE)
        )

        (stored,) = await message_store.recent(10)

        assert stored.sequence == 1
        assert stored.sender == "alice"
        assert stored.to == "bob"
        assert stored.text == "psst"
        assert stored.type is MessageType.PRIVATE_MESSAGE
        assert stored.timestamp == NOW

    async def test_status_requires_trusted_caller(
        self, message_store: SQLiteMessageStore
    ) -> None:
        """Test that status events are refused from untrusted callers."""
        status = Message.status("alice", JOINED_TEXT, NOW)

        with pytest.raises(ValidationError):
            await message_store.append(status)

        assert await message_store.append(status, trusted=True) == 1

    @pytest.mark.parametrize(("to", "text"), [("", "hi"), (BROADCAST, "")])
    async def test_empty_fields_rejected(
        self, message_store: SQLiteMessageStore, to: str, text: str
    ) -> None:
        """Test that validation happens before any write."""
        with pytest.raises(ValidationError):
            await message_store.append(create_test_message(to=to, text=text))

        assert await message_store.recent(10) == []

    async def test_concurrent_appends_get_distinct_sequences(
        self, file_db: DatabaseManager
    ) -> None:
        """Test that parallel appends never share a sequence."""
        store = SQLiteMessageStore(file_db.get_session)

        sequences = await asyncio.gather(
            *(store.append(create_test_message(text=f"m{i}")) for i in range(20))
        )

        assert sorted(sequences) == list(range(1, 21))
        stored = await store.recent(100)
        assert [m.sequence for m in stored] == list(range(1, 21))


class TestAppendFromPresent:
    """append_from_present method tests."""

    async def test_present_sender(
        self,
        message_store: SQLiteMessageStore,
        presence_registry: SQLitePresenceRegistry,
    ) -> None:
        """Test that a present sender's message is stored with all fields."""
        await presence_registry.join("alice")

        sequence = await message_store.append_from_present(
            create_test_message(to="bob", text="psst", type=MessageType.PRIVATE_MESSAGE)
        )

        (stored,) = await message_store.recent(10)
        assert sequence == stored.sequence == 1
        assert stored.sender == "alice"
        assert stored.to == "bob"
        assert stored.text == "psst"
        assert stored.type is MessageType.PRIVATE_MESSAGE
        assert stored.timestamp == NOW

    async def test_absent_sender_inserts_nothing(
        self, message_store: SQLiteMessageStore
    ) -> None:
        with pytest.raises(NotFoundError, match="Invalid user"):
            await message_store.append_from_present(create_test_message())

        assert await message_store.recent(10) == []

    async def test_sequence_not_consumed_by_refused_post(
        self,
        message_store: SQLiteMessageStore,
        presence_registry: SQLitePresenceRegistry,
    ) -> None:
        with pytest.raises(NotFoundError):
            await message_store.append_from_present(create_test_message(sender="ghost"))
        await presence_registry.join("alice")

        assert await message_store.append_from_present(create_test_message()) == 1

    async def test_status_rejected(
        self,
        message_store: SQLiteMessageStore,
        presence_registry: SQLitePresenceRegistry,
    ) -> None:
        await presence_registry.join("alice")

        with pytest.raises(ValidationError):
            await message_store.append_from_present(
                Message.status("alice", JOINED_TEXT, NOW)
            )

        assert await message_store.recent(10) == []

    async def test_concurrent_eviction_never_leaves_post_after_departure(
        self, file_db: DatabaseManager, clock
    ) -> None:
        """Test that a post racing an eviction lands before it or not at all."""
        registry = SQLitePresenceRegistry(file_db.get_session, clock)
        store = SQLiteMessageStore(file_db.get_session)
        reaper = ReaperLoop(
            presence_registry=registry,
            message_store=store,
            clock=clock,
            config=ReaperConfig(tick_interval_seconds=1.5, stale_after_seconds=10.0),
        )
        await registry.join("alice")
        clock.advance(11.0)

        results = await asyncio.gather(
            reaper.sweep(),
            *(
                store.append_from_present(create_test_message(text=f"m{i}"))
                for i in range(5)
            ),
            return_exceptions=True,
        )

        assert [u.name for u in results[0]] == ["alice"]
        assert all(isinstance(r, (int, NotFoundError)) for r in results[1:])
        texts = [m.text for m in await store.recent(100)]
        assert texts[-1] == LEFT_TEXT


class TestRecent:
    """recent method tests."""

    async def test_returns_newest_in_chronological_order(
        self, message_store: SQLiteMessageStore
    ) -> None:
        """Test that the newest messages come back oldest first."""
        for i in range(5):
            await message_store.append(create_test_message(text=f"m{i}"))

        messages = await message_store.recent(3)

        assert [m.text for m in messages] == ["m2", "m3", "m4"]
        assert [m.sequence for m in messages] == [3, 4, 5]

    async def test_limit_larger_than_log(
        self, message_store: SQLiteMessageStore
    ) -> None:
        await message_store.append(create_test_message())

        assert len(await message_store.recent(50)) == 1

    @pytest.mark.parametrize("limit", [0, -1, "10", None, True])
    async def test_invalid_limit(
        self, message_store: SQLiteMessageStore, limit: object
    ) -> None:
        """Test that non-positive or non-int limits are rejected."""
        with pytest.raises(ValidationError):
            await message_store.recent(limit)  # type: ignore[arg-type]
