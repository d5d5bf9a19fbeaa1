"""Room service: the operations exposed to the request layer."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from chatroom.config import MessagesConfig
from chatroom.domain.entities import JOINED_TEXT, Message, User
from chatroom.domain.exceptions import InternalError, RoomError
from chatroom.domain.repositories import MessageStore, PresenceRegistry
from chatroom.domain.services import (
    Clock,
    filter_visible,
    parse_limit,
    parse_message_type,
    require_text,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JoinResult:
    """Outcome of a join.

    Attributes:
        user: The newly present user.
        status_message: The "joined" event, or None if recording it failed.
            The user is joined either way.
    """

    user: User
    status_message: Message | None

    @property
    def status_recorded(self) -> bool:
        return self.status_message is not None


@contextmanager
def _internal_errors(operation: str) -> Iterator[None]:
    """Surface non-domain failures as InternalError."""
    try:
        yield
    except RoomError:
        raise
    except Exception as e:
        logger.exception("Room operation '%s' failed", operation)
        raise InternalError(operation) from e


class RoomService:
    """Orchestrates presence, the message log and visibility.

    Validation happens before any storage call. Storage failures are
    reported as InternalError.
    """

    def __init__(
        self,
        presence_registry: PresenceRegistry,
        message_store: MessageStore,
        clock: Clock,
        config: MessagesConfig | None = None,
    ) -> None:
        """Initialize RoomService.

        Args:
            presence_registry: Registry of present users.
            message_store: Append-only message log.
            clock: Wall-clock source for message timestamps.
            config: Message listing configuration.
        """
        self._presence = presence_registry
        self._messages = message_store
        self._clock = clock
        self._config = config or MessagesConfig()

    async def join(self, name: str) -> JoinResult:
        """Add a user to the room and announce it.

        Args:
            name: Name to join with.

        Returns:
            JoinResult; ``status_recorded`` is False if the announcement
            could not be stored.

        Raises:
            ValidationError: If the name is empty.
            ConflictError: If the name is already present.
            InternalError: On storage failure while joining.
        """
        require_text(name, "name")
        with _internal_errors("join"):
            user = await self._presence.join(name)
        logger.info("%s joined the room", name)

        status = Message.status(name, JOINED_TEXT, self._clock.now())
        try:
            sequence = await self._messages.append(status, trusted=True)
        except Exception:
            logger.warning(
                "%s joined but the join event could not be recorded",
                name,
                exc_info=True,
            )
            return JoinResult(user=user, status_message=None)
        return JoinResult(user=user, status_message=status.with_sequence(sequence))

    async def list_users(self) -> list[User]:
        """Return the users currently in the room, in join order."""
        with _internal_errors("list_users"):
            return await self._presence.snapshot()

    async def heartbeat(self, name: str) -> None:
        """Refresh a user's presence.

        Raises:
            ValidationError: If the name is empty.
            NotFoundError: If the user is not present (never joined or
                already evicted; the client must join again).
        """
        require_text(name, "name")
        with _internal_errors("heartbeat"):
            await self._presence.heartbeat(name)

    async def post_message(
        self, sender: str, to: str, text: str, message_type: Any
    ) -> Message:
        """Post a message on behalf of a present user.

        Args:
            sender: Name of the posting user.
            to: Recipient name or BROADCAST.
            text: Message content.
            message_type: ``message`` or ``private_message``.

        Returns:
            The stored message with its sequence.

        Raises:
            ValidationError: On empty fields or a type other than
                ``message``/``private_message``.
            NotFoundError: If the sender is not currently present.
        """
        require_text(sender, "User")
        require_text(to, "to")
        require_text(text, "text")
        parsed_type = parse_message_type(message_type)

        message = Message(
            sender=sender,
            to=to,
            text=text,
            type=parsed_type,
            timestamp=self._clock.now(),
        )
        with _internal_errors("post_message"):
            sequence = await self._messages.append_from_present(message)
        return message.with_sequence(sequence)

    async def list_messages(self, viewer: str | None, limit: Any = None) -> list[Message]:
        """List recent messages visible to a viewer, oldest first.

        Args:
            viewer: Name of the viewing user (None for anonymous).
            limit: Positive int or decimal string. None uses the configured
                default; invalid values are rejected, never defaulted.

        Raises:
            ValidationError: If limit is not a positive integer.
        """
        resolved = self._config.default_limit if limit is None else parse_limit(limit)
        with _internal_errors("list_messages"):
            messages = await self._messages.recent(resolved)
        return filter_visible(messages, viewer)
