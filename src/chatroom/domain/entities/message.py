"""Message entity."""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

BROADCAST = "Todos"
"""Reserved recipient meaning "everyone in the room"."""

JOINED_TEXT = "joined the room"
LEFT_TEXT = "left the room"


class MessageType(str, Enum):
    """Kinds of chat events."""

    MESSAGE = "message"
    PRIVATE_MESSAGE = "private_message"
    STATUS = "status"


@dataclass(frozen=True)
class Message:
    """Message entity.

    Attributes:
        sender: Name of the user who sent the message.
        to: Recipient name, or BROADCAST.
        text: Message content.
        type: Kind of message.
        timestamp: Wall-clock time of posting, for display only.
        sequence: Store-assigned position in the global order
            (None until appended).
    """

    sender: str
    to: str
    text: str
    type: MessageType
    timestamp: datetime
    sequence: int | None = None

    @classmethod
    def status(cls, name: str, text: str, timestamp: datetime) -> "Message":
        """Create a synthetic status event addressed to everyone.

        Args:
            name: User the event is about.
            text: Event description (JOINED_TEXT or LEFT_TEXT).
            timestamp: Wall-clock time of the event.

        Returns:
            Unsequenced status message.
        """
        return cls(
            sender=name,
            to=BROADCAST,
            text=text,
            type=MessageType.STATUS,
            timestamp=timestamp,
        )

    @property
    def time(self) -> str:
        """Display time as HH:MM:SS."""
        return self.timestamp.strftime("%H:%M:%S")

    def is_broadcast(self) -> bool:
        """Check if the message is addressed to everyone."""
        return self.to == BROADCAST

    def with_sequence(self, sequence: int) -> "Message":
        """Return a copy carrying the store-assigned sequence."""
        return replace(self, sequence=sequence)
