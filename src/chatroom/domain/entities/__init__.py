"""Domain entities."""

from chatroom.domain.entities.message import (
    BROADCAST,
    JOINED_TEXT,
    LEFT_TEXT,
    Message,
    MessageType,
)
from chatroom.domain.entities.user import User

__all__ = [
    "BROADCAST",
    "JOINED_TEXT",
    "LEFT_TEXT",
    "Message",
    "MessageType",
    "User",
]
