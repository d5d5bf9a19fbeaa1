"""Persistence infrastructure."""

from chatroom.infrastructure.persistence.database import DatabaseManager
from chatroom.infrastructure.persistence.exceptions import (
    DatabaseError,
    PersistenceError,
)
from chatroom.infrastructure.persistence.message_store import SQLiteMessageStore
from chatroom.infrastructure.persistence.models import MessageModel, ParticipantModel
from chatroom.infrastructure.persistence.presence_registry import (
    SQLitePresenceRegistry,
)

__all__ = [
    "DatabaseError",
    "DatabaseManager",
    "MessageModel",
    "ParticipantModel",
    "PersistenceError",
    "SQLiteMessageStore",
    "SQLitePresenceRegistry",
]
