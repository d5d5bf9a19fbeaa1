"""Domain repositories."""

from chatroom.domain.repositories.message_store import MessageStore
from chatroom.domain.repositories.presence_registry import PresenceRegistry

__all__ = ["MessageStore", "PresenceRegistry"]
