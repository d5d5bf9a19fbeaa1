"""Message visibility rules."""

from collections.abc import Iterable

from chatroom.domain.entities import Message, MessageType


def is_visible(message: Message, viewer: str | None) -> bool:
    """Decide whether a viewer may see a message.

    Broadcasts and public messages are visible to everyone. Anything else
    is visible only to its sender and its named recipient.

    Args:
        message: Stored message.
        viewer: Name of the viewing user, or None for an anonymous viewer.

    Returns:
        True if the message is visible to the viewer.
    """
    if message.is_broadcast() or message.type == MessageType.MESSAGE:
        return True
    if viewer is None:
        return False
    return message.sender == viewer or message.to == viewer


def filter_visible(messages: Iterable[Message], viewer: str | None) -> list[Message]:
    """Keep the messages visible to the viewer, preserving order."""
    return [message for message in messages if is_visible(message, viewer)]
