"""Input validation shared by the store and the room service."""

from typing import Any

from chatroom.domain.entities import MessageType
from chatroom.domain.exceptions import ValidationError

# SQLite INTEGER range
MAX_INT = 2**63 - 1


def require_text(value: Any, field: str) -> str:
    """Check that a required string field is present and non-empty.

    Args:
        value: Raw field value.
        field: Field name used in the error message.

    Returns:
        The value unchanged.

    Raises:
        ValidationError: If the value is not a non-empty string.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"'{field}' must be a non-empty string", field=field)
    return value


def parse_message_type(value: Any, *, trusted: bool = False) -> MessageType:
    """Parse a message type, refusing ``status`` from untrusted callers.

    Args:
        value: Raw type (string or MessageType).
        trusted: Whether the caller is internal.

    Returns:
        Parsed MessageType.

    Raises:
        ValidationError: If the type is unknown, or ``status`` is untrusted.
    """
    try:
        message_type = MessageType(value)
    except ValueError:
        allowed = ", ".join(t.value for t in MessageType if t is not MessageType.STATUS)
        raise ValidationError(
            f"'type' must be one of: {allowed}", field="type"
        ) from None

    if message_type is MessageType.STATUS and not trusted:
        raise ValidationError(
            "'type' status is reserved for system events", field="type"
        )
    return message_type


def require_positive_int(value: Any, field: str) -> int:
    """Check that a value is a positive int (booleans excluded).

    Values above the SQLite INTEGER range are rejected as well.

    Args:
        value: Raw value.
        field: Field name used in the error message.

    Returns:
        The value unchanged.

    Raises:
        ValidationError: If the value is not a positive integer, or is too
            large to store.
    """
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(f"'{field}' must be a positive integer", field=field)
    if value > MAX_INT:
        raise ValidationError(f"'{field}' must be at most {MAX_INT}", field=field)
    return value


def parse_limit(value: Any) -> int:
    """Parse a message limit strictly.

    Accepts a positive int or a string of decimal digits. Zero, negatives,
    floats and non-numeric strings are rejected rather than replaced by a
    default.

    Raises:
        ValidationError: If the value is not a positive integer.
    """
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped.isdecimal():
            raise ValidationError("'limit' must be a positive integer", field="limit")
        value = int(stripped)
    return require_positive_int(value, "limit")
