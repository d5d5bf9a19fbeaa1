"""Domain services."""

from chatroom.domain.services.clock import Clock, SystemClock
from chatroom.domain.services.validation import (
    parse_limit,
    parse_message_type,
    require_positive_int,
    require_text,
)
from chatroom.domain.services.visibility import filter_visible, is_visible

__all__ = [
    "Clock",
    "SystemClock",
    "filter_visible",
    "is_visible",
    "parse_limit",
    "parse_message_type",
    "require_positive_int",
    "require_text",
]
