"""Domain exceptions."""


class RoomError(Exception):
    """Base exception for chat room operations."""


class ValidationError(RoomError):
    """Malformed input: empty required field, invalid type or bad limit.

    Raised before any storage access, so it never leaves partial writes.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize ValidationError.

        Args:
            message: Human readable reason.
            field: Name of the offending field, if any.
        """
        self.field = field
        super().__init__(message)


class ConflictError(RoomError):
    """A user with the same name is already present."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Name '{name}' is already taken")


class NotFoundError(RoomError):
    """The operation references a user that is not (or no longer) present."""

    def __init__(self, name: str | None, message: str = "") -> None:
        self.name = name
        super().__init__(message or f"User '{name}' is not in the room")


class InternalError(RoomError):
    """Storage or unexpected failure.

    The message names the failed operation only; storage details stay in
    the logs and in ``__cause__``.
    """

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Internal error during {operation}")
