"""User entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class User:
    """A participant currently present in the room.

    Attributes:
        name: Unique, case-sensitive display name.
        last_seen: Monotonic clock reading of the last join or heartbeat.
    """

    name: str
    last_seen: float

    def is_stale(self, threshold: float) -> bool:
        """Check if the last heartbeat happened before the threshold.

        Args:
            threshold: Monotonic clock reading; older heartbeats are stale.

        Returns:
            True if the user should be evicted.
        """
        return self.last_seen < threshold
