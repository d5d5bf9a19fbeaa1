"""Clock abstraction."""

import time
from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    """Time source.

    ``monotonic`` drives presence and staleness comparisons; ``now`` is
    wall-clock time used only for display timestamps.
    """

    def monotonic(self) -> float:
        """Return a monotonic reading in seconds."""
        ...

    def now(self) -> datetime:
        """Return the current UTC wall-clock time."""
        ...


class SystemClock:
    """Clock backed by the operating system."""

    def monotonic(self) -> float:
        return time.monotonic()

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
