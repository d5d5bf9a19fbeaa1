"""Reaper loop: evicts users whose heartbeats stopped."""

import asyncio
import logging
from collections.abc import Callable

from chatroom.config import ReaperConfig
from chatroom.domain.entities import LEFT_TEXT, Message, User
from chatroom.domain.repositories import MessageStore, PresenceRegistry
from chatroom.domain.services import Clock

logger = logging.getLogger(__name__)

ErrorCallback = Callable[[Exception], None]


class ReaperLoop:
    """Periodic eviction of stale users.

    Every tick takes a presence snapshot and evicts each user whose last
    heartbeat is older than ``stale_after_seconds``. Eviction is optimistic:
    a user who heartbeats between the snapshot and the delete is kept.
    Each eviction is followed by a "left" status event; if that append
    fails the user stays evicted.

    Failures are logged and passed to ``on_error``; they never end the loop.
    """

    def __init__(
        self,
        presence_registry: PresenceRegistry,
        message_store: MessageStore,
        clock: Clock,
        config: ReaperConfig,
        on_error: ErrorCallback | None = None,
    ) -> None:
        """Initialize ReaperLoop.

        Args:
            presence_registry: Registry to evict from.
            message_store: Log receiving the "left" events.
            clock: Monotonic time for staleness, wall clock for timestamps.
            config: Tick interval and staleness threshold.
            on_error: Called with every exception raised during a tick.
        """
        self._presence = presence_registry
        self._messages = message_store
        self._clock = clock
        self._config = config
        self._on_error = on_error
        # set() means stopped; initially stopped.
        self._stop_event = asyncio.Event()
        self._stop_event.set()

    async def start(self) -> None:
        """Run sweeps until stop() is called.

        If already running, this method returns immediately after logging a warning.
        """
        if not self._stop_event.is_set():
            logger.warning("ReaperLoop.start() called while already running; ignoring.")
            return
        self._stop_event.clear()
        logger.info(
            "ReaperLoop started (interval=%.1fs, stale_after=%.1fs)",
            self._config.tick_interval_seconds,
            self._config.stale_after_seconds,
        )

        while not self._stop_event.is_set():
            try:
                await self.sweep()
            except Exception as e:
                self._report("Reaper sweep failed", e)

            # Wait for stop signal or timeout
            try:
                await asyncio.wait_for(
                    self._stop_event.wait(),
                    timeout=self._config.tick_interval_seconds,
                )
                break  # Stop signal received
            except asyncio.TimeoutError:
                pass

        logger.info("ReaperLoop stopped")

    async def stop(self) -> None:
        """Signal the loop to stop after the current sweep."""
        self._stop_event.set()

    @property
    def is_running(self) -> bool:
        """Check if the reaper loop is running."""
        return not self._stop_event.is_set()

    async def sweep(self) -> list[User]:
        """Run one eviction pass.

        Returns:
            Users actually evicted in this pass.

        Raises:
            Exception: Whatever the snapshot raises; per-user failures are
                reported and skipped.
        """
        users = await self._presence.snapshot()
        threshold = self._clock.monotonic() - self._config.stale_after_seconds

        evicted: list[User] = []
        for user in users:
            if not user.is_stale(threshold):
                continue
            try:
                removed = await self._presence.evict_if_stale(user.name, user.last_seen)
            except Exception as e:
                self._report(f"Failed to evict {user.name}", e)
                continue
            if not removed:
                continue

            evicted.append(user)
            logger.info("%s left the room (inactive)", user.name)
            await self._announce_departure(user)
        return evicted

    async def _announce_departure(self, user: User) -> None:
        status = Message.status(user.name, LEFT_TEXT, self._clock.now())
        try:
            await self._messages.append(status, trusted=True)
        except Exception as e:
            self._report(f"{user.name} was evicted but the leave event was lost", e)

    def _report(self, message: str, error: Exception) -> None:
        logger.error("%s: %s", message, error, exc_info=error)
        if self._on_error is None:
            return
        try:
            self._on_error(error)
        except Exception:
            logger.exception("Reaper error callback failed")
