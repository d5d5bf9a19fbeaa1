"""HTTP server hosting the chat room API and health endpoints."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from aiohttp import web

if TYPE_CHECKING:
    from chatroom.application.services import ReaperLoop
    from chatroom.infrastructure.persistence.database import DatabaseManager

logger = logging.getLogger(__name__)


class RoomHttpServer:
    """aiohttp server for the chat room.

    Provides /live and /ready endpoints for Kubernetes probes; chat routes
    are registered on ``app`` before start().
    """

    def __init__(
        self,
        reaper_loop: ReaperLoop,
        db_manager: DatabaseManager,
        host: str = "0.0.0.0",
        port: int = 5000,
    ) -> None:
        """Initialize the server.

        Args:
            reaper_loop: ReaperLoop instance.
            db_manager: DatabaseManager instance.
            host: Interface to bind.
            port: Port to listen on. Use 0 for any available port.
        """
        self._reaper_loop = reaper_loop
        self._db_manager = db_manager
        self._host = host
        self._port = port
        self._actual_port = port
        self._app = web.Application()
        self._app.router.add_get("/live", self._handle_live)
        self._app.router.add_get("/ready", self._handle_ready)
        self._runner: web.AppRunner | None = None
        self._site: web.TCPSite | None = None
        self._running = False

    @property
    def app(self) -> web.Application:
        """The aiohttp application, for registering routes."""
        return self._app

    @property
    def is_running(self) -> bool:
        """Check if the server is running."""
        return self._running

    @property
    def port(self) -> int:
        """Get the port the server is listening on."""
        return self._actual_port

    async def check_liveness(self) -> dict[str, Any]:
        """Check if the application is alive.

        Returns:
            Liveness status with timestamp.
        """
        return {
            "status": "alive" if self._running else "dead",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    async def check_readiness(self) -> dict[str, Any]:
        """Check if the application is ready to serve traffic.

        Returns:
            Readiness status with component health details.
        """
        reaper_ok = self._reaper_loop.is_running
        db_ok = await self._db_manager.is_healthy()

        return {
            "ready": reaper_ok and db_ok,
            "reaper": reaper_ok,
            "database": db_ok,
        }

    async def _handle_live(self, request: web.Request) -> web.Response:
        """Handle /live endpoint."""
        result = await self.check_liveness()
        return web.json_response(result)

    async def _handle_ready(self, request: web.Request) -> web.Response:
        """Handle /ready endpoint."""
        result = await self.check_readiness()
        status = 200 if result["ready"] else 503
        return web.json_response(result, status=status)

    async def start(self) -> None:
        """Start the HTTP server."""
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()

        self._site = web.TCPSite(self._runner, self._host, self._port)
        await self._site.start()

        # Get actual port (useful when port=0 for dynamic allocation)
        if self._site._server is not None:
            sockets = self._site._server.sockets  # type: ignore[union-attr]
            if sockets:
                self._actual_port = sockets[0].getsockname()[1]

        self._running = True
        logger.info("HTTP server started on %s:%d", self._host, self.port)

    async def stop(self) -> None:
        """Stop the HTTP server."""
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
            self._site = None

        self._running = False
        logger.info("HTTP server stopped")
