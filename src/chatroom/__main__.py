"""アプリケーションのエントリポイント"""

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path

from chatroom.application.services import ReaperLoop, RoomService
from chatroom.config import ConfigError, LoggingConfig, load_config
from chatroom.domain.services import SystemClock
from chatroom.infrastructure.http.server import RoomHttpServer
from chatroom.infrastructure.persistence import (
    DatabaseManager,
    SQLiteMessageStore,
    SQLitePresenceRegistry,
)
from chatroom.presentation import register_routes

# Default logging for early startup
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def configure_logging(config: LoggingConfig | None) -> None:
    """Configure logging based on config.

    Args:
        config: Logging configuration. If None, uses defaults.
    """
    if config is None:
        return

    root_logger = logging.getLogger()

    level = getattr(logging, config.level.upper(), logging.INFO)
    root_logger.setLevel(level)

    # Update handler format if specified
    if root_logger.handlers:
        formatter = logging.Formatter(config.format)
        for handler in root_logger.handlers:
            handler.setFormatter(formatter)

    # Configure individual loggers
    if config.loggers:
        for logger_name, logger_level in config.loggers.items():
            individual_logger = logging.getLogger(logger_name)
            individual_level = getattr(logging, logger_level.upper(), logging.INFO)
            individual_logger.setLevel(individual_level)
            logger.debug(
                "Set logger '%s' to level %s", logger_name, logger_level.upper()
            )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """コマンドライン引数を解析する"""
    parser = argparse.ArgumentParser(prog="chatroom", description="Chat room server")
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("config.yaml"),
        help="Path to the YAML config file (default: config.yaml)",
    )
    return parser.parse_args(argv)


async def main(config_path: Path) -> None:
    """アプリケーションを起動する"""
    if not config_path.exists():
        logger.error("%s not found", config_path)
        sys.exit(1)

    try:
        config = load_config(config_path)
    except ConfigError as e:
        logger.error("Failed to load config: %s", e)
        sys.exit(1)

    configure_logging(config.logging)

    # Initialize database
    db_manager = DatabaseManager(config.database.path)
    await db_manager.create_tables()

    clock = SystemClock()
    presence_registry = SQLitePresenceRegistry(db_manager.get_session, clock)
    message_store = SQLiteMessageStore(db_manager.get_session)

    # Monotonic last_seen values from a previous process are meaningless
    cleared = await presence_registry.clear()
    if cleared:
        logger.info("Cleared %d presence records from a previous run", cleared)

    room_service = RoomService(
        presence_registry=presence_registry,
        message_store=message_store,
        clock=clock,
        config=config.messages,
    )
    reaper_loop = ReaperLoop(
        presence_registry=presence_registry,
        message_store=message_store,
        clock=clock,
        config=config.reaper,
    )

    server = RoomHttpServer(
        reaper_loop=reaper_loop,
        db_manager=db_manager,
        host=config.server.host,
        port=config.server.port,
    )
    register_routes(server.app, room_service)

    reaper_task = asyncio.create_task(reaper_loop.start())
    await server.start()

    # Setup signal handlers for graceful shutdown
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()

    def shutdown_handler() -> None:
        logger.info("Received shutdown signal...")
        stop_event.set()

    loop.add_signal_handler(signal.SIGINT, shutdown_handler)
    loop.add_signal_handler(signal.SIGTERM, shutdown_handler)

    await stop_event.wait()

    logger.info("Shutting down...")

    await reaper_loop.stop()
    await server.stop()

    try:
        await asyncio.wait_for(reaper_task, timeout=5.0)
    except asyncio.TimeoutError:
        logger.warning("Reaper did not stop in time, cancelling...")
        reaper_task.cancel()
        await asyncio.gather(reaper_task, return_exceptions=True)

    await db_manager.close()

    logger.info("Shutdown complete")


def run(argv: list[str] | None = None) -> None:
    """Run the async main function."""
    args = parse_args(argv)
    try:
        asyncio.run(main(args.config))
    except KeyboardInterrupt:
        logger.info("Shutting down...")


if __name__ == "__main__":
    run()
