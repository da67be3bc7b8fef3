"""
Main entry point for the scheduled booking lifecycle worker.
Runs the five timed jobs until SIGINT / SIGTERM.
"""

import asyncio
import signal
import sys

from config import settings
from matching import get_matching_client
from notifications import get_notification_gateway
from scheduler import setup_scheduler, shutdown_scheduler
from utils.exceptions import ConfigurationError
from utils.logging_config import setup_logging

logger = setup_logging(
    name=__name__, log_level=settings.log_level, log_file="worker.log", log_dir="logs"
)


async def on_shutdown() -> None:
    """Stop the scheduler and close outbound clients."""
    shutdown_scheduler(wait=False)

    try:
        await get_matching_client().close()
        await get_notification_gateway().close()
        logger.info("Clients closed")
    except Exception as e:
        logger.error(f"Error closing clients: {e}", exc_info=True)


async def main() -> None:
    """Start the scheduler and wait for a stop signal."""
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Windows event loops have no signal handlers
            pass

    try:
        logger.info(f"Starting booking lifecycle worker ({settings.environment})...")
        setup_scheduler()
        await stop_event.wait()
        logger.info("Stop signal received")
    except asyncio.CancelledError:
        logger.info("Worker cancelled")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        raise
    finally:
        logger.info("Shutting down...")
        await on_shutdown()
        logger.info("Worker shutdown complete")


def run() -> None:
    """Validate configuration and run the worker."""
    try:
        settings.validate_all_required()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    for warning in settings.delivery_warnings():
        logger.warning(warning)

    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(0)


if __name__ == "__main__":
    run()
