#!/usr/bin/env python3
"""Process lifecycle: signals, shutdown coordination and exit codes.

The server moves through starting, serving, draining and stopped. Two
independent triggers start the drain: SIGINT/SIGTERM, or an unhandled
exception reported to the event loop. Any further signal while shutdown is
already under way requests a forced exit, which terminates the process at
once with EXIT_INTERRUPT instead of waiting for the drain to finish.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import os
import signal
from contextlib import suppress
from typing import TYPE_CHECKING, Any

from airclip.server import ServerFailure, ShutdownTimeoutError, run_server
from airclip.server_constants import EXIT_ERROR, EXIT_INTERRUPT, EXIT_OK

if TYPE_CHECKING:
    from airclip.config import ServerConfig
    from airclip.dispatcher import Dispatcher

logger = logging.getLogger(__name__)

HANDLED_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ServerState(enum.Enum):
    """Lifecycle states of the listener."""

    STARTING = "starting"
    SERVING = "serving"
    DRAINING = "draining"
    STOPPED = "stopped"


class ShutdownController:
    """Shutdown coordination shared by the signal handlers and the listener.

    Attributes:
        requested: Set once a graceful shutdown has been requested.
        forced: Set when a signal arrives while shutdown is under way.
        cause: Description or exception that requested the shutdown.
        failure: The server-level exception that requested the shutdown,
            if that was the trigger.
        state: Current lifecycle state.
    """

    def __init__(self) -> None:
        self.requested = asyncio.Event()
        self.forced = asyncio.Event()
        self.cause: str | BaseException | None = None
        self.failure: BaseException | None = None
        self.state = ServerState.STARTING

    def set_state(self, state: ServerState) -> None:
        logger.debug("Server state: %s -> %s", self.state.value, state.value)
        self.state = state

    def request(self, cause: str | BaseException) -> None:
        """Request a graceful shutdown. Only the first cause is kept."""
        if self.requested.is_set():
            return
        self.cause = cause
        self.requested.set()

    def fail(self, exc: BaseException) -> None:
        """Request a shutdown caused by a server-level error."""
        if self.requested.is_set():
            return
        logger.error("HTTP server failed: %s", exc)
        self.failure = exc
        self.request(exc)

    def handle_signal(self, signum: int) -> None:
        """React to SIGINT/SIGTERM: graceful first, forced afterwards."""
        if not self.requested.is_set():
            logger.info("Interrupt signal received, stopping gracefully")
            self.request("interrupt signal received")
            return
        logger.info("Interrupt signal received again, stopping immediately")
        self.forced.set()

    def handle_loop_exception(
        self, loop: asyncio.AbstractEventLoop, context: dict[str, Any]
    ) -> None:
        """Event loop exception handler turning unhandled errors into shutdown.

        Connection-level errors are only logged; aiohttp recovers from them.
        """
        loop.default_exception_handler(context)
        exc = context.get("exception")
        if exc is None or isinstance(exc, ConnectionError):
            return
        self.fail(exc)


def hard_exit(code: int) -> None:
    """Terminate the process immediately, skipping cleanup handlers."""
    logging.shutdown()
    os._exit(code)


async def _exit_when_forced(controller: ShutdownController) -> None:
    await controller.forced.wait()
    hard_exit(EXIT_INTERRUPT)


async def run_lifecycle(
    config: ServerConfig,
    dispatcher: Dispatcher,
    controller: ShutdownController | None = None,
) -> int:
    """Run the server until shutdown and return the process exit code.

    Args:
        config: Server configuration.
        dispatcher: Clipboard and notification dispatcher.
        controller: Shutdown coordination. A new one is created if omitted.

    Returns:
        EXIT_OK after a clean shutdown, EXIT_ERROR if binding failed, a
        server-level error occurred or the drain timed out. A forced exit
        never returns; it terminates with EXIT_INTERRUPT.
    """
    controller = controller or ShutdownController()
    loop = asyncio.get_running_loop()
    for sig in HANDLED_SIGNALS:
        loop.add_signal_handler(sig, controller.handle_signal, sig)
    previous_handler = loop.get_exception_handler()
    loop.set_exception_handler(controller.handle_loop_exception)
    force_task = asyncio.create_task(_exit_when_forced(controller))

    try:
        await run_server(config, dispatcher, controller)
    except (OSError, ServerFailure, ShutdownTimeoutError) as e:
        logger.error("Error running the server: %s", e)
        return EXIT_ERROR
    finally:
        for sig in HANDLED_SIGNALS:
            loop.remove_signal_handler(sig)
        loop.set_exception_handler(previous_handler)
        force_task.cancel()
        with suppress(asyncio.CancelledError):
            await force_task

    logger.info("Server shutdown completed")
    return EXIT_OK
