#!/usr/bin/env python3
"""HTTP listener for the notification server.

The listener binds the configured address, serves /notify and /health and,
once shutdown is requested, drains: it stops accepting connections and
gives in-flight requests SHUTDOWN_TIMEOUT seconds to finish. Requests still
running after that are cancelled and the drain is reported as failed.

Usage:
    airclip --listen 0.0.0.0 --port 9123
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from aiohttp import web

from airclip.handlers import CONFIG_KEY, DISPATCHER_KEY, handle_health, handle_notification
from airclip.server_constants import IDLE_TIMEOUT, MAX_BODY_SIZE, SHUTDOWN_TIMEOUT

if TYPE_CHECKING:
    from airclip.config import ServerConfig
    from airclip.dispatcher import Dispatcher
    from airclip.lifecycle import ShutdownController

logger = logging.getLogger(__name__)


class ShutdownTimeoutError(Exception):
    """Raised when in-flight requests outlive the drain timeout."""

    pass


class ServerFailure(Exception):
    """Raised after draining when a server-level error caused the shutdown."""

    pass


class InFlightTracker:
    """Counts running requests and those cut off by shutdown.

    Attributes:
        active: Number of requests currently being handled.
        aborted: Number of requests cancelled before completing.
    """

    def __init__(self) -> None:
        self.active = 0
        self.aborted = 0

    @web.middleware
    async def middleware(self, request: web.Request, handler):
        self.active += 1
        try:
            return await handler(request)
        except asyncio.CancelledError:
            self.aborted += 1
            raise
        finally:
            self.active -= 1


TRACKER_KEY = web.AppKey("in_flight", InFlightTracker)


def build_app(config: ServerConfig, dispatcher: Dispatcher) -> web.Application:
    """Create the aiohttp application serving /notify and /health.

    Args:
        config: Server configuration, shared read-only by the handlers.
        dispatcher: Clipboard and notification dispatcher.

    Returns:
        The configured application.
    """
    tracker = InFlightTracker()
    app = web.Application(
        middlewares=[tracker.middleware],
        client_max_size=MAX_BODY_SIZE,
    )
    app[CONFIG_KEY] = config
    app[DISPATCHER_KEY] = dispatcher
    app[TRACKER_KEY] = tracker
    app.router.add_route("*", "/notify", handle_notification)
    app.router.add_route("*", "/health", handle_health)
    return app


async def run_server(
    config: ServerConfig,
    dispatcher: Dispatcher,
    controller: ShutdownController,
) -> None:
    """Serve until shutdown is requested, then drain.

    Args:
        config: Server configuration.
        dispatcher: Clipboard and notification dispatcher.
        controller: Shutdown coordination shared with the lifecycle.

    Raises:
        OSError: If the listen address cannot be bound.
        ShutdownTimeoutError: If requests were still running at the end of
            the drain timeout.
        ServerFailure: If a server-level error requested the shutdown.
    """
    from airclip.lifecycle import ServerState

    app = build_app(config, dispatcher)
    tracker = app[TRACKER_KEY]
    runner = web.AppRunner(
        app,
        handle_signals=False,
        access_log=None,
        keepalive_timeout=IDLE_TIMEOUT,
        shutdown_timeout=SHUTDOWN_TIMEOUT,
    )
    await runner.setup()

    try:
        site = web.TCPSite(runner, config.listen, config.port)
        await site.start()
    except OSError:
        controller.set_state(ServerState.STOPPED)
        await runner.cleanup()
        raise

    controller.set_state(ServerState.SERVING)
    logger.info("Starting notification server on %s (LOCAL NETWORK USE ONLY)", config.address)

    await controller.requested.wait()
    logger.info("Shutdown requested: %s", controller.cause)

    controller.set_state(ServerState.DRAINING)
    logger.info("Shutting down server gracefully...")
    await runner.cleanup()
    controller.set_state(ServerState.STOPPED)

    # Cancelled handlers may not have unwound yet, so count both.
    cut_off = tracker.aborted + tracker.active
    if cut_off:
        raise ShutdownTimeoutError(
            f"server shutdown failed: {cut_off} request(s) still running "
            f"after {SHUTDOWN_TIMEOUT:g}s"
        )
    if controller.failure is not None:
        raise ServerFailure(f"HTTP server failed: {controller.failure}") from controller.failure
