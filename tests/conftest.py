#!/usr/bin/env python3
"""Pytest fixtures for airclip tests.

Provides a fake dispatcher standing in for the clipboard and notification
tools, a default configuration and a helper serving the application on a
local test server.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import pytest
from aiohttp.test_utils import TestClient, TestServer

from airclip.config import ServerConfig
from airclip.dispatcher import DispatchError
from airclip.server import build_app

TOKEN = "local-use-only"
AUTH = {"Authorization": f"Bearer {TOKEN}"}


class FakeDispatcher:
    """Dispatcher recording payloads instead of running external tools.

    Attributes:
        copied: Payloads passed to copy_to_clipboard, in order.
        notified: Number of notifications raised.
        started: Set when a copy begins.
    """

    def __init__(
        self,
        copy_error: str | None = None,
        notify_error: str | None = None,
        delay: float = 0.0,
    ) -> None:
        self.copy_error = copy_error
        self.notify_error = notify_error
        self.delay = delay
        self.copied: list[bytes] = []
        self.notified = 0
        self.started = asyncio.Event()

    async def copy_to_clipboard(self, payload: bytes) -> None:
        self.started.set()
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.copy_error:
            raise DispatchError(self.copy_error)
        self.copied.append(payload)

    async def notify(self) -> None:
        if self.notify_error:
            raise DispatchError(self.notify_error)
        self.notified += 1


@asynccontextmanager
async def serve_app(
    config: ServerConfig, dispatcher: FakeDispatcher
) -> AsyncIterator[TestClient]:
    """Serve the application on 127.0.0.1 and yield a client for it."""
    client = TestClient(TestServer(build_app(config, dispatcher)))
    await client.start_server()
    try:
        yield client
    finally:
        await client.close()


@pytest.fixture
def config() -> ServerConfig:
    """Default configuration: local-only, CORS on, token set."""
    return ServerConfig(listen="127.0.0.1", token=TOKEN)


@pytest.fixture
def dispatcher() -> FakeDispatcher:
    """Create a fresh FakeDispatcher that always succeeds."""
    return FakeDispatcher()
