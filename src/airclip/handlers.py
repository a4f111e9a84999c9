#!/usr/bin/env python3
"""HTTP request handlers for the notification server.

The /notify handler runs the admission checks in order (CORS preflight,
source address, method, bearer token), reads the body and hands it to the
dispatcher. The /health handler always reports the server as running.
"""

from __future__ import annotations

import asyncio
import logging

from aiohttp import web
from aiohttp.http_exceptions import HttpProcessingError

from airclip.access_guard import get_client_ip, is_authorized, is_local_ip
from airclip.config import ServerConfig
from airclip.dispatcher import DispatchError, Dispatcher, dispatch
from airclip.server_constants import (
    MSG_EMPTY,
    MSG_FORBIDDEN,
    MSG_METHOD_NOT_ALLOWED,
    MSG_READ_ERROR,
    MSG_RUNNING,
    MSG_SENT,
    MSG_UNAUTHORIZED,
    READ_TIMEOUT,
)

logger = logging.getLogger(__name__)

CONFIG_KEY = web.AppKey("config", ServerConfig)
DISPATCHER_KEY = web.AppKey("dispatcher", Dispatcher)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}

# Errors meaning the body could not be read in full.
BODY_READ_ERRORS = (
    asyncio.TimeoutError,
    ConnectionError,
    HttpProcessingError,
    web.HTTPRequestEntityTooLarge,
)


def _text(status: int, text: str, cors: bool = False) -> web.Response:
    """Build a plain-text response, with CORS headers if requested."""
    headers = CORS_HEADERS if cors else None
    return web.Response(status=status, text=text, headers=headers)


async def handle_notification(request: web.Request) -> web.Response:
    """Copy the request body to the clipboard and raise a notification.

    Args:
        request: Incoming request on /notify.

    Returns:
        200 on success; 400, 401, 403, 405 or 500 as described by the
        response text otherwise.
    """
    config = request.app[CONFIG_KEY]
    dispatcher = request.app[DISPATCHER_KEY]
    client_ip = get_client_ip(request.headers, request.remote)

    if config.cors and request.method == "OPTIONS":
        logger.info("Answered CORS preflight from %s", client_ip)
        return _text(200, "", cors=True)

    if config.local_only and not is_local_ip(client_ip):
        logger.warning("Rejected non-local request from %s", client_ip)
        return _text(403, MSG_FORBIDDEN)

    if request.method != "POST":
        logger.warning("Rejected %s request from %s", request.method, client_ip)
        return _text(405, MSG_METHOD_NOT_ALLOWED, config.cors)

    if not is_authorized(request.headers, config.token):
        logger.warning("Unauthorized access attempt from %s", client_ip)
        return _text(401, MSG_UNAUTHORIZED, config.cors)

    try:
        body = await asyncio.wait_for(request.read(), timeout=READ_TIMEOUT)
    except BODY_READ_ERRORS as e:
        logger.error("Error reading request body: %r", e)
        return _text(400, MSG_READ_ERROR, config.cors)

    if not body:
        logger.warning("Rejected empty message from %s", client_ip)
        return _text(400, MSG_EMPTY, config.cors)

    logger.info("Received notification request from %s: %d bytes", client_ip, len(body))

    try:
        await dispatch(dispatcher, body)
    except DispatchError as e:
        logger.error("Error processing notification: %s", e)
        return _text(500, f"Error: {e}\n", config.cors)

    logger.info("Notification delivered for %s", client_ip)
    return _text(200, MSG_SENT, config.cors)


async def handle_health(request: web.Request) -> web.Response:
    """Report that the server is up, for any method."""
    logger.info("Health check from %s", get_client_ip(request.headers, request.remote))
    return _text(200, MSG_RUNNING)
