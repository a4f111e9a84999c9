#!/usr/bin/env python3
"""Local address listing for the startup banner.

Prints every IPv4 address of the active, non-loopback interfaces together
with the /notify URL a phone shortcut should post to.
"""

from __future__ import annotations

import logging
import socket

import psutil

logger = logging.getLogger(__name__)

BANNER_RULE = "-" * 58


def list_local_ipv4() -> list[tuple[str, str]]:
    """Enumerate IPv4 addresses of interfaces that are up.

    Returns:
        List of (interface name, address) pairs, loopback excluded.
    """
    stats = psutil.net_if_stats()
    found = []
    for name, addrs in psutil.net_if_addrs().items():
        iface = stats.get(name)
        if iface is None or not iface.isup:
            continue
        for addr in addrs:
            if addr.family != socket.AF_INET:
                continue
            if addr.address.startswith("127."):
                continue
            found.append((name, addr.address))
    return found


def log_local_addresses(port: int) -> None:
    """Log the reachable /notify URLs for each local IPv4 address.

    Args:
        port: Port the server listens on.
    """
    try:
        addresses = list_local_ipv4()
    except OSError as e:
        logger.error("Failed to get network interfaces: %s", e)
        return

    logger.info("Available local IP addresses to use in your iOS shortcut:")
    logger.info(BANNER_RULE)
    for name, address in addresses:
        logger.info(
            "Interface: %-10s  IP: %-15s  URL: http://%s:%d/notify",
            name, address, address, port,
        )
    logger.info(BANNER_RULE)
    logger.info("USE ONE OF THESE IPs IN YOUR iOS SHORTCUT")
