#!/usr/bin/env python3
"""Admission checks for incoming notification requests.

The guard combines two independent checks, both decided before any side
effect occurs:
- Source address classification: loopback, the RFC 1918 private ranges and
  link-local unicast addresses count as local.
- Bearer token comparison against the configured shared secret.

The client address is taken from the first X-Forwarded-For entry when that
header is present. The header is not verified against a list of known
proxies, so any client able to reach the port can claim a local address
through it.
"""

from __future__ import annotations

import hmac
import ipaddress
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

FORWARDED_FOR_HEADER = "X-Forwarded-For"

PRIVATE_NETWORKS = (
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
)


def get_client_ip(headers: Mapping[str, str], peer: str | None) -> str:
    """Return the address the request claims to come from.

    Args:
        headers: Request headers.
        peer: Address of the socket peer, or None if unknown.

    Returns:
        The first X-Forwarded-For entry if the header is present and
        non-empty, otherwise the peer address (empty string if unknown).
    """
    forwarded = headers.get(FORWARDED_FOR_HEADER, "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return peer or ""


def is_local_ip(address: str) -> bool:
    """Check whether an address belongs to the local network.

    Args:
        address: Textual IPv4 or IPv6 address. A zone suffix such as
            "%eth0" is ignored.

    Returns:
        True for loopback, link-local (169.254/16, fe80::/10), 10/8,
        172.16/12 and 192.168/16 addresses, False for anything else including unparseable input.
    """
    try:
        ip = ipaddress.ip_address(address.split("%", 1)[0])
    except ValueError:
        return False

    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped

    if ip.is_loopback or ip.is_link_local:
        return True
    return any(ip in network for network in PRIVATE_NETWORKS)


def is_authorized(headers: Mapping[str, str], token: str) -> bool:
    """Check the Authorization header against the configured token.

    Args:
        headers: Request headers.
        token: Configured shared secret. Empty disables the check.

    Returns:
        True if no token is configured or the header is exactly
        "Bearer <token>".
    """
    if not token:
        return True
    provided = headers.get("Authorization", "")
    # Header values carry undecodable bytes as lone surrogates.
    expected = f"Bearer {token}"
    return hmac.compare_digest(
        provided.encode("utf-8", "surrogateescape"),
        expected.encode("utf-8", "surrogateescape"),
    )
