#!/usr/bin/env python3
"""Immutable server configuration.

This module provides the ServerConfig dataclass built once by the CLI and
handed to the HTTP application and the lifecycle controller.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ServerConfig:
    """Options for one server run.

    Attributes:
        listen: IP address to bind.
        port: TCP port to bind.
        token: Shared secret expected in the Authorization header. An empty
            string disables the token check.
        local_only: Reject clients outside loopback and private ranges.
        cors: Answer CORS preflight requests and add CORS headers.
        log_dir: Directory for the per-run log file.
    """

    listen: str = "0.0.0.0"
    port: int = 9123
    token: str = "local-use-only"
    local_only: bool = True
    cors: bool = True
    log_dir: str = "/tmp"

    @property
    def address(self) -> str:
        """Return the listen address in host:port form."""
        if ":" in self.listen:
            return f"[{self.listen}]:{self.port}"
        return f"{self.listen}:{self.port}"
