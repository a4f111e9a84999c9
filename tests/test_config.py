#!/usr/bin/env python3
"""Tests for the immutable server configuration."""
import dataclasses

import pytest

from airclip.config import ServerConfig


def test_defaults_match_cli_defaults() -> None:
    """Test the dataclass defaults mirror the documented flag defaults."""
    config = ServerConfig()
    assert config.listen == "0.0.0.0"
    assert config.port == 9123
    assert config.token == "local-use-only"
    assert config.local_only is True
    assert config.cors is True
    assert config.log_dir == "/tmp"


def test_is_immutable() -> None:
    """Test fields cannot be reassigned after construction."""
    config = ServerConfig()
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.token = "changed"  # type: ignore[misc]


@pytest.mark.parametrize(
    ("listen", "expected"),
    [("0.0.0.0", "0.0.0.0:9123"), ("::1", "[::1]:9123"), ("192.168.1.2", "192.168.1.2:9123")],
)
def test_address(listen: str, expected: str) -> None:
    """Test the host:port rendering brackets IPv6 addresses."""
    assert ServerConfig(listen=listen).address == expected
