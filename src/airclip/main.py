"""CLI handling for airclip.

This module provides the command-line interface for airclip, handling
argument parsing via click, logging configuration, and starting the
notification server with an immutable configuration.

Usage:
    airclip [--listen IP] [--port PORT] [--token TOKEN] [--no-local-only]
            [--no-cors] [--logdir DIR] [--verbose]
"""

import logging
import sys

import click

from airclip.config import ServerConfig
from airclip.main_logging import configure_logging
from airclip.main_options import IP_ADDRESS
from airclip.server_constants import EXIT_ERROR

logger = logging.getLogger(__name__)


@click.command()
@click.option(
    "--listen",
    default="0.0.0.0",
    show_default=True,
    type=IP_ADDRESS,
    envvar="AIRCLIP_LISTEN",
    help="IP address to listen on (use local IPs only)",
)
@click.option(
    "--port",
    default=9123,
    show_default=True,
    type=click.IntRange(1, 65535),
    envvar="AIRCLIP_PORT",
    help="HTTP port to listen on",
)
@click.option(
    "--token",
    default="local-use-only",
    show_default=True,
    envvar="AIRCLIP_TOKEN",
    help="Bearer token required in the Authorization header; empty disables the check",
)
@click.option(
    "--local-only/--no-local-only",
    default=True,
    show_default=True,
    envvar="AIRCLIP_LOCAL_ONLY",
    help="Restrict to local network connections only",
)
@click.option(
    "--cors/--no-cors",
    default=True,
    show_default=True,
    envvar="AIRCLIP_CORS",
    help="Enable CORS for cross-origin requests",
)
@click.option(
    "--logdir",
    default="/tmp",
    show_default=True,
    type=click.Path(file_okay=False),
    envvar="AIRCLIP_LOGDIR",
    help="Directory to store log files",
)
@click.option(
    "--verbose",
    is_flag=True,
    envvar="AIRCLIP_VERBOSE",
    help="Enable DEBUG-level logging",
)
def main(
    listen: str,
    port: int,
    token: str,
    local_only: bool,
    cors: bool,
    logdir: str,
    verbose: bool,
) -> None:
    """Copy text posted from the local network to the clipboard and notify."""
    config = ServerConfig(
        listen=listen,
        port=port,
        token=token,
        local_only=local_only,
        cors=cors,
        log_dir=logdir,
    )

    try:
        log_path = configure_logging(config.log_dir, verbose)
    except OSError as e:
        click.echo(f"Failed to open log file: {e}", err=True)
        sys.exit(EXIT_ERROR)

    sys.exit(_run(config, log_path))


def _run(config: ServerConfig, log_path: str) -> int:
    """Log the startup banner and run the server.

    Args:
        config: Server configuration.
        log_path: Path of the log file, shown in the banner.

    Returns:
        Process exit code.
    """
    import asyncio

    from airclip.display import probe_display, session_env
    from airclip.dispatcher import ExecDispatcher
    from airclip.lifecycle import run_lifecycle
    from airclip.local_addresses import log_local_addresses

    logger.info("Starting notification server (log file: %s)", log_path)
    if not config.local_only:
        logger.warning(
            "WARNING: Running with local-only protection disabled. This is not recommended."
        )
    log_local_addresses(config.port)
    probe_display()

    dispatcher = ExecDispatcher(env_factory=session_env)
    return asyncio.run(run_lifecycle(config, dispatcher))
