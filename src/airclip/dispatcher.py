#!/usr/bin/env python3
"""Clipboard and desktop notification dispatch.

A notification is delivered in two steps: the payload is placed on the
system clipboard, then a desktop notification announces the copy. The
notification is only attempted after the clipboard step succeeded.

The payload reaches the clipboard tool on its standard input, unmodified,
without a shell in between.
"""

from __future__ import annotations

import asyncio
import logging
import subprocess
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

logger = logging.getLogger(__name__)

CLIPBOARD_COMMAND: tuple[str, ...] = ("xclip", "-selection", "clipboard")

NOTIFY_COMMAND: tuple[str, ...] = (
    "notify-send",
    "--app-name=NotificationServer",
    "--icon=dialog-information",
    "Text copied to clipboard from Airclip",
)


class DispatchError(Exception):
    """
    Exception raised when the clipboard or notification step fails.

    The message is returned to the HTTP client verbatim.
    """

    pass


class Dispatcher(Protocol):
    """Delivers a payload to the desktop session."""

    async def copy_to_clipboard(self, payload: bytes) -> None:
        """Place payload on the clipboard or raise DispatchError."""
        ...

    async def notify(self) -> None:
        """Raise the desktop notification or raise DispatchError."""
        ...


async def dispatch(dispatcher: Dispatcher, payload: bytes) -> None:
    """Copy payload to the clipboard, then raise the notification.

    Args:
        dispatcher: Dispatcher performing both steps.
        payload: Raw request body.

    Raises:
        DispatchError: If either step fails. The notification is skipped
            when the clipboard step fails.
    """
    await dispatcher.copy_to_clipboard(payload)
    await dispatcher.notify()


class ExecDispatcher:
    """Dispatcher running the clipboard and notification tools as processes.

    Attributes:
        clipboard_command: argv of the clipboard setter, reading stdin.
        notify_command: argv of the desktop notifier.
        env_factory: Returns the environment for the child processes.
    """

    def __init__(
        self,
        env_factory: Callable[[], dict[str, str]],
        clipboard_command: Sequence[str] = CLIPBOARD_COMMAND,
        notify_command: Sequence[str] = NOTIFY_COMMAND,
    ) -> None:
        self.env_factory = env_factory
        self.clipboard_command = tuple(clipboard_command)
        self.notify_command = tuple(notify_command)

    async def copy_to_clipboard(self, payload: bytes) -> None:
        env = self.env_factory()
        if not env.get("DISPLAY"):
            raise DispatchError(
                "failed to copy to clipboard: DISPLAY environment variable is not set"
            )

        # xclip forks to keep serving the selection; its inherited output
        # pipes would stay open, so both go to /dev/null.
        returncode, _ = await _run(
            self.clipboard_command,
            env,
            stdin_data=payload,
            capture_stderr=False,
            action="copy to clipboard",
        )
        if returncode != 0:
            raise DispatchError(
                f"failed to copy to clipboard: {self.clipboard_command[0]} "
                f"exited with status {returncode}"
            )
        logger.debug("Copied %d bytes to clipboard", len(payload))

    async def notify(self) -> None:
        returncode, stderr = await _run(
            self.notify_command, self.env_factory(), action="send notification"
        )
        if returncode != 0:
            detail = f": {stderr}" if stderr else ""
            raise DispatchError(
                f"failed to send notification: {self.notify_command[0]} "
                f"exited with status {returncode}{detail}"
            )


async def _run(
    argv: Sequence[str],
    env: dict[str, str],
    *,
    action: str,
    stdin_data: bytes | None = None,
    capture_stderr: bool = True,
) -> tuple[int, str]:
    """Run a command to completion.

    Args:
        argv: Command and arguments, executed without a shell.
        env: Environment for the child process.
        action: Short description used in error messages.
        stdin_data: Bytes written to the child's stdin, if any.
        capture_stderr: Whether to collect stderr for error messages.

    Returns:
        Tuple of (exit status, stripped stderr text).

    Raises:
        DispatchError: If the command cannot be started.
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdin=subprocess.PIPE if stdin_data is not None else subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE if capture_stderr else subprocess.DEVNULL,
            env=env,
        )
    except FileNotFoundError as e:
        raise DispatchError(f"failed to {action}: {argv[0]} not found") from e
    except OSError as e:
        raise DispatchError(f"failed to {action}: {e}") from e

    _, stderr = await proc.communicate(stdin_data)
    text = stderr.decode("utf-8", errors="replace").strip() if stderr else ""
    return proc.returncode, text
