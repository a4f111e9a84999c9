"""Desktop session discovery for the clipboard and notification tools.

The external tools only work when they can reach the user's graphical
session. This module provides:
- A startup probe that opens an X11 connection with python-xlib to report
  whether the display named by DISPLAY is reachable
- Discovery of an X authority file for Xwayland sessions when XAUTHORITY
  is not set
- Construction of the environment passed to the child processes
"""

from __future__ import annotations

import glob
import logging
import os

from Xlib import error as xerror

logger = logging.getLogger(__name__)

# Authority file patterns written by Xwayland under /run/user/<uid>.
XWAYLAND_AUTH_PATTERNS = ("*Xwayland*auth*", ".mutter-Xwaylandauth.*")


def probe_display(environ: dict[str, str] | None = None) -> bool:
    """Check whether the X11 display named by DISPLAY accepts connections.

    Unlike a hard startup requirement, an unreachable display is only
    reported, since the desktop session may start after the server.

    Args:
        environ: Environment to read DISPLAY and XAUTHORITY from. Defaults
            to the session environment built by session_env().

    Returns:
        True if a connection could be opened, False otherwise.
    """
    env = session_env() if environ is None else environ
    display_name = env.get("DISPLAY")
    if not display_name:
        logger.warning("DISPLAY is not set; clipboard copies will fail")
        return False

    from Xlib.display import Display

    previous = os.environ.get("XAUTHORITY")
    if env.get("XAUTHORITY"):
        os.environ["XAUTHORITY"] = env["XAUTHORITY"]
    try:
        display = Display(display_name)
    except (xerror.DisplayError, OSError) as e:
        logger.warning("Cannot connect to X11 display %s: %s", display_name, e)
        return False
    finally:
        if previous is None:
            os.environ.pop("XAUTHORITY", None)
        else:
            os.environ["XAUTHORITY"] = previous

    display.close()
    logger.debug("X11 display %s is reachable", display_name)
    return True


def find_xauthority(uid: int, home: str, runtime_root: str = "/run/user") -> str | None:
    """Locate an X authority file for the user's session.

    Xwayland authority files under /run/user/<uid> take precedence over
    ~/.Xauthority.

    Args:
        uid: Numeric user id owning the session.
        home: Home directory of that user.
        runtime_root: Parent of the per-user runtime directories.

    Returns:
        Path of the first existing authority file, or None.
    """
    runtime_dir = os.path.join(runtime_root, str(uid))
    for pattern in XWAYLAND_AUTH_PATTERNS:
        matches = sorted(glob.glob(os.path.join(runtime_dir, pattern)))
        if matches:
            return matches[0]

    fallback = os.path.join(home, ".Xauthority")
    if os.path.exists(fallback):
        return fallback
    return None


def session_env(environ: dict[str, str] | None = None) -> dict[str, str]:
    """Build the environment for the clipboard and notification tools.

    Args:
        environ: Base environment. Defaults to os.environ.

    Returns:
        A copy of the base environment with XAUTHORITY filled in when it
        was missing and an authority file could be found.
    """
    env = dict(os.environ if environ is None else environ)
    if not env.get("XAUTHORITY"):
        home = env.get("HOME") or os.path.expanduser("~")
        found = find_xauthority(os.getuid(), home)
        if found:
            env["XAUTHORITY"] = found
    return env
