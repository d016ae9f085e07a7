"""Screenshot hand-off for the dashboard's ``s`` key."""

from __future__ import annotations

import curses
import logging
import shutil
import subprocess
import sys
import time
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any

from remon.render import C_CRITICAL, C_NORMAL
from remon.tui import draw_popup

logger = logging.getLogger(__name__)

NOTICE_SECONDS = 2.0
SETTLE_SECONDS = 0.5


def screenshot_path(directory: Path, now: datetime) -> Path:
    return directory / f"remote_management_{now.strftime('%Y%m%d_%H%M%S')}.png"


def capture_command(path: Path, platform: str = sys.platform) -> list[str]:
    """Return the command that saves a screenshot to *path*, or [] if none."""
    if platform == "darwin" and shutil.which("screencapture"):
        return ["screencapture", "-x", str(path)]
    for cmd, args in [
        ("gnome-screenshot", ["gnome-screenshot", "-f", str(path)]),
        ("import", ["import", "-window", "root", str(path)]),
    ]:
        if shutil.which(cmd):
            return args
    return []


def _take(path: Path, platform: str, run: Callable[..., Any]) -> str | None:
    """Run the capture tool; return an error message or None on success."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return f"cannot create {path.parent}: {e.strerror or e}"
    cmd = capture_command(path, platform)
    if not cmd:
        return "no screenshot tool found"
    try:
        result = run(cmd, check=False, timeout=10, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    except (OSError, subprocess.TimeoutExpired) as e:
        return f"{cmd[0]} failed: {e}"
    if result.returncode != 0:
        return f"{cmd[0]} exited with status {result.returncode}"
    return None


def capture_and_notify(
    stdscr: Any,
    directory: str | Path = "screenshots",
    *,
    platform: str = sys.platform,
    run: Callable[..., Any] = subprocess.run,
    sleep: Callable[[float], None] = time.sleep,
    now: Callable[[], datetime] = datetime.now,
) -> Path | None:
    """Save a screenshot of the terminal and show a short popup about it.

    Curses mode is left while the capture runs so the screen holds the
    dashboard as the user sees it, then restored.
    """
    path = screenshot_path(Path(directory), now())

    curses.endwin()
    sleep(SETTLE_SECONDS)
    error = _take(path, platform, run)
    stdscr.refresh()

    if error is None:
        logger.info("screenshot saved to %s", path)
        draw_popup(stdscr, f"Screenshot saved to {path}", C_NORMAL)
    else:
        logger.warning("screenshot failed: %s", error)
        draw_popup(stdscr, f"Screenshot failed: {error}", C_CRITICAL)
    sleep(NOTICE_SECONDS)
    return path if error is None else None
