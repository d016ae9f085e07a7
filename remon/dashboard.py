"""Interactive remote dashboard: live CPU chart, memory gauges and disk list.

A single loop alternates three steps each tick: refresh metrics when the
interval has elapsed, paint a frame, then wait briefly for a key.  The input
wait is short and independent of the refresh interval so the screen stays
responsive while metrics update slowly.

Keys: ``q`` quits, ``s`` saves a screenshot.
"""

from __future__ import annotations

import curses
import locale
import logging
import time
from collections.abc import Callable
from enum import Enum
from typing import Any

from remon.config import DEFAULT_CONFIG
from remon.executor import Executor
from remon.history import History
from remon.render import Frame, build_frame
from remon.scheduler import DashboardState, is_due, refresh
from remon.snapshot import capture_and_notify
from remon.tui import draw_frame, init_colors

logger = logging.getLogger(__name__)

QUIT_KEYS = (ord("q"), ord("Q"))
SNAPSHOT_KEYS = (ord("s"), ord("S"))


class LoopState(Enum):
    RUNNING = "running"
    EXITING = "exiting"


def handle_key(
    stdscr: Any,
    key: int,
    on_snapshot: Callable[[Any], Any],
) -> LoopState:
    """Dispatch one key press and return the loop's next state."""
    if key in QUIT_KEYS:
        return LoopState.EXITING
    if key in SNAPSHOT_KEYS:
        on_snapshot(stdscr)
    elif key == curses.KEY_RESIZE:
        stdscr.clear()
    return LoopState.RUNNING


def event_loop(
    stdscr: Any,
    executor: Executor,
    interval: float,
    *,
    commands: list[str] | tuple[str, ...],
    history_size: int = 100,
    input_timeout_ms: int = 200,
    thresholds: dict[str, Any] | None = None,
    on_snapshot: Callable[[Any], Any] = capture_and_notify,
    draw: Callable[[Any, Frame], None] = draw_frame,
    clock: Callable[[], float] = time.monotonic,
) -> DashboardState:
    """Run the dashboard until a quit key is pressed; return the final state."""
    state = DashboardState(history=History(capacity=history_size))
    stdscr.timeout(input_timeout_ms)
    loop_state = LoopState.RUNNING

    while loop_state is LoopState.RUNNING:
        now = clock()
        if is_due(now, state.last_refresh, interval):
            refresh(state, executor, now, commands)

        max_y, max_x = stdscr.getmaxyx()
        draw(stdscr, build_frame(state.snapshot, state.history, max_x, max_y, thresholds))

        key = stdscr.getch()
        if key != -1:
            loop_state = handle_key(stdscr, key, on_snapshot)

    return state


def _dashboard_main(stdscr: Any, executor: Executor, interval: float, config: dict[str, Any]) -> None:
    init_colors()
    curses.curs_set(0)
    screenshot_dir = config.get("screenshot_dir", DEFAULT_CONFIG["screenshot_dir"])
    event_loop(
        stdscr,
        executor,
        interval,
        commands=config.get("commands", DEFAULT_CONFIG["commands"])["dashboard"],
        history_size=int(config.get("history_size", DEFAULT_CONFIG["history_size"])),
        input_timeout_ms=int(config.get("input_timeout_ms", DEFAULT_CONFIG["input_timeout_ms"])),
        thresholds=config.get("thresholds", DEFAULT_CONFIG["thresholds"]),
        on_snapshot=lambda scr: capture_and_notify(scr, screenshot_dir),
    )


def run_dashboard(
    executor: Executor,
    refresh_interval: float,
    config: dict[str, Any] | None = None,
) -> None:
    """Show the dashboard until the user quits.

    Terminal modes are restored on every exit path, including errors, which
    propagate to the caller.
    """
    locale.setlocale(locale.LC_ALL, "")
    logger.info("dashboard started, refreshing every %gs", refresh_interval)
    try:
        curses.wrapper(_dashboard_main, executor, refresh_interval, config or DEFAULT_CONFIG)
    except KeyboardInterrupt:
        pass
    logger.info("dashboard stopped")
