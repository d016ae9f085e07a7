"""Curses painting of a computed :class:`~remon.render.Frame`."""

from __future__ import annotations

import curses
from typing import Any

from remon.render import (
    C_BLUE,
    C_CRITICAL,
    C_DIM,
    C_NORMAL,
    C_TITLE,
    C_WARNING,
    ChartPanel,
    Frame,
    GaugePanel,
    HeaderPanel,
    ListPanel,
    Panel,
    bar_segments,
)

# ── Colour helpers ─────────────────────────────────────────────────────────


def init_colors() -> None:
    curses.start_color()
    curses.use_default_colors()
    curses.init_pair(C_NORMAL, curses.COLOR_GREEN, -1)
    curses.init_pair(C_WARNING, curses.COLOR_YELLOW, -1)
    curses.init_pair(C_CRITICAL, curses.COLOR_RED, -1)
    curses.init_pair(C_TITLE, curses.COLOR_CYAN, -1)
    curses.init_pair(C_DIM, curses.COLOR_WHITE, -1)
    curses.init_pair(C_BLUE, curses.COLOR_BLUE, -1)


# ── Curses drawing primitives ──────────────────────────────────────────────


def safe_addstr(win: Any, *args: Any) -> None:
    """addstr wrapper that swallows out-of-bounds errors."""
    try:
        win.addstr(*args)
    except curses.error:
        pass


def draw_box(
    win: Any,
    y: int,
    x: int,
    h: int,
    w: int,
    title: str = "",
) -> Any | None:
    """Draw a bordered box and return the inner sub-window."""
    max_y, max_x = win.getmaxyx()
    h = min(h, max_y - y)
    w = min(w, max_x - x)
    if h < 3 or w < 4:
        return None
    try:
        sub = win.subwin(h, w, y, x)
        sub.box()
        if title and len(title) + 4 < w:
            sub.addstr(0, 2, f" {title} ", curses.color_pair(C_TITLE) | curses.A_BOLD)
        return sub
    except curses.error:
        return None


def draw_bar(
    win: Any,
    y: int,
    x: int,
    width: int,
    pct: float,
    label: str = "",
    color: int = C_NORMAL,
) -> None:
    """Render ``label ████░░░░  42%`` on one line."""
    max_y, max_x = win.getmaxyx()
    if y >= max_y - 1 or x >= max_x - 1:
        return

    cx = x
    if label:
        safe_addstr(win, y, cx, f"{label:>7s} ", curses.color_pair(C_DIM))
        cx += 8

    suffix = f" {pct:3.0f}%"
    bar_w = min(width - (cx - x) - len(suffix), max_x - cx - len(suffix) - 1)
    if bar_w < 3:
        return

    filled, empty = bar_segments(pct, bar_w)
    safe_addstr(win, y, cx, filled, curses.color_pair(color) | curses.A_BOLD)
    safe_addstr(win, empty, curses.color_pair(C_DIM))
    safe_addstr(win, suffix, curses.color_pair(color) | curses.A_BOLD)


# ── Panel painters ─────────────────────────────────────────────────────────


def _paint_header(win: Any, panel: HeaderPanel) -> None:
    r = panel.rect
    box = draw_box(win, r.y, r.x, r.height, r.width, panel.title)
    if not box:
        return
    width = r.inner_width
    text = panel.text[:width]
    safe_addstr(box, 1, 1, text)
    if len(text) + 1 + len(panel.hint) <= width:
        safe_addstr(box, 1, 2 + len(text), panel.hint, curses.color_pair(C_DIM))


def _paint_chart(win: Any, panel: ChartPanel) -> None:
    r = panel.rect
    box = draw_box(win, r.y, r.x, r.height, r.width, panel.title)
    if not box:
        return
    for i, row in enumerate(panel.rows):
        safe_addstr(box, 1 + i, 1, row, curses.color_pair(panel.color))


def _paint_gauges(win: Any, panel: GaugePanel) -> None:
    r = panel.rect
    box = draw_box(win, r.y, r.x, r.height, r.width, panel.title)
    if not box:
        return
    for i, gauge in enumerate(panel.gauges[: r.inner_height]):
        draw_bar(box, 1 + i, 1, r.width - 3, gauge.percent, gauge.label, gauge.color)


def _paint_list(win: Any, panel: ListPanel) -> None:
    r = panel.rect
    box = draw_box(win, r.y, r.x, r.height, r.width, panel.title)
    if not box:
        return
    rows = r.inner_height
    items = panel.items
    if len(items) > rows > 0:
        shown = items[: rows - 1]
        more = f"... +{len(items) - len(shown)} more"
    else:
        shown, more = items, ""
    for i, item in enumerate(shown):
        safe_addstr(box, 1 + i, 1, item.text[: r.inner_width], curses.color_pair(item.color))
    if more:
        safe_addstr(box, 1 + len(shown), 1, more[: r.inner_width], curses.color_pair(C_DIM))


_PAINTERS = {
    HeaderPanel: _paint_header,
    ChartPanel: _paint_chart,
    GaugePanel: _paint_gauges,
    ListPanel: _paint_list,
}


def paint_panel(win: Any, panel: Panel) -> None:
    _PAINTERS[type(panel)](win, panel)


def draw_frame(stdscr: Any, frame: Frame) -> None:
    """Clear the screen and paint every panel of *frame*."""
    stdscr.erase()
    if frame.notice:
        safe_addstr(stdscr, 0, 0, frame.notice[: max(0, frame.width - 1)])
    for panel in frame.panels:
        paint_panel(stdscr, panel)
    stdscr.refresh()


def draw_popup(stdscr: Any, message: str, color: int = C_NORMAL) -> None:
    """Draw *message* in a bordered box centred on the screen."""
    max_y, max_x = stdscr.getmaxyx()
    width = min(len(message) + 4, max_x)
    height = 3
    y = max(0, (max_y - height) // 2)
    x = max(0, (max_x - width) // 2)
    box = draw_box(stdscr, y, x, height, width)
    if not box:
        return
    box.erase()
    box.box()
    safe_addstr(box, 1, 2, message[: max(0, width - 4)], curses.color_pair(color))
    stdscr.refresh()
