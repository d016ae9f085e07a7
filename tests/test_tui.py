"""Tests for remon.tui painting, with curses stubbed out."""

from __future__ import annotations

import curses
from unittest.mock import MagicMock, patch

import pytest

from remon.history import History
from remon.parser import DiskEntry, MetricsSnapshot
from remon.render import ListItem, ListPanel, Rect, build_frame
from remon.tui import draw_bar, draw_frame, draw_popup, paint_panel, safe_addstr


@pytest.fixture(autouse=True)
def fake_curses():
    with patch("remon.tui.curses") as mock_curses:
        mock_curses.error = curses.error
        mock_curses.color_pair.side_effect = lambda n: n << 8
        mock_curses.A_BOLD = 0
        yield mock_curses


def _window(rows: int = 30, cols: int = 80) -> MagicMock:
    win = MagicMock()
    win.getmaxyx.return_value = (rows, cols)
    sub = MagicMock()
    sub.getmaxyx.return_value = (rows, cols)
    win.subwin.return_value = sub
    return win


def _written(win: MagicMock) -> list[str]:
    texts = []
    for c in win.subwin.return_value.addstr.call_args_list:
        texts.extend(a for a in c.args if isinstance(a, str))
    return texts


def test_safe_addstr_swallows_curses_error() -> None:
    win = MagicMock()
    win.addstr.side_effect = curses.error
    safe_addstr(win, 0, 0, "text")


def test_draw_frame_paints_every_panel() -> None:
    snap = MetricsSnapshot(
        cpu_usage_percent=12.0,
        uptime_line="up 2 days, load average: 0.1, 0.2, 0.3",
        disk_entries=(DiskEntry("/", 1024, 512),),
    )
    win = _window()
    draw_frame(win, build_frame(snap, History(), 80, 30))

    win.erase.assert_called_once()
    win.refresh.assert_called_once()
    assert win.subwin.call_count == 4
    texts = _written(win)
    assert " CPU Usage: 12.0% " in texts
    assert "up 2 days, load average: 0.1, 0.2, 0.3" in texts
    assert "/: 512 B / 1.0 KiB (50%)" in texts


def test_draw_frame_notice_only() -> None:
    win = _window(5, 20)
    draw_frame(win, build_frame(MetricsSnapshot(), History(), 20, 5))
    win.subwin.assert_not_called()
    assert "Terminal too small" in win.addstr.call_args.args[2]


def test_list_overflow_shows_more_line() -> None:
    items = tuple(ListItem(f"/mnt/{i}") for i in range(6))
    win = _window()
    paint_panel(win, ListPanel(Rect(0, 0, 40, 5), "Disk Usage", items))
    texts = _written(win)
    assert texts.count("/mnt/0") == 1
    assert "/mnt/3" not in texts
    assert "... +4 more" in texts


def test_draw_bar_splits_fill() -> None:
    win = MagicMock()
    win.getmaxyx.return_value = (5, 40)
    draw_bar(win, 1, 1, 37, 50, "Memory")
    texts = [a for c in win.addstr.call_args_list for a in c.args if isinstance(a, str)]
    filled = next(t for t in texts if t.startswith("█"))
    empty = next(t for t in texts if t.startswith("░"))
    assert len(filled) == len(empty)
    assert texts[-1] == "  50%"


def test_popup_centred() -> None:
    win = _window(24, 80)
    draw_popup(win, "Screenshot saved to x.png")
    h, w, y, x = win.subwin.call_args.args
    assert (h, w) == (3, 29)
    assert (y, x) == (10, 25)
