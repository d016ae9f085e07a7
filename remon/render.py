"""Pure frame layout for the dashboard.

:func:`build_frame` maps a snapshot, the CPU history and the viewport size to
a :class:`Frame` of disjoint panels.  Nothing here touches curses; the
tui module only paints what this module computes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from remon.history import History
from remon.parser import DiskEntry, MetricsSnapshot

# ── Constants ──────────────────────────────────────────────────────────────

BAR_FILL = "█"
BAR_EMPTY = "░"
BRAILLE_BASE = 0x2800
HELP_HINT = "(Press 'q' to quit, 's' for snapshot)"

HEADER_HEIGHT = 3
CHART_HEIGHT = 10
GAUGE_HEIGHT = 4
MIN_WIDTH = 30
MIN_HEIGHT = 8

Y_MAX = 100.0

# Colour-pair IDs, initialised by the dashboard
C_NORMAL = 1
C_WARNING = 2
C_CRITICAL = 3
C_TITLE = 4
C_DIM = 5
C_BLUE = 6

DEFAULT_THRESHOLDS: dict[str, dict[str, float]] = {
    "cpu_percent": {"warning": 80.0, "critical": 95.0},
    "memory_percent": {"warning": 85.0, "critical": 95.0},
    "swap_percent": {"warning": 50.0, "critical": 80.0},
    "disk_percent": {"warning": 85.0, "critical": 95.0},
}

# Braille dot bits indexed by [row][col] inside one 2x4 cell
_BRAILLE_BITS = (
    (0x01, 0x08),
    (0x02, 0x10),
    (0x04, 0x20),
    (0x40, 0x80),
)


# ── Geometry & panel types ─────────────────────────────────────────────────


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int

    @property
    def inner_width(self) -> int:
        return max(0, self.width - 2)

    @property
    def inner_height(self) -> int:
        return max(0, self.height - 2)


@dataclass(frozen=True)
class HeaderPanel:
    rect: Rect
    title: str
    text: str
    hint: str = HELP_HINT


@dataclass(frozen=True)
class ChartPanel:
    rect: Rect
    title: str
    points: tuple[tuple[float, float], ...]
    x_bounds: tuple[float, float]
    y_bounds: tuple[float, float]
    rows: tuple[str, ...]
    color: int = C_BLUE


@dataclass(frozen=True)
class Gauge:
    label: str
    percent: int
    color: int = C_NORMAL


@dataclass(frozen=True)
class GaugePanel:
    rect: Rect
    title: str
    gauges: tuple[Gauge, ...]


@dataclass(frozen=True)
class ListItem:
    text: str
    color: int = C_NORMAL


@dataclass(frozen=True)
class ListPanel:
    rect: Rect
    title: str
    items: tuple[ListItem, ...]


Panel = HeaderPanel | ChartPanel | GaugePanel | ListPanel


@dataclass(frozen=True)
class Frame:
    width: int
    height: int
    panels: tuple[Panel, ...] = field(default_factory=tuple)
    notice: str = ""


# ── Formatting helpers ─────────────────────────────────────────────────────


def fmt_bytes(n: int | float) -> str:
    """Human-readable byte count (binary prefixes)."""
    v = float(n)
    if abs(v) < 1024:
        return f"{v:.0f} B"
    for unit in ("KiB", "MiB", "GiB", "TiB"):
        v /= 1024
        if abs(v) < 1024:
            return f"{v:.1f} {unit}"
    return f"{v / 1024:.1f} PiB"


def usage_percent(used: int, total: int) -> int:
    """Whole-number percentage of *used* in *total*, clamped to 0-100.

    A zero total yields 0 rather than a division error.
    """
    if total <= 0:
        return 0
    return max(0, min(100, int(used / total * 100)))


def severity_color(value: float, warn: float, crit: float) -> int:
    if value >= crit:
        return C_CRITICAL
    if value >= warn:
        return C_WARNING
    return C_NORMAL


def _threshold_color(value: float, thresholds: dict[str, Any], key: str) -> int:
    levels = thresholds.get(key, DEFAULT_THRESHOLDS.get(key, {}))
    warn = float(levels.get("warning", 100.0))
    crit = float(levels.get("critical", 100.0))
    return severity_color(value, warn, crit)


def bar_segments(percent: float, width: int) -> tuple[str, str]:
    """Split a bar of *width* cells into filled and empty parts."""
    if width <= 0:
        return "", ""
    filled = int(width * max(0.0, min(percent, 100.0)) / 100.0)
    return BAR_FILL * filled, BAR_EMPTY * (width - filled)


def disk_line(entry: DiskEntry) -> str:
    pct = usage_percent(entry.used_bytes, entry.total_bytes)
    return (
        f"{entry.mount_point}: {fmt_bytes(entry.used_bytes)} / "
        f"{fmt_bytes(entry.total_bytes)} ({pct}%)"
    )


# ── Chart ──────────────────────────────────────────────────────────────────


def chart_series(samples: list[float], current: float) -> list[float]:
    """Return the values to plot, padded to at least two points.

    A line needs two points, so a short history is extended with the
    current instantaneous value.
    """
    series = list(samples)
    if not series:
        series.append(current)
    if len(series) < 2:
        series.append(current)
    return series


def chart_points(series: list[float], width: float) -> list[tuple[float, float]]:
    """Spread *series* evenly across ``[0, width]`` on the X axis."""
    n = len(series)
    if n == 1:
        return [(0.0, series[0])]
    return [(i / (n - 1) * width, v) for i, v in enumerate(series)]


def _line_dots(x0: int, y0: int, x1: int, y1: int) -> list[tuple[int, int]]:
    """Bresenham line between two dot coordinates, inclusive."""
    dots: list[tuple[int, int]] = []
    dx, dy = abs(x1 - x0), -abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx + dy
    while True:
        dots.append((x0, y0))
        if x0 == x1 and y0 == y1:
            return dots
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x0 += sx
        if e2 <= dx:
            err += dx
            y0 += sy


def rasterize_braille(
    points: list[tuple[float, float]],
    cols: int,
    rows: int,
    x_bounds: tuple[float, float],
    y_bounds: tuple[float, float] = (0.0, Y_MAX),
) -> list[str]:
    """Draw *points* as a connected line on a braille grid of cols x rows cells."""
    if cols <= 0 or rows <= 0:
        return []
    dots_w, dots_h = cols * 2, rows * 4
    x_lo, x_hi = x_bounds
    y_lo, y_hi = y_bounds
    x_span = (x_hi - x_lo) or 1.0
    y_span = (y_hi - y_lo) or 1.0

    def to_dot(x: float, y: float) -> tuple[int, int]:
        fx = min(max((x - x_lo) / x_span, 0.0), 1.0)
        fy = min(max((y - y_lo) / y_span, 0.0), 1.0)
        return round(fx * (dots_w - 1)), round((1.0 - fy) * (dots_h - 1))

    cells = [[0] * cols for _ in range(rows)]
    dots = [to_dot(x, y) for x, y in points]
    segments = zip(dots, dots[1:]) if len(dots) > 1 else [(d, d) for d in dots]
    for (x0, y0), (x1, y1) in segments:
        for dx, dy in _line_dots(x0, y0, x1, y1):
            cells[dy // 4][dx // 2] |= _BRAILLE_BITS[dy % 4][dx % 2]

    return ["".join(chr(BRAILLE_BASE + c) if c else " " for c in row) for row in cells]


# ── Panels ─────────────────────────────────────────────────────────────────


def header_panel(snapshot: MetricsSnapshot, rect: Rect) -> HeaderPanel:
    return HeaderPanel(rect=rect, title="System", text=snapshot.uptime_line)


def chart_panel(
    snapshot: MetricsSnapshot,
    history: History,
    rect: Rect,
    thresholds: dict[str, Any],
) -> ChartPanel:
    series = chart_series(history.values(), snapshot.cpu_usage_percent)
    width = float(rect.width)
    points = chart_points(series, width)
    x_bounds = (0.0, width)
    y_bounds = (0.0, Y_MAX)
    rows = rasterize_braille(points, rect.inner_width, rect.inner_height, x_bounds, y_bounds)
    color = _threshold_color(snapshot.cpu_usage_percent, thresholds, "cpu_percent")
    if color == C_NORMAL:
        color = C_BLUE
    return ChartPanel(
        rect=rect,
        title=f"CPU Usage: {snapshot.cpu_usage_percent:.1f}%",
        points=tuple(points),
        x_bounds=x_bounds,
        y_bounds=y_bounds,
        rows=tuple(rows),
        color=color,
    )


def gauge_panel(snapshot: MetricsSnapshot, rect: Rect, thresholds: dict[str, Any]) -> GaugePanel:
    mem = usage_percent(snapshot.memory_used_bytes, snapshot.memory_total_bytes)
    swap = usage_percent(snapshot.swap_used_bytes, snapshot.swap_total_bytes)
    return GaugePanel(
        rect=rect,
        title="Memory",
        gauges=(
            Gauge("Memory", mem, _threshold_color(mem, thresholds, "memory_percent")),
            Gauge("Swap", swap, _threshold_color(swap, thresholds, "swap_percent")),
        ),
    )


def disk_panel(snapshot: MetricsSnapshot, rect: Rect, thresholds: dict[str, Any]) -> ListPanel:
    items = tuple(
        ListItem(
            disk_line(entry),
            _threshold_color(
                usage_percent(entry.used_bytes, entry.total_bytes), thresholds, "disk_percent"
            ),
        )
        for entry in snapshot.disk_entries
    )
    return ListPanel(rect=rect, title="Disk Usage", items=items)


def build_frame(
    snapshot: MetricsSnapshot,
    history: History,
    width: int,
    height: int,
    thresholds: dict[str, Any] | None = None,
) -> Frame:
    """Lay out header, CPU chart, memory gauges and disk list top to bottom.

    Panels are clipped to the viewport; ones that would have no rows left
    are dropped.  The disk list takes whatever height remains.
    """
    if width < MIN_WIDTH or height < MIN_HEIGHT:
        return Frame(width, height, notice=f"Terminal too small (need {MIN_WIDTH}x{MIN_HEIGHT}+)")

    thresh = thresholds if thresholds is not None else DEFAULT_THRESHOLDS
    panels: list[Panel] = []
    y = 0

    def take(wanted: int) -> Rect | None:
        nonlocal y
        h = min(wanted, height - y)
        if h <= 0:
            return None
        rect = Rect(0, y, width, h)
        y += h
        return rect

    if rect := take(HEADER_HEIGHT):
        panels.append(header_panel(snapshot, rect))
    if rect := take(CHART_HEIGHT):
        panels.append(chart_panel(snapshot, history, rect, thresh))
    if rect := take(GAUGE_HEIGHT):
        panels.append(gauge_panel(snapshot, rect, thresh))
    if rect := take(height - y):
        panels.append(disk_panel(snapshot, rect, thresh))

    return Frame(width, height, tuple(panels))
