"""Turn raw diagnostic command output into a structured metrics snapshot.

The input is the concatenated stdout of ``top``, ``free -b``, ``df -B1`` and
``uptime``.  Parsing is best-effort: every field that cannot be found or read
falls back to zero, and :func:`parse_snapshot` never raises.
"""

from __future__ import annotations

from dataclasses import dataclass, field

CPU_MARKER = "%Cpu(s)"
LOAD_MARKER = "load average:"


@dataclass(frozen=True)
class DiskEntry:
    """One mounted filesystem line from ``df``."""

    mount_point: str
    total_bytes: int = 0
    used_bytes: int = 0


@dataclass(frozen=True)
class MetricsSnapshot:
    """Immutable result of one parse pass."""

    cpu_usage_percent: float = 0.0
    memory_total_bytes: int = 0
    memory_used_bytes: int = 0
    swap_total_bytes: int = 0
    swap_used_bytes: int = 0
    load_average: tuple[float, float, float] = (0.0, 0.0, 0.0)
    uptime_line: str = ""
    disk_entries: tuple[DiskEntry, ...] = field(default_factory=tuple)


# ── Field helpers ──────────────────────────────────────────────────────────


def _to_int(token: str) -> int:
    """Parse an unsigned byte count; anything else is 0."""
    token = token.strip()
    if not (token.isascii() and token.isdigit()):
        return 0
    return int(token)


def _to_float(token: str) -> float | None:
    try:
        value = float(token.strip())
    except ValueError:
        return None
    # Reject nan/inf so the snapshot stays inside the numeric domain
    if value != value or value in (float("inf"), float("-inf")):
        return None
    return value


def _value_before(parts: list[str], marker: str) -> float | None:
    """Return the number immediately preceding *marker* in *parts*."""
    try:
        idx = parts.index(marker)
    except ValueError:
        return None
    if idx == 0:
        return None
    return _to_float(parts[idx - 1])


# ── Per-family parsers ─────────────────────────────────────────────────────


def _parse_cpu(lines: list[str]) -> float:
    cpu_line = next((line for line in lines if CPU_MARKER in line), None)
    if cpu_line is None:
        return 0.0
    parts = cpu_line.split()
    user = _value_before(parts, "us,")
    if user is None:
        return 0.0
    system = _value_before(parts, "sy,")
    total = user + system if system is not None else user
    return max(0.0, total)


def _parse_pair(lines: list[str], prefix: str) -> tuple[int, int]:
    """Return (total, used) from the last line starting with *prefix*."""
    total, used = 0, 0
    for line in lines:
        if not line.startswith(prefix):
            continue
        parts = line.split()
        if len(parts) >= 3:
            total, used = _to_int(parts[1]), _to_int(parts[2])
    return total, used


def _parse_load(lines: list[str]) -> tuple[tuple[float, float, float], str]:
    uptime_line = next((line for line in lines if LOAD_MARKER in line), None)
    if uptime_line is None:
        return (0.0, 0.0, 0.0), ""
    tail = uptime_line.split(LOAD_MARKER, 1)[1]
    loads = [v for v in (_to_float(s) for s in tail.split(",")) if v is not None]
    if len(loads) < 3:
        return (0.0, 0.0, 0.0), uptime_line
    load1, load5, load15 = (max(0.0, v) for v in loads[:3])
    return (load1, load5, load15), uptime_line


def _parse_disks(lines: list[str]) -> tuple[DiskEntry, ...]:
    entries: list[DiskEntry] = []
    for line in lines:
        if not line.startswith("/"):
            continue
        parts = line.split()
        if len(parts) < 6:
            continue
        entries.append(
            DiskEntry(
                mount_point=parts[5],
                total_bytes=_to_int(parts[1]),
                used_bytes=_to_int(parts[2]),
            )
        )
    return tuple(entries)


# ── Entry point ────────────────────────────────────────────────────────────


def parse_snapshot(raw: str) -> MetricsSnapshot:
    """Parse concatenated command output into a :class:`MetricsSnapshot`.

    Only the first ``%Cpu(s)`` and ``load average:`` lines are used; every
    filesystem line starting with ``/`` becomes a disk entry, in input order.
    """
    lines = raw.splitlines()
    mem_total, mem_used = _parse_pair(lines, "Mem:")
    swap_total, swap_used = _parse_pair(lines, "Swap:")
    load_average, uptime_line = _parse_load(lines)
    return MetricsSnapshot(
        cpu_usage_percent=_parse_cpu(lines),
        memory_total_bytes=mem_total,
        memory_used_bytes=mem_used,
        swap_total_bytes=swap_total,
        swap_used_bytes=swap_used,
        load_average=load_average,
        uptime_line=uptime_line,
        disk_entries=_parse_disks(lines),
    )
