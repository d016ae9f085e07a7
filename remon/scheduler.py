"""Refresh scheduling and the dashboard's single mutable state.

The event loop owns one :class:`DashboardState`.  On a due tick it calls
:func:`refresh`, which runs the command batch and, only if every command
succeeded, swaps in the new snapshot and appends one CPU sample.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from remon.executor import ExecError, Executor
from remon.history import History
from remon.parser import MetricsSnapshot, parse_snapshot

logger = logging.getLogger(__name__)

# Order matters: process summary, memory, disk, uptime/load.
# Memory and disk must report raw byte counts.
DASHBOARD_COMMANDS: tuple[str, ...] = (
    "top -bn1 | head -n 20",
    "free -b",
    "df -B1",
    "uptime",
)


def is_due(now: float, last_refresh: float | None, interval: float) -> bool:
    """True when at least *interval* seconds have passed since *last_refresh*.

    ``None`` means no refresh has succeeded yet, which is always due.
    """
    if last_refresh is None:
        return True
    return now - last_refresh >= interval


@dataclass
class DashboardState:
    """Latest accepted snapshot, CPU history and time of the last refresh."""

    snapshot: MetricsSnapshot = field(default_factory=MetricsSnapshot)
    history: History = field(default_factory=History)
    last_refresh: float | None = None


def fetch_output(executor: Executor, commands: tuple[str, ...] | list[str]) -> str:
    """Run *commands* one at a time and concatenate their stdout.

    Raises:
        ExecError: From the first command that fails; later commands are
            not run.
    """
    chunks: list[str] = []
    for command in commands:
        out = executor.execute(command)
        if out and not out.endswith("\n"):
            out += "\n"
        chunks.append(out)
    return "".join(chunks)


def refresh(
    state: DashboardState,
    executor: Executor,
    now: float,
    commands: tuple[str, ...] | list[str] = DASHBOARD_COMMANDS,
) -> bool:
    """Run one refresh batch against *state*.

    Returns True on success.  On failure *state* is left untouched,
    ``last_refresh`` included, so the next due-check retries immediately.
    """
    try:
        raw = fetch_output(executor, commands)
    except ExecError as e:
        logger.warning("refresh abandoned, %s failed: %s", e.command, e.message)
        return False

    snapshot = parse_snapshot(raw)
    state.snapshot = snapshot
    state.history.push(snapshot.cpu_usage_percent)
    state.last_refresh = now
    logger.debug(
        "refreshed: cpu=%.1f%% disks=%d history=%d",
        snapshot.cpu_usage_percent,
        len(snapshot.disk_entries),
        len(state.history),
    )
    return True
