"""One-shot status report: run a few commands and print their output as a table."""

from __future__ import annotations

import logging

from rich import box
from rich.console import Console
from rich.table import Table

from remon.executor import ExecError, Executor

logger = logging.getLogger(__name__)


def collect_status(executor: Executor, commands: list[str] | tuple[str, ...]) -> list[tuple[str, str]]:
    """Return ``(command, output)`` pairs; a failing command reports its error."""
    rows: list[tuple[str, str]] = []
    for command in commands:
        try:
            value = executor.execute(command).strip()
        except ExecError as e:
            logger.warning("status command %s failed: %s", command, e.message)
            value = f"error: {e.message}"
        rows.append((command, value))
    return rows


def status_table(rows: list[tuple[str, str]], title: str | None = None) -> Table:
    table = Table(title=title, box=box.ASCII, show_lines=True)
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Value")
    for command, value in rows:
        table.add_row(command, value, style="red" if value.startswith("error:") else None)
    return table


def print_status(
    executor: Executor,
    commands: list[str] | tuple[str, ...],
    host: str = "",
    console: Console | None = None,
) -> None:
    console = console or Console()
    console.print(status_table(collect_status(executor, commands), title=host or None))
