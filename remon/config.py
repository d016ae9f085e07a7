"""Configuration loading for remon.

Loads settings from TOML config files with sensible defaults.
Search order: explicit --config path → ~/.config/remon/config.toml → defaults only.
"""

from __future__ import annotations

import sys
import tomllib
from pathlib import Path
from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "interval": 1.0,
    "input_timeout_ms": 200,
    "history_size": 100,
    "screenshot_dir": "screenshots",
    "log_file": "",
    "ssh": {
        "port": 22,
        "username": "",
        "timeout": 10.0,
        "command_timeout": 30.0,
    },
    "commands": {
        "dashboard": ["top -bn1 | head -n 20", "free -b", "df -B1", "uptime"],
        "status": ["uptime", "free -h", "df -h", "top -bn1 | head -n 3"],
    },
    "thresholds": {
        "cpu_percent": {"warning": 80.0, "critical": 95.0},
        "memory_percent": {"warning": 85.0, "critical": 95.0},
        "swap_percent": {"warning": 50.0, "critical": 80.0},
        "disk_percent": {"warning": 85.0, "critical": 95.0},
    },
}

_DEFAULT_PATH = Path.home() / ".config" / "remon" / "config.toml"


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Merge overlay into base. Nested dicts are merged at the first level only."""
    merged = dict(base)
    for key, value in overlay.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load configuration, merging user TOML over defaults.

    Args:
        path: Explicit config file path (from --config). If None, tries the
              default location ~/.config/remon/config.toml.

    Returns:
        Merged configuration dict.

    Raises:
        SystemExit: If an explicit path doesn't exist or can't be parsed.
    """
    if path is not None:
        if not path.is_file():
            print(f"remon: config file not found: {path}", file=sys.stderr)
            raise SystemExit(1)
        try:
            user_config = tomllib.loads(path.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as e:
            print(f"remon: invalid TOML in {path}: {e}", file=sys.stderr)
            raise SystemExit(1) from e
        return _deep_merge(DEFAULT_CONFIG, user_config)

    if _DEFAULT_PATH.is_file():
        try:
            user_config = tomllib.loads(_DEFAULT_PATH.read_text(encoding="utf-8"))
            return _deep_merge(DEFAULT_CONFIG, user_config)
        except tomllib.TOMLDecodeError:
            print(
                f"remon: warning: ignoring invalid TOML in {_DEFAULT_PATH}",
                file=sys.stderr,
            )

    return dict(DEFAULT_CONFIG)


def _toml_value(value: Any) -> str:
    if isinstance(value, str):
        return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return "[" + ", ".join(_toml_value(v) for v in value) + "]"
    return str(value)


def dump_default_config() -> str:
    """Return the default configuration as a TOML string."""
    lines = [
        "# remon configuration",
        "# Place this file at ~/.config/remon/config.toml",
        "",
    ]
    for key in ("interval", "input_timeout_ms", "history_size", "screenshot_dir", "log_file"):
        lines.append(f"{key} = {_toml_value(DEFAULT_CONFIG[key])}")
    lines.append("")

    for section in ("ssh", "commands"):
        lines.append(f"[{section}]")
        for key, value in DEFAULT_CONFIG[section].items():
            lines.append(f"{key} = {_toml_value(value)}")
        lines.append("")

    for metric, levels in DEFAULT_CONFIG["thresholds"].items():
        lines.append(f"[thresholds.{metric}]")
        lines.append(f"warning = {levels['warning']}")
        lines.append(f"critical = {levels['critical']}")
        lines.append("")

    return "\n".join(lines) + "\n"
