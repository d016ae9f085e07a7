"""Command-line entry point for remon.

Usage:
    remon status -H server.example.com -u admin
    remon monitor -H server.example.com -u admin --interval 2
    remon monitor --local
    remon config --dump
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from remon.config import dump_default_config, load_config
from remon.dashboard import run_dashboard
from remon.executor import ConnectError, LocalExecutor, SSHExecutor, connect
from remon.status import print_status

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(log_file: str, quiet_stderr: bool) -> None:
    """Log to *log_file* when given; otherwise warnings go to stderr.

    While the dashboard owns the terminal, stderr output would corrupt the
    screen, so *quiet_stderr* drops it when no log file is set.
    """
    if log_file:
        logging.basicConfig(filename=log_file, level=logging.DEBUG, format=LOG_FORMAT)
    elif quiet_stderr:
        logging.basicConfig(handlers=[logging.NullHandler()], level=logging.WARNING)
    else:
        logging.basicConfig(level=logging.WARNING, format="remon: %(levelname)s: %(message)s")


def _add_host_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-H", "--host", help="Remote host to connect to")
    parser.add_argument("-u", "--username", default=None, help="SSH username (prompted if omitted)")
    parser.add_argument("-P", "--port", type=int, default=None, help="SSH port (default: 22)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="remon",
        description="Remote server monitoring over SSH.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        metavar="PATH",
        help="Path to TOML config file",
    )
    parser.add_argument("--log-file", default=None, metavar="PATH", help="Write diagnostics to PATH")
    sub = parser.add_subparsers(dest="command", required=True)

    status = sub.add_parser("status", help="Print a one-shot status table")
    _add_host_args(status)

    monitor = sub.add_parser("monitor", help="Open the live dashboard")
    _add_host_args(monitor)
    monitor.add_argument(
        "-i",
        "--interval",
        type=float,
        default=None,
        help="Seconds between refreshes (default: 1)",
    )
    monitor.add_argument(
        "--local",
        action="store_true",
        help="Monitor this machine instead of a remote host",
    )

    cfg = sub.add_parser("config", help="Configuration helpers")
    cfg.add_argument("--dump", action="store_true", help="Print the default config as TOML")
    return parser


def _open_ssh(args: argparse.Namespace, config: dict[str, Any]) -> SSHExecutor:
    ssh = config["ssh"]
    return connect(
        args.host,
        port=args.port or int(ssh.get("port", 22)),
        username=args.username or ssh.get("username") or None,
        timeout=float(ssh.get("timeout", 10.0)),
        command_timeout=float(ssh.get("command_timeout", 30.0)),
    )


def _valid_history_size(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "config":
        if args.dump:
            sys.stdout.write(dump_default_config())
            return 0
        parser.error("config: nothing to do (try --dump)")

    config = load_config(args.config)
    setup_logging(args.log_file or config.get("log_file", ""), quiet_stderr=args.command == "monitor")

    local = args.command == "monitor" and args.local
    if not local and not args.host:
        parser.error(f"{args.command}: -H/--host is required")

    if args.command == "monitor" and not _valid_history_size(config["history_size"]):
        print(
            f"remon: history_size must be a positive integer, got {config['history_size']!r}",
            file=sys.stderr,
        )
        return 1

    try:
        executor: SSHExecutor | LocalExecutor
        if local:
            executor = LocalExecutor(float(config["ssh"].get("command_timeout", 30.0)))
        else:
            executor = _open_ssh(args, config)
    except ConnectError as e:
        print(f"remon: {e}", file=sys.stderr)
        return 1

    try:
        if args.command == "status":
            print_status(executor, config["commands"]["status"], host=args.host)
        else:
            interval = args.interval if args.interval is not None else float(config["interval"])
            run_dashboard(executor, interval, config)
    finally:
        executor.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
