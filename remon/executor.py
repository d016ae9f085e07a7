"""Command executors: run a shell command somewhere and return its stdout.

``SSHExecutor`` runs commands on a remote host over a paramiko session;
``LocalExecutor`` runs them on this machine, which is handy for trying the
dashboard without a server.
"""

from __future__ import annotations

import getpass
import logging
import socket
import subprocess
from collections.abc import Callable
from typing import Protocol

import paramiko

logger = logging.getLogger(__name__)


class ExecError(Exception):
    """A command could not be run, or its channel failed or timed out.

    A non-zero exit status is not an error: tools such as ``df`` exit 1
    after printing every readable row, so the output is still returned.
    """

    def __init__(self, command: str, message: str) -> None:
        super().__init__(f"{command!r}: {message}")
        self.command = command
        self.message = message


class ConnectError(Exception):
    """The SSH session could not be established or authenticated."""


class Executor(Protocol):
    def execute(self, command: str) -> str: ...


# ── Remote ─────────────────────────────────────────────────────────────────


class SSHExecutor:
    """Run commands over an already-authenticated paramiko client."""

    def __init__(self, client: paramiko.SSHClient, command_timeout: float = 30.0) -> None:
        self._client = client
        self._timeout = command_timeout

    def execute(self, command: str) -> str:
        try:
            _stdin, stdout, stderr = self._client.exec_command(command, timeout=self._timeout)
            out = stdout.read().decode("utf-8", "replace")
            err = stderr.read().decode("utf-8", "replace")
            rc = stdout.channel.recv_exit_status()
        except (paramiko.SSHException, socket.timeout, OSError) as e:
            raise ExecError(command, str(e) or type(e).__name__) from e
        if rc != 0:
            logger.warning("%s exited with status %d: %s", command, rc, err.strip())
        return out

    def close(self) -> None:
        self._client.close()


def _new_client() -> paramiko.SSHClient:
    client = paramiko.SSHClient()
    client.load_system_host_keys()
    client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
    return client


def _prompt_username() -> str:
    return input("Enter username: ").strip()


def connect(
    host: str,
    port: int = 22,
    username: str | None = None,
    *,
    timeout: float = 10.0,
    command_timeout: float = 30.0,
    prompt_username: Callable[[], str] = _prompt_username,
    prompt_password: Callable[[str], str] = getpass.getpass,
    client_factory: Callable[[], paramiko.SSHClient] = _new_client,
) -> SSHExecutor:
    """Open an SSH session to *host* and return an executor for it.

    With a username, agent and key authentication are tried first.  Without
    one, or if that fails, the user is prompted for credentials and password
    authentication is used.

    Raises:
        ConnectError: If the host is unreachable or authentication fails.
    """
    if username:
        client = client_factory()
        try:
            client.connect(
                hostname=host,
                port=port,
                username=username,
                allow_agent=True,
                look_for_keys=True,
                timeout=timeout,
                banner_timeout=timeout,
                auth_timeout=timeout,
            )
            logger.info("connected to %s:%d as %s using agent/key auth", host, port, username)
            return SSHExecutor(client, command_timeout)
        except paramiko.AuthenticationException:
            client.close()
            logger.info("agent/key auth failed for %s@%s, falling back to password", username, host)
        except (paramiko.SSHException, OSError) as e:
            client.close()
            raise ConnectError(f"failed to connect to {host}:{port}: {e}") from e
    else:
        username = prompt_username()

    password = prompt_password("Enter password: ")
    client = client_factory()
    try:
        client.connect(
            hostname=host,
            port=port,
            username=username,
            password=password,
            allow_agent=False,
            look_for_keys=False,
            timeout=timeout,
            banner_timeout=timeout,
            auth_timeout=timeout,
        )
    except paramiko.AuthenticationException as e:
        client.close()
        raise ConnectError("authentication failed") from e
    except (paramiko.SSHException, OSError) as e:
        client.close()
        raise ConnectError(f"failed to connect to {host}:{port}: {e}") from e
    logger.info("connected to %s:%d as %s using password auth", host, port, username)
    return SSHExecutor(client, command_timeout)


# ── Local ──────────────────────────────────────────────────────────────────


class LocalExecutor:
    """Run commands through the local shell."""

    def __init__(self, command_timeout: float = 30.0) -> None:
        self._timeout = command_timeout

    def execute(self, command: str) -> str:
        try:
            result = subprocess.run(
                command,
                shell=True,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise ExecError(command, f"timed out after {self._timeout:g}s") from e
        except OSError as e:
            raise ExecError(command, str(e)) from e
        if result.returncode != 0:
            logger.warning(
                "%s exited with status %d: %s", command, result.returncode, result.stderr.strip()
            )
        return result.stdout

    def close(self) -> None:
        pass
