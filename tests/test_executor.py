"""Tests for remon.executor."""

from __future__ import annotations

import logging
import socket
from unittest.mock import MagicMock, call

import paramiko
import pytest

from remon.executor import ConnectError, ExecError, LocalExecutor, SSHExecutor, connect


def _ssh_client(out: bytes = b"", err: bytes = b"", rc: int = 0) -> MagicMock:
    stdout = MagicMock()
    stdout.read.return_value = out
    stdout.channel.recv_exit_status.return_value = rc
    stderr = MagicMock()
    stderr.read.return_value = err
    client = MagicMock()
    client.exec_command.return_value = (MagicMock(), stdout, stderr)
    return client


# ── SSHExecutor ────────────────────────────────────────────────────────────


class TestSSHExecutor:
    def test_returns_stdout(self) -> None:
        client = _ssh_client(out=b"Mem: 1 2 3\n")
        ex = SSHExecutor(client, command_timeout=5.0)
        assert ex.execute("free -b") == "Mem: 1 2 3\n"
        client.exec_command.assert_called_once_with("free -b", timeout=5.0)

    def test_invalid_utf8_replaced(self) -> None:
        ex = SSHExecutor(_ssh_client(out=b"ok \xff\n"))
        assert ex.execute("uptime") == "ok �\n"

    def test_nonzero_exit_returns_output(self, caplog: pytest.LogCaptureFixture) -> None:
        client = _ssh_client(
            out=b"/dev/sda1 100 50 50 50% /\n", err=b"df: /run/x: Permission denied\n", rc=1
        )
        with caplog.at_level(logging.WARNING, logger="remon.executor"):
            out = SSHExecutor(client).execute("df -B1")
        assert out == "/dev/sda1 100 50 50 50% /\n"
        assert "exited with status 1" in caplog.text
        assert "Permission denied" in caplog.text

    @pytest.mark.parametrize(
        "error",
        [paramiko.SSHException("channel closed"), socket.timeout(), OSError("broken pipe")],
    )
    def test_transport_errors_raise(self, error: Exception) -> None:
        client = MagicMock()
        client.exec_command.side_effect = error
        with pytest.raises(ExecError):
            SSHExecutor(client).execute("uptime")

    def test_close(self) -> None:
        client = _ssh_client()
        SSHExecutor(client).close()
        client.close.assert_called_once()


# ── connect ────────────────────────────────────────────────────────────────


class TestConnect:
    def test_agent_auth_with_username(self) -> None:
        client = MagicMock()
        prompt = MagicMock()
        ex = connect("srv", 2222, "admin", prompt_password=prompt, client_factory=lambda: client)
        assert isinstance(ex, SSHExecutor)
        kwargs = client.connect.call_args.kwargs
        assert kwargs["hostname"] == "srv"
        assert kwargs["port"] == 2222
        assert kwargs["allow_agent"] is True
        prompt.assert_not_called()

    def test_falls_back_to_password(self) -> None:
        agent_client, password_client = MagicMock(), MagicMock()
        agent_client.connect.side_effect = paramiko.AuthenticationException("no keys")
        clients = iter([agent_client, password_client])
        ex = connect(
            "srv",
            username="admin",
            prompt_password=lambda prompt: "s3cret",
            client_factory=lambda: next(clients),
        )
        assert isinstance(ex, SSHExecutor)
        agent_client.close.assert_called_once()
        kwargs = password_client.connect.call_args.kwargs
        assert kwargs["username"] == "admin"
        assert kwargs["password"] == "s3cret"
        assert kwargs["allow_agent"] is False

    def test_prompts_for_username(self) -> None:
        client = MagicMock()
        connect(
            "srv",
            prompt_username=lambda: "bob",
            prompt_password=lambda prompt: "pw",
            client_factory=lambda: client,
        )
        assert client.connect.call_count == 1
        assert client.connect.call_args.kwargs["username"] == "bob"

    def test_bad_password(self) -> None:
        client = MagicMock()
        client.connect.side_effect = paramiko.AuthenticationException("denied")
        with pytest.raises(ConnectError, match="authentication failed"):
            connect(
                "srv",
                prompt_username=lambda: "bob",
                prompt_password=lambda prompt: "wrong",
                client_factory=lambda: client,
            )
        client.close.assert_called_once()

    def test_unreachable_host(self) -> None:
        client = MagicMock()
        client.connect.side_effect = OSError("Connection refused")
        with pytest.raises(ConnectError, match="srv:22"):
            connect("srv", username="admin", client_factory=lambda: client)
        assert client.close.call_args_list == [call()]


# ── LocalExecutor ──────────────────────────────────────────────────────────


class TestLocalExecutor:
    def test_runs_shell_command(self) -> None:
        assert LocalExecutor().execute("echo hello | tr a-z A-Z") == "HELLO\n"

    def test_nonzero_exit_returns_output(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="remon.executor"):
            out = LocalExecutor().execute("echo row; echo oops >&2; exit 3")
        assert out == "row\n"
        assert "exited with status 3: oops" in caplog.text

    def test_missing_command_returns_empty(self) -> None:
        assert LocalExecutor().execute("definitely-not-a-remon-tool 2>/dev/null") == ""

    def test_timeout_raises(self) -> None:
        with pytest.raises(ExecError, match="timed out"):
            LocalExecutor(command_timeout=0.2).execute("sleep 5")
