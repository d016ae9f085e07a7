"""Tests for remon.config."""

from __future__ import annotations

import tomllib
from pathlib import Path
from unittest.mock import patch

import pytest

from remon.config import DEFAULT_CONFIG, _deep_merge, dump_default_config, load_config


class TestLoadConfigDefaults:
    def test_defaults_returned_when_no_file(self, tmp_path: Path) -> None:
        with patch("remon.config._DEFAULT_PATH", tmp_path / "missing.toml"):
            cfg = load_config(None)
        assert cfg["interval"] == 1.0
        assert cfg["input_timeout_ms"] == 200
        assert cfg["history_size"] == 100
        assert cfg["commands"]["dashboard"] == ["top -bn1 | head -n 20", "free -b", "df -B1", "uptime"]

    def test_all_default_keys_present(self, tmp_path: Path) -> None:
        with patch("remon.config._DEFAULT_PATH", tmp_path / "missing.toml"):
            cfg = load_config(None)
        assert set(cfg.keys()) == set(DEFAULT_CONFIG.keys())

    def test_default_location_used(self, tmp_path: Path) -> None:
        default = tmp_path / "config.toml"
        default.write_text("interval = 5.0\n")
        with patch("remon.config._DEFAULT_PATH", default):
            assert load_config(None)["interval"] == 5.0

    def test_invalid_default_location_ignored(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        default = tmp_path / "config.toml"
        default.write_text("interval = [\n")
        with patch("remon.config._DEFAULT_PATH", default):
            cfg = load_config(None)
        assert cfg["interval"] == DEFAULT_CONFIG["interval"]
        assert "ignoring invalid TOML" in capsys.readouterr().err


class TestTomlOverlay:
    def test_overrides_threshold(self, tmp_path: Path) -> None:
        toml_file = tmp_path / "config.toml"
        toml_file.write_text("[thresholds.cpu_percent]\nwarning = 70.0\ncritical = 90.0\n")
        cfg = load_config(toml_file)
        assert cfg["thresholds"]["cpu_percent"]["warning"] == 70.0
        assert cfg["thresholds"]["cpu_percent"]["critical"] == 90.0
        # Other thresholds remain at defaults
        assert cfg["thresholds"]["memory_percent"]["warning"] == 85.0

    def test_ssh_section_partial(self, tmp_path: Path) -> None:
        toml_file = tmp_path / "config.toml"
        toml_file.write_text('[ssh]\nport = 2222\nusername = "ops"\n')
        cfg = load_config(toml_file)
        assert cfg["ssh"]["port"] == 2222
        assert cfg["ssh"]["username"] == "ops"
        assert cfg["ssh"]["command_timeout"] == 30.0

    def test_commands_override_keeps_other_list(self, tmp_path: Path) -> None:
        toml_file = tmp_path / "config.toml"
        toml_file.write_text('[commands]\nstatus = ["uptime"]\n')
        cfg = load_config(toml_file)
        assert cfg["commands"]["status"] == ["uptime"]
        assert cfg["commands"]["dashboard"] == DEFAULT_CONFIG["commands"]["dashboard"]

    def test_overrides_scalar(self, tmp_path: Path) -> None:
        toml_file = tmp_path / "config.toml"
        toml_file.write_text('screenshot_dir = "/tmp/shots"\n')
        cfg = load_config(toml_file)
        assert cfg["screenshot_dir"] == "/tmp/shots"
        assert cfg["interval"] == DEFAULT_CONFIG["interval"]


class TestExplicitPath:
    def test_missing_explicit_path_errors(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit):
            load_config(tmp_path / "nonexistent.toml")

    def test_invalid_toml_errors(self, tmp_path: Path) -> None:
        bad_file = tmp_path / "bad.toml"
        bad_file.write_text("this is [not valid toml\n")
        with pytest.raises(SystemExit):
            load_config(bad_file)


class TestDumpDefaultConfig:
    def test_is_valid_toml(self) -> None:
        parsed = tomllib.loads(dump_default_config())
        assert "interval" in parsed
        assert "ssh" in parsed
        assert "thresholds" in parsed

    def test_roundtrips_defaults(self) -> None:
        parsed = tomllib.loads(dump_default_config())
        for key in ("interval", "input_timeout_ms", "history_size", "screenshot_dir", "log_file"):
            assert parsed[key] == DEFAULT_CONFIG[key]
        assert parsed["ssh"] == DEFAULT_CONFIG["ssh"]
        assert parsed["commands"] == DEFAULT_CONFIG["commands"]
        assert parsed["thresholds"] == DEFAULT_CONFIG["thresholds"]


class TestDeepMerge:
    def test_scalar_overwrite(self) -> None:
        assert _deep_merge({"a": 1, "b": 2}, {"a": 10}) == {"a": 10, "b": 2}

    def test_nested_dict_merge(self) -> None:
        result = _deep_merge({"x": {"a": 1, "b": 2}}, {"x": {"b": 3, "c": 4}})
        assert result["x"] == {"a": 1, "b": 3, "c": 4}

    def test_base_not_mutated(self) -> None:
        base = {"x": {"a": 1}}
        _deep_merge(base, {"x": {"a": 2}})
        assert base == {"x": {"a": 1}}
