"""Tests for AppConfig helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from sqlpane import config as config_module
from sqlpane.config import AppConfig, ConnectionConfig, config_path, load_config
from sqlpane.models import Flavor, UnknownFlavorError


def test_load_config_returns_defaults_when_missing(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(config_module.CONFIG_ENV_VAR, raising=False)
    monkeypatch.setattr(config_module, "CONFIG_FILE", tmp_path / "config.toml")

    result = load_config()

    assert result == AppConfig()
    assert result.history_size == 100


def test_load_config_reads_values(tmp_path: Path) -> None:
    config_file = tmp_path / "config.toml"
    config_file.write_text(
        """
history_size = 25
result_limit = 50
log_level = "DEBUG"

[connection]
flavor = "postgres"
host = "db.internal"
port = 5433
user = "app"
safe_mode = true
connect_timeout = 2.5

[connection.options]
sslmode = "require"
statement_timeout = 3000
binary = true
"""
    )

    result = load_config(config_file)

    assert result.history_size == 25
    assert result.result_limit == 50
    assert result.log_level == "DEBUG"
    assert result.connection.flavor == "postgres"
    assert result.connection.port == 5433
    assert result.connection.connect_timeout == 2.5
    assert result.connection.options == {"sslmode": "require", "statement_timeout": "3000", "binary": "true"}


def test_load_config_handles_toml_errors(tmp_path: Path) -> None:
    config_file = tmp_path / "config.toml"
    config_file.write_text("history_size = [unterminated")

    assert load_config(config_file) == AppConfig()


def test_load_config_handles_invalid_values(tmp_path: Path) -> None:
    config_file = tmp_path / "config.toml"
    config_file.write_text("history_size = 0\n")

    assert load_config(config_file) == AppConfig()


def test_config_path_honours_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    target = tmp_path / "custom.toml"
    monkeypatch.setenv(config_module.CONFIG_ENV_VAR, str(target))

    assert config_path() == target


def test_to_options_prefers_overrides() -> None:
    connection = ConnectionConfig(
        flavor="mysql",
        host="localhost",
        database="app",
        user="root",
        safe_mode=True,
        options={"tls": "preferred", "parseTime": "false"},
    )

    options = connection.to_options(host="replica", port=3307, safe_mode=False, additional_options={"parseTime": "true"})

    assert options.flavor is Flavor.MYSQL
    assert options.host == "replica"
    assert options.port == 3307
    assert options.database == "app"
    assert options.safe_mode is False
    assert dict(options.additional_options) == {"tls": "preferred", "parseTime": "true"}


def test_to_options_requires_flavor() -> None:
    with pytest.raises(UnknownFlavorError):
        ConnectionConfig().to_options()


def test_log_path_expands_home() -> None:
    assert AppConfig(log_file="~/sqlpane.log").log_path == Path.home() / "sqlpane.log"
