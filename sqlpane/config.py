"""App configuration loading helpers."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import tomllib

from pydantic import BaseModel, Field, ValidationError

from .models import ConnectionOptions, Flavor

LOG = logging.getLogger(__name__)

CONFIG_FILE = Path.home() / ".config" / "sqlpane" / "config.toml"
CONFIG_ENV_VAR = "SQLPANE_CONFIG"


class ConnectionConfig(BaseModel):
    """Default connection settings stored in config.toml."""

    flavor: str | None = None
    host: str = ""
    port: int = Field(default=0, ge=0, le=65535)
    database: str = ""
    user: str = ""
    password: str = ""
    safe_mode: bool = False
    connect_timeout: float = Field(default=5.0, gt=0)
    options: dict[str, str] = Field(default_factory=dict)

    def to_options(
        self,
        *,
        flavor: str | Flavor | None = None,
        host: str | None = None,
        port: int | None = None,
        database: str | None = None,
        user: str | None = None,
        password: str | None = None,
        safe_mode: bool | None = None,
        additional_options: dict[str, str] | None = None,
    ) -> ConnectionOptions:
        """Merge command line overrides over the configured defaults.

        Raises:
            UnknownFlavorError: if neither source names a supported flavor.
        """

        options = dict(self.options)
        options.update(additional_options or {})
        return ConnectionOptions(
            flavor=Flavor.parse(flavor or self.flavor),
            host=host or self.host,
            port=port or self.port,
            database=database or self.database,
            user=user or self.user,
            password=password or self.password,
            safe_mode=self.safe_mode if safe_mode is None else safe_mode,
            additional_options=options,
        )


class AppConfig(BaseModel):
    """Shape of the application configuration file."""

    history_size: int = Field(default=100, ge=1)
    result_limit: int = Field(default=500, ge=1)
    log_file: str = "~/.cache/sqlpane/sqlpane.log"
    log_level: str = "INFO"
    connection: ConnectionConfig = Field(default_factory=ConnectionConfig)

    @property
    def log_path(self) -> Path:
        return Path(self.log_file).expanduser()


def config_path() -> Path:
    """Location of the config file, honouring the SQLPANE_CONFIG override."""

    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return CONFIG_FILE


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from disk; fall back to defaults if missing or invalid."""

    target = path or config_path()
    try:
        with target.open("rb") as handle:
            raw = tomllib.load(handle)
    except FileNotFoundError:
        return AppConfig()
    except (tomllib.TOMLDecodeError, OSError) as exc:
        LOG.warning("Ignoring unreadable config file", extra={"path": str(target), "error": str(exc)})
        return AppConfig()

    try:
        return AppConfig.model_validate(_normalize(raw))
    except ValidationError as exc:
        LOG.warning("Ignoring invalid config file", extra={"path": str(target), "error": str(exc)})
        return AppConfig()


def _normalize(raw: dict[str, object]) -> dict[str, object]:
    data = dict(raw)
    connection = data.get("connection")
    if isinstance(connection, dict):
        connection = dict(connection)
        options = connection.get("options")
        if isinstance(options, dict):
            # TOML booleans/numbers are accepted for driver options.
            connection["options"] = {
                str(key): _option_text(value)
                for key, value in options.items()
            }
        data["connection"] = connection
    return data


def _option_text(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


__all__ = [
    "AppConfig",
    "CONFIG_ENV_VAR",
    "CONFIG_FILE",
    "ConnectionConfig",
    "config_path",
    "load_config",
]
