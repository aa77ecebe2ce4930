"""Connection string (DSN) formatting for each supported flavor."""

from __future__ import annotations

from dataclasses import replace
from typing import Protocol
from urllib.parse import quote, quote_plus

from .models import ConnectionOptions, Flavor, UnknownFlavorError

# go-sql-driver escapes the database name as a URL path segment.
_PATH_SAFE = "$&+:=@"


class DSNFormatter(Protocol):
    """Turns connection options into a flavor-specific connection string."""

    true_value: str

    def format(self, options: ConnectionOptions) -> str: ...


def expand_additional_options(options: ConnectionOptions, true_value: str) -> dict[str, str]:
    """Replace empty option values (bare flags) with the flavor's notion of true."""

    return {
        key: value if value != "" else true_value
        for key, value in (options.additional_options or {}).items()
    }


class MySQLDSNFormatter:
    """Formats `user:password@transport(address)/database?options` DSNs."""

    true_value = "true"

    def format(self, options: ConnectionOptions) -> str:
        parts: list[str] = []
        if options.user:
            parts.append(options.user)
            if options.password:
                parts.append(f":{options.password}")
            parts.append("@")
        transport = options.transport
        if transport:
            parts.append(transport)
            address = options.host
            if options.port and transport == "tcp":
                address = f"{address}:{options.port}"
            parts.append(f"({address})")
        parts.append("/")
        parts.append(quote(options.database, safe=_PATH_SAFE))
        extras = expand_additional_options(options, self.true_value)
        if extras:
            query = "&".join(f"{key}={quote_plus(value)}" for key, value in extras.items())
            parts.append(f"?{query}")
        return "".join(parts)


class PostgresDSNFormatter:
    """Formats libpq style `key=value` DSNs."""

    true_value = "1"

    def format(self, options: ConnectionOptions) -> str:
        core = {
            "host": options.host,
            "port": str(options.port) if options.port else "",
            "dbname": options.database,
            "user": options.user,
            "password": options.password,
        }
        pairs = [f"{key}={value}" for key, value in core.items() if value != ""]
        extras = expand_additional_options(options, self.true_value)
        pairs.extend(f"{key}={value}" for key, value in extras.items())
        return " ".join(pairs)


_FORMATTERS: dict[Flavor, DSNFormatter] = {
    Flavor.MYSQL: MySQLDSNFormatter(),
    Flavor.POSTGRESQL: PostgresDSNFormatter(),
}


def formatter_for(flavor: object) -> DSNFormatter:
    """Look up the DSN formatter for a flavor."""

    if isinstance(flavor, Flavor) and flavor in _FORMATTERS:
        return _FORMATTERS[flavor]
    raise UnknownFlavorError(f"Unknown database type {flavor}")


def build_dsn(options: ConnectionOptions) -> str:
    """Build the DSN for the given options.

    Raises:
        UnknownFlavorError: if the options do not name MySQL or PostgreSQL.
    """

    return formatter_for(options.flavor).format(options)


def redacted_dsn(options: ConnectionOptions) -> str:
    """Build the DSN with the password masked, safe to write to logs."""

    if options.password:
        options = replace(options, password="***")
    return build_dsn(options)


__all__ = [
    "DSNFormatter",
    "MySQLDSNFormatter",
    "PostgresDSNFormatter",
    "build_dsn",
    "expand_additional_options",
    "formatter_for",
    "redacted_dsn",
]
