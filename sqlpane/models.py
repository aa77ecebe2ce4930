"""Shared dataclasses used across the DSN, connection and query modules."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Mapping


class UnknownFlavorError(ValueError):
    """Raised when connection options name an unsupported database flavor."""


class Flavor(str, Enum):
    """Database engines the client can talk to."""

    MYSQL = "mysql"
    POSTGRESQL = "postgres"

    @classmethod
    def parse(cls, value: object) -> Flavor:
        """Resolve user input (flag or config value) to a flavor."""

        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            if key in _FLAVOR_ALIASES:
                return _FLAVOR_ALIASES[key]
        raise UnknownFlavorError("Database type (ex: mysql, postgres) must be specified")

    def __str__(self) -> str:
        return self.value


_FLAVOR_ALIASES: dict[str, Flavor] = {
    "mysql": Flavor.MYSQL,
    "postgres": Flavor.POSTGRESQL,
    "postgresql": Flavor.POSTGRESQL,
    "psql": Flavor.POSTGRESQL,
}


@dataclass(frozen=True, slots=True)
class ConnectionOptions:
    """Everything needed to reach a server, as collected from flags and config."""

    flavor: Flavor | str | None
    host: str = ""
    database: str = ""
    user: str = ""
    password: str = ""
    port: int = 0
    # Only honoured by MySQL.
    safe_mode: bool = False
    additional_options: Mapping[str, str] = field(default_factory=dict)

    def validate(self) -> None:
        if not isinstance(self.flavor, Flavor):
            raise UnknownFlavorError("Database type (ex: mysql, postgres) must be specified")

    def with_database(self, name: str) -> ConnectionOptions:
        """Return a copy pointed at another database."""

        return replace(self, database=name)

    @property
    def transport(self) -> str:
        """`unix` for socket paths (`/` or abstract `@`), `tcp` for hosts, `` when unset."""

        if not self.host:
            return ""
        if self.host[0] in ("/", "@"):
            return "unix"
        return "tcp"


__all__ = ["ConnectionOptions", "Flavor", "UnknownFlavorError"]
