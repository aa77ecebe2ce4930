"""Driver adapters giving MySQL and PostgreSQL connections one async surface."""

from __future__ import annotations

import logging
from typing import Any, Protocol, Sequence, runtime_checkable

import aiomysql
import asyncpg

from .dsn import expand_additional_options, formatter_for, redacted_dsn
from .models import ConnectionOptions, Flavor, UnknownFlavorError

LOG = logging.getLogger(__name__)

SAFE_UPDATES_SQL = "SET SQL_SAFE_UPDATES = 1"
MYSQL_DEFAULT_PORT = 3306


@runtime_checkable
class ResultCursor(Protocol):
    """Rows produced by one executed statement."""

    columns: tuple[str, ...]

    async def fetchone(self) -> Sequence[object] | None:
        """Return the next row, or None once drained."""

    async def close(self) -> None:
        """Release the result set."""


@runtime_checkable
class DatabaseConnection(Protocol):
    """One live physical connection to a database server."""

    async def ping(self) -> None:
        """Round-trip to the server; raises if the connection is dead."""

    async def execute(self, sql: str, params: Sequence[object] = ()) -> ResultCursor | None:
        """Run a statement; None when it produces no result set."""

    async def apply_safe_mode(self) -> None:
        """Turn on the server-side safe-updates guard for this session."""

    async def close(self) -> None:
        """Close the physical connection."""


class Connector(Protocol):
    """Opens new physical connections for a flavor."""

    async def open(self, options: ConnectionOptions) -> DatabaseConnection: ...


class _MySQLCursor:
    def __init__(self, cursor: aiomysql.Cursor) -> None:
        self._cursor = cursor
        self.columns = tuple(str(column[0]) for column in cursor.description)

    async def fetchone(self) -> Sequence[object] | None:
        return await self._cursor.fetchone()

    async def close(self) -> None:
        await self._cursor.close()


class MySQLConnection:
    """aiomysql backed connection."""

    def __init__(self, conn: aiomysql.Connection) -> None:
        self._conn = conn

    async def ping(self) -> None:
        await self._conn.ping(reconnect=False)

    async def execute(self, sql: str, params: Sequence[object] = ()) -> ResultCursor | None:
        cursor = await self._conn.cursor()
        try:
            # Without arguments the driver leaves `%` in the SQL untouched.
            await cursor.execute(sql, tuple(params) if params else None)
        except Exception:
            await cursor.close()
            raise
        if cursor.description is None:
            await cursor.close()
            return None
        return _MySQLCursor(cursor)

    async def apply_safe_mode(self) -> None:
        cursor = await self._conn.cursor()
        try:
            await cursor.execute(SAFE_UPDATES_SQL)
        finally:
            await cursor.close()

    async def close(self) -> None:
        self._conn.close()


class _RecordCursor:
    def __init__(self, columns: tuple[str, ...], records: Sequence[asyncpg.Record]) -> None:
        self.columns = columns
        self._records = iter(records)

    async def fetchone(self) -> Sequence[object] | None:
        record = next(self._records, None)
        if record is None:
            return None
        return tuple(record.values())

    async def close(self) -> None:
        self._records = iter(())


class PostgresConnection:
    """asyncpg backed connection."""

    def __init__(self, conn: asyncpg.Connection) -> None:
        self._conn = conn

    async def ping(self) -> None:
        await self._conn.execute("SELECT 1")

    async def execute(self, sql: str, params: Sequence[object] = ()) -> ResultCursor | None:
        statement = await self._conn.prepare(sql)
        attributes = statement.get_attributes()
        records = await statement.fetch(*params)
        if not attributes:
            return None
        columns = tuple(attribute.name for attribute in attributes)
        return _RecordCursor(columns, records)

    async def apply_safe_mode(self) -> None:
        LOG.warning("Safe mode is only supported for MySQL; ignoring it for PostgreSQL")

    async def close(self) -> None:
        await self._conn.close()


def _mysql_option_value(value: str) -> object:
    lowered = value.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    if value.isdigit():
        return int(value)
    return value


class MySQLConnector:
    """Opens MySQL connections via aiomysql."""

    def __init__(self, *, connect_timeout: float = 5.0) -> None:
        self._connect_timeout = connect_timeout

    def connect_kwargs(self, options: ConnectionOptions) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "autocommit": True,
            "connect_timeout": self._connect_timeout,
        }
        if options.transport == "unix":
            kwargs["unix_socket"] = options.host
        elif options.host:
            kwargs["host"] = options.host
            kwargs["port"] = options.port or MYSQL_DEFAULT_PORT
        if options.user:
            kwargs["user"] = options.user
        if options.password:
            kwargs["password"] = options.password
        if options.database:
            kwargs["db"] = options.database
        true_value = formatter_for(Flavor.MYSQL).true_value
        for key, value in expand_additional_options(options, true_value).items():
            kwargs[key] = _mysql_option_value(value)
        return kwargs

    async def open(self, options: ConnectionOptions) -> DatabaseConnection:
        LOG.info("Opening MySQL connection", extra={"dsn": redacted_dsn(options)})
        conn = await aiomysql.connect(**self.connect_kwargs(options))
        return MySQLConnection(conn)


class PostgresConnector:
    """Opens PostgreSQL connections via asyncpg."""

    def __init__(self, *, connect_timeout: float = 5.0) -> None:
        self._connect_timeout = connect_timeout

    def connect_kwargs(self, options: ConnectionOptions) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"timeout": self._connect_timeout}
        if options.host:
            kwargs["host"] = options.host
        if options.port:
            kwargs["port"] = options.port
        if options.user:
            kwargs["user"] = options.user
        if options.password:
            kwargs["password"] = options.password
        if options.database:
            kwargs["database"] = options.database
        true_value = formatter_for(Flavor.POSTGRESQL).true_value
        server_settings: dict[str, str] = {}
        for key, value in expand_additional_options(options, true_value).items():
            if key == "sslmode":
                kwargs["ssl"] = value
            else:
                server_settings[key] = value
        if server_settings:
            kwargs["server_settings"] = server_settings
        return kwargs

    async def open(self, options: ConnectionOptions) -> DatabaseConnection:
        LOG.info("Opening PostgreSQL connection", extra={"dsn": redacted_dsn(options)})
        conn = await asyncpg.connect(**self.connect_kwargs(options))
        return PostgresConnection(conn)


_CONNECTORS: dict[Flavor, type[MySQLConnector] | type[PostgresConnector]] = {
    Flavor.MYSQL: MySQLConnector,
    Flavor.POSTGRESQL: PostgresConnector,
}


def connector_for(flavor: object, *, connect_timeout: float = 5.0) -> Connector:
    """Build the connector for a flavor."""

    if isinstance(flavor, Flavor) and flavor in _CONNECTORS:
        return _CONNECTORS[flavor](connect_timeout=connect_timeout)
    raise UnknownFlavorError(f"Unknown database type {flavor}")


__all__ = [
    "Connector",
    "DatabaseConnection",
    "MySQLConnection",
    "MySQLConnector",
    "PostgresConnection",
    "PostgresConnector",
    "ResultCursor",
    "SAFE_UPDATES_SQL",
    "connector_for",
]
