"""Single-connection lifecycle management."""

from __future__ import annotations

import asyncio
import logging

from .drivers import Connector, DatabaseConnection, connector_for
from .models import ConnectionOptions, Flavor

LOG = logging.getLogger(__name__)


class DatabaseConnectionError(RuntimeError):
    """Raised when a connection cannot be opened, prepared or switched."""


class ConnectionManager:
    """Owns at most one live connection, re-establishing it when it goes stale.

    Session settings such as safe mode are applied once per physical
    connection, so the manager never hands out more than one. Acquiring,
    switching and closing are serialized so concurrent callers share it.
    """

    def __init__(
        self,
        options: ConnectionOptions,
        *,
        connector: Connector | None = None,
        connect_timeout: float = 5.0,
    ) -> None:
        options.validate()
        self._options = options
        self._connector = connector or connector_for(options.flavor, connect_timeout=connect_timeout)
        self._connection: DatabaseConnection | None = None
        self._lock = asyncio.Lock()

    @property
    def flavor(self) -> Flavor:
        return self._options.flavor  # type: ignore[return-value]

    @property
    def options(self) -> ConnectionOptions:
        """Current options; the database reflects the last successful switch."""

        return self._options

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    async def connect(self) -> DatabaseConnection:
        """Eagerly establish the connection (used at startup to fail fast)."""

        return await self.get_connection()

    async def get_connection(self) -> DatabaseConnection:
        """Return the live connection, replacing it if a ping shows it is gone."""

        async with self._lock:
            if self._connection is not None:
                try:
                    await self._connection.ping()
                except Exception as exc:
                    LOG.info("Connection went stale, reconnecting", extra={"error": str(exc)})
                    await self._close_quietly(self._connection)
                    self._connection = None
                else:
                    return self._connection
            self._connection = await self._acquire(self._options)
            return self._connection

    async def use_database(self, name: str) -> None:
        """Reconnect to another database, keeping the current one if that fails."""

        async with self._lock:
            options = self._options.with_database(name)
            try:
                connection = await self._acquire(options)
            except DatabaseConnectionError as exc:
                raise DatabaseConnectionError(f"Failed to switch database: {exc}") from exc
            previous = self._connection
            self._options = options
            self._connection = connection
            if previous is not None:
                await self._close_quietly(previous)
            LOG.info("Switched database", extra={"database": name})

    async def destroy(self) -> None:
        """Close the connection; safe to call repeatedly."""

        async with self._lock:
            connection, self._connection = self._connection, None
            if connection is not None:
                await self._close_quietly(connection)

    async def _acquire(self, options: ConnectionOptions) -> DatabaseConnection:
        try:
            connection = await self._connector.open(options)
        except Exception as exc:
            raise DatabaseConnectionError(f"Failed to open database: {exc}") from exc
        if options.safe_mode:
            try:
                await connection.apply_safe_mode()
            except Exception as exc:
                await self._close_quietly(connection)
                raise DatabaseConnectionError(f"Failed to establish connection: {exc}") from exc
        return connection

    @staticmethod
    async def _close_quietly(connection: DatabaseConnection) -> None:
        try:
            await connection.close()
        except Exception:  # already closed or broken
            pass


__all__ = ["ConnectionManager", "DatabaseConnectionError"]
