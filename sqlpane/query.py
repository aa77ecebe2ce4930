"""Query execution service used by the query input."""

from __future__ import annotations

import logging
import time

from .connections import ConnectionManager, DatabaseConnectionError
from .drivers import ResultCursor
from .models import Flavor
from .results import Cell, QueryResult, as_text
from .statements import StatementError, StatementTransformer, create_transformer

LOG = logging.getLogger(__name__)


class QueryExecutionError(RuntimeError):
    """Raised when the server rejects a statement or its rows cannot be read."""


class ResultCursorError(RuntimeError):
    """Raised when a result cursor cannot be released; this is a bug, not a user error."""


RECOVERABLE_ERRORS: tuple[type[Exception], ...] = (
    DatabaseConnectionError,
    StatementError,
    QueryExecutionError,
)


class QueryExecutor:
    """Runs statements over the managed connection and materializes their rows as text."""

    def __init__(
        self,
        manager: ConnectionManager,
        *,
        transformer: StatementTransformer | None = None,
    ) -> None:
        self._manager = manager
        self._transformer = transformer or create_transformer(manager.flavor)

    @property
    def manager(self) -> ConnectionManager:
        return self._manager

    @property
    def flavor(self) -> Flavor:
        return self._manager.flavor

    async def query(self, statement: str) -> QueryResult | None:
        """Execute one statement.

        Returns None when the statement succeeded without producing a result
        set (DDL, INSERT, ...). A result set with no rows comes back as a
        `QueryResult` with empty `rows`.
        """

        if not statement.strip():
            raise QueryExecutionError("Provide SQL to execute.")
        started = time.perf_counter()
        connection = await self._manager.get_connection()
        plan = await self._transformer.transform(statement, connection)
        try:
            cursor = await connection.execute(plan.sql, plan.params)
        except Exception as exc:
            LOG.info("Query failed", extra={"error": str(exc)})
            raise QueryExecutionError(f"Query Failed: {exc}") from exc
        if cursor is None:
            LOG.debug("Statement returned no result set")
            return None
        try:
            result = await self._materialize(cursor)
        finally:
            try:
                await cursor.close()
            except Exception as exc:
                raise ResultCursorError("Failed to clean up result rows") from exc
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        LOG.debug("Query finished", extra={"rows": result.row_count, "elapsed_ms": elapsed_ms})
        return result

    async def close(self) -> None:
        """Release the managed connection."""

        await self._manager.destroy()

    @staticmethod
    async def _materialize(cursor: ResultCursor) -> QueryResult:
        columns = tuple(cursor.columns)
        rows: list[dict[str, Cell]] = []
        try:
            while (raw := await cursor.fetchone()) is not None:
                rows.append({
                    column: Cell(as_text(value))
                    for column, value in zip(columns, raw)
                })
        except Exception as exc:
            raise QueryExecutionError(f"Failed to read rows: {exc}") from exc
        return QueryResult(columns=columns, rows=tuple(rows))


__all__ = [
    "QueryExecutionError",
    "QueryExecutor",
    "RECOVERABLE_ERRORS",
    "ResultCursorError",
]
