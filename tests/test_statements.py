"""Tests for meta-command rewriting."""

from __future__ import annotations

import pytest

from sqlpane.models import Flavor
from sqlpane.statements import (
    CommandNotSupportedError,
    MySQLStatementTransformer,
    PostgresStatementTransformer,
    StatementError,
    StatementPlan,
    StatementTransformer,
    TableNotFoundError,
    create_transformer,
)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


class _FakeCursor:
    def __init__(self, rows: list[tuple[object, ...]]) -> None:
        self.columns = ("exists",)
        self._rows = iter(rows)
        self.closed = False

    async def fetchone(self):  # type: ignore[no-untyped-def]
        return next(self._rows, None)

    async def close(self) -> None:
        self.closed = True


class _FakeConnection:
    """Answers the table-existence probe from a fixed set of table names."""

    def __init__(self, tables: set[str], error: Exception | None = None) -> None:
        self.tables = tables
        self.error = error
        self.executed: list[tuple[str, tuple[object, ...]]] = []
        self.cursors: list[_FakeCursor] = []

    async def execute(self, sql: str, params=()):  # type: ignore[no-untyped-def]
        self.executed.append((sql, tuple(params)))
        if self.error is not None:
            raise self.error
        cursor = _FakeCursor([(params[0] in self.tables,)])
        self.cursors.append(cursor)
        return cursor


@pytest.mark.anyio
@pytest.mark.parametrize(
    "statement",
    ["DESCRIBE users;", "SHOW INDEXES FROM users", "show tables;", "SELECT * FROM users;"],
)
async def test_mysql_passes_statements_through(statement: str) -> None:
    connection = _FakeConnection(set())

    plan = await MySQLStatementTransformer().transform(statement, connection)  # type: ignore[arg-type]

    assert plan == StatementPlan(statement)
    assert connection.executed == []


@pytest.mark.anyio
async def test_postgres_describe_checks_table_first() -> None:
    connection = _FakeConnection({"users"})

    plan = await PostgresStatementTransformer().transform('describe "users";', connection)  # type: ignore[arg-type]

    assert plan.sql == PostgresStatementTransformer.DESCRIBE_QUERY
    assert plan.params == ("users",)
    assert connection.executed == [(PostgresStatementTransformer.TABLE_EXISTS_QUERY, ("users",))]
    assert connection.cursors[0].closed is True


@pytest.mark.anyio
async def test_postgres_describe_missing_table() -> None:
    connection = _FakeConnection(set())

    with pytest.raises(TableNotFoundError, match="Table ghosts does not exist"):
        await PostgresStatementTransformer().transform("DESCRIBE ghosts", connection)  # type: ignore[arg-type]

    assert all(sql != PostgresStatementTransformer.DESCRIBE_QUERY for sql, _ in connection.executed)


@pytest.mark.anyio
async def test_postgres_show_indexes() -> None:
    connection = _FakeConnection({"orders"})

    plan = await PostgresStatementTransformer().transform("  SHOW INDEXES FROM orders;  ", connection)  # type: ignore[arg-type]

    assert plan == StatementPlan(PostgresStatementTransformer.SHOW_INDEXES_QUERY, ("orders",))


@pytest.mark.anyio
async def test_postgres_show_tables_needs_no_probe() -> None:
    connection = _FakeConnection(set())

    plan = await PostgresStatementTransformer().transform("Show Tables;", connection)  # type: ignore[arg-type]

    assert plan.sql == PostgresStatementTransformer.SHOW_TABLES_QUERY
    assert connection.executed == []


@pytest.mark.anyio
async def test_postgres_probe_failure_is_wrapped() -> None:
    connection = _FakeConnection(set(), error=RuntimeError("permission denied"))

    with pytest.raises(StatementError, match="Unable to validate that the table exists: permission denied"):
        await PostgresStatementTransformer().transform("DESCRIBE users", connection)  # type: ignore[arg-type]


@pytest.mark.anyio
async def test_postgres_leaves_plain_sql_alone() -> None:
    connection = _FakeConnection(set())

    plan = await PostgresStatementTransformer().transform("SELECT 1;", connection)  # type: ignore[arg-type]

    assert plan == StatementPlan("SELECT 1;")


@pytest.mark.anyio
@pytest.mark.parametrize(
    ("statement", "command"),
    [("DESCRIBE users", "DESCRIBE"), ("SHOW INDEXES FROM users", "SHOW INDEXES"), ("SHOW TABLES", "SHOW TABLES")],
)
async def test_unknown_flavor_rejects_meta_commands(statement: str, command: str) -> None:
    transformer = create_transformer("oracle")

    with pytest.raises(CommandNotSupportedError, match=f"{command} not supported for oracle"):
        await transformer.transform(statement, _FakeConnection(set()))  # type: ignore[arg-type]


def test_create_transformer_picks_flavor_class() -> None:
    assert isinstance(create_transformer(Flavor.MYSQL), MySQLStatementTransformer)
    assert isinstance(create_transformer(Flavor.POSTGRESQL), PostgresStatementTransformer)
    assert type(create_transformer(None)) is StatementTransformer


@pytest.mark.parametrize(
    ("statement", "expected"),
    [("SHOW TABLES", True), ("show tables;", True), (" show tables ", True), ("SHOW TABLES ;", False), ("SHOW TABLE", False), ("SHOW  TABLES", False)],
)
def test_is_show_tables(statement: str, expected: bool) -> None:
    assert StatementTransformer.is_show_tables(statement) is expected
