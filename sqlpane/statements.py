"""Rewrites client-side meta-commands into SQL the connected engine understands."""

from __future__ import annotations

import re
from dataclasses import dataclass

from .drivers import DatabaseConnection
from .models import Flavor


class StatementError(RuntimeError):
    """Raised when a statement cannot be prepared for execution."""


class CommandNotSupportedError(StatementError):
    """Raised when a meta-command has no translation for the active flavor."""

    def __init__(self, command: str, flavor: object) -> None:
        super().__init__(f"{command} not supported for {flavor}")
        self.command = command
        self.flavor = flavor


class TableNotFoundError(StatementError):
    """Raised when a meta-command references a table that does not exist."""

    def __init__(self, table: str) -> None:
        super().__init__(f"Table {table} does not exist")
        self.table = table


@dataclass(frozen=True, slots=True)
class StatementPlan:
    """SQL to send to the server plus its positional parameters."""

    sql: str
    params: tuple[object, ...] = ()


class StatementTransformer:
    """Recognizes DESCRIBE, SHOW TABLES and SHOW INDEXES and plans their execution.

    Subclasses decide how each meta-command maps onto their engine; this base
    class knows none of them and rejects all three.
    """

    def __init__(self, flavor: object = None) -> None:
        self.flavor = flavor
        self._describe = re.compile(r'^DESCRIBE "?(\w+)"?;?$', re.IGNORECASE)
        self._show_indexes = re.compile(r'^SHOW INDEXES FROM "?(\w+)"?;?$', re.IGNORECASE)

    async def transform(self, statement: str, connection: DatabaseConnection) -> StatementPlan:
        """Return the plan to execute for a raw statement."""

        stripped = statement.strip()
        if match := self._describe.match(stripped):
            return await self.describe(match.group(1), statement, connection)
        if match := self._show_indexes.match(stripped):
            return await self.show_indexes(match.group(1), statement, connection)
        if self.is_show_tables(statement):
            return await self.show_tables(statement, connection)
        return StatementPlan(statement)

    @staticmethod
    def is_show_tables(statement: str) -> bool:
        return statement.strip().upper().replace(";", "") == "SHOW TABLES"

    async def describe(self, table: str, statement: str, connection: DatabaseConnection) -> StatementPlan:
        raise CommandNotSupportedError("DESCRIBE", self.flavor)

    async def show_indexes(self, table: str, statement: str, connection: DatabaseConnection) -> StatementPlan:
        raise CommandNotSupportedError("SHOW INDEXES", self.flavor)

    async def show_tables(self, statement: str, connection: DatabaseConnection) -> StatementPlan:
        raise CommandNotSupportedError("SHOW TABLES", self.flavor)


class MySQLStatementTransformer(StatementTransformer):
    """MySQL implements every meta-command natively."""

    def __init__(self) -> None:
        super().__init__(Flavor.MYSQL)

    async def describe(self, table: str, statement: str, connection: DatabaseConnection) -> StatementPlan:
        return StatementPlan(statement)

    async def show_indexes(self, table: str, statement: str, connection: DatabaseConnection) -> StatementPlan:
        return StatementPlan(statement)

    async def show_tables(self, statement: str, connection: DatabaseConnection) -> StatementPlan:
        return StatementPlan(statement)


class PostgresStatementTransformer(StatementTransformer):
    """Maps the MySQL vocabulary onto information_schema / pg_catalog queries."""

    TABLE_EXISTS_QUERY = """
        SELECT EXISTS (
            SELECT 1
            FROM information_schema.tables
            WHERE table_schema = current_schema()
            AND table_name = $1
        )
    """

    SHOW_TABLES_QUERY = """
        SELECT table_name
        FROM information_schema.tables
        WHERE table_schema = current_schema()
        ORDER BY table_name ASC
    """

    SHOW_INDEXES_QUERY = """
        SELECT indexname, indexdef
        FROM pg_indexes
        WHERE tablename = $1
        ORDER BY indexname ASC
    """

    DESCRIBE_QUERY = """
        WITH columns AS (
          SELECT
            c.column_name AS "Field",
            CASE
                WHEN c.data_type IN ('character', 'character varying')
                     AND c.character_maximum_length IS NOT NULL
                    THEN c.data_type || '(' || c.character_maximum_length || ')'
                WHEN c.data_type = 'numeric'
                    THEN c.data_type || '(' || c.numeric_precision || ', ' || c.numeric_scale || ')'
                ELSE c.data_type
            END AS "Type",
            CASE WHEN c.is_nullable = 'YES' THEN 'YES' ELSE 'NO' END AS "Null",
            CASE
                WHEN kcu.column_name IS NOT NULL AND tc.constraint_type = 'PRIMARY KEY' THEN 'PRI'
                WHEN kcu.column_name IS NOT NULL AND tc.constraint_type = 'UNIQUE' THEN 'UNI'
                WHEN i.indexname IS NOT NULL AND i.indisunique THEN 'UNI'
                WHEN i.indexname IS NOT NULL THEN 'MUL'
                ELSE ''
            END AS "Key",
            COALESCE(c.column_default, 'NULL') AS "Default",
            c.ordinal_position
          FROM information_schema.columns c
          LEFT JOIN information_schema.key_column_usage kcu
            ON c.table_schema = kcu.table_schema
            AND c.table_name = kcu.table_name
            AND c.column_name = kcu.column_name
          LEFT JOIN information_schema.table_constraints tc
            ON kcu.table_schema = tc.table_schema
            AND kcu.table_name = tc.table_name
            AND kcu.constraint_name = tc.constraint_name
          LEFT JOIN (
            SELECT
              ic.relname AS indexname,
              a.attname AS column_name,
              t.relname AS table_name,
              a.attnum,
              i.indkey,
              i.indkey[0] AS first_column,
              i.indisunique
            FROM pg_class t
            JOIN pg_index i ON t.oid = i.indrelid
            JOIN pg_class ic ON ic.oid = i.indexrelid
            JOIN pg_attribute a ON a.attrelid = t.oid AND a.attnum = ANY(i.indkey)
            JOIN pg_namespace n ON n.oid = t.relnamespace
            WHERE t.relkind = 'r'
              AND ic.relkind = 'i'
              AND i.indisprimary = false
              AND n.nspname = current_schema()
          ) i
            ON c.table_name = i.table_name
            AND c.column_name = i.column_name
            AND (i.attnum = i.first_column OR array_length(i.indkey, 1) = 1)
          WHERE c.table_schema = current_schema()
            AND c.table_name = $1
        )
        SELECT DISTINCT ON (ordinal_position) "Field", "Type", "Null", "Key", "Default"
        FROM columns
        ORDER BY ordinal_position,
            CASE "Key" WHEN 'PRI' THEN 0 WHEN 'UNI' THEN 1 WHEN 'MUL' THEN 2 ELSE 3 END
    """

    def __init__(self) -> None:
        super().__init__(Flavor.POSTGRESQL)

    async def describe(self, table: str, statement: str, connection: DatabaseConnection) -> StatementPlan:
        await self._assert_table_exists(table, connection)
        return StatementPlan(self.DESCRIBE_QUERY, (table,))

    async def show_indexes(self, table: str, statement: str, connection: DatabaseConnection) -> StatementPlan:
        await self._assert_table_exists(table, connection)
        return StatementPlan(self.SHOW_INDEXES_QUERY, (table,))

    async def show_tables(self, statement: str, connection: DatabaseConnection) -> StatementPlan:
        return StatementPlan(self.SHOW_TABLES_QUERY)

    async def _assert_table_exists(self, table: str, connection: DatabaseConnection) -> None:
        try:
            cursor = await connection.execute(self.TABLE_EXISTS_QUERY, (table,))
            row = None
            if cursor is not None:
                try:
                    row = await cursor.fetchone()
                finally:
                    await cursor.close()
        except Exception as exc:
            raise StatementError(f"Unable to validate that the table exists: {exc}") from exc
        if not row or not row[0]:
            raise TableNotFoundError(table)


_TRANSFORMERS: dict[Flavor, type[StatementTransformer]] = {
    Flavor.MYSQL: MySQLStatementTransformer,
    Flavor.POSTGRESQL: PostgresStatementTransformer,
}


def create_transformer(flavor: object) -> StatementTransformer:
    """Pick the transformer for a flavor; unknown flavors reject meta-commands."""

    if isinstance(flavor, Flavor) and flavor in _TRANSFORMERS:
        return _TRANSFORMERS[flavor]()
    return StatementTransformer(flavor)


__all__ = [
    "CommandNotSupportedError",
    "MySQLStatementTransformer",
    "PostgresStatementTransformer",
    "StatementError",
    "StatementPlan",
    "StatementTransformer",
    "TableNotFoundError",
    "create_transformer",
]
