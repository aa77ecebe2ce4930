"""Display-ready result sets and their clipboard serializations."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import ClassVar, Mapping

NULL_TEXT = "NULL"


@dataclass(frozen=True, slots=True)
class Cell:
    """A single result value flattened to text; `text is None` means SQL NULL."""

    text: str | None

    NULL: ClassVar[Cell]

    @property
    def is_null(self) -> bool:
        return self.text is None

    def __str__(self) -> str:
        if self.text is None:
            return NULL_TEXT
        return self.text


Cell.NULL = Cell(None)


@dataclass(frozen=True, slots=True)
class QueryResult:
    """Rows keyed by column name, with the column order of the projection."""

    columns: tuple[str, ...]
    rows: tuple[Mapping[str, Cell], ...] = ()

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def to_json(self) -> bytes:
        """Serialize rows as a JSON array of objects; NULL cells become `null`."""

        payload = [
            {column: row[column].text for column in self.columns}
            for row in self.rows
        ]
        return json.dumps(payload, ensure_ascii=False).encode("utf-8")

    def to_csv(self) -> bytes:
        """Serialize as comma separated text.

        Values are not quoted, so embedded commas are not escaped.
        """

        lines = [",".join(self.columns)]
        for row in self.rows:
            lines.append(",".join(str(row[column]) for column in self.columns))
        return "\n".join(lines).encode("utf-8")


def as_text(value: object) -> str | None:
    """Flatten a driver value into the text shown to the user."""

    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (bytes, bytearray, memoryview)):
        raw = bytes(value)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError:
            return "\\x" + raw.hex()
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, timedelta):
        return str(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (list, tuple)):
        items = (NULL_TEXT if item is None else as_text(item) for item in value)
        return "{" + ",".join(items) + "}"
    return str(value)


__all__ = ["Cell", "NULL_TEXT", "QueryResult", "as_text"]
