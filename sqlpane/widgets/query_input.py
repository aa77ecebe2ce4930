"""Multi-line SQL editor that commits on a terminating semicolon."""

from __future__ import annotations

from textual import events
from textual.message import Message
from textual.widgets import TextArea

from sqlpane.history import QueryHistory


class QueryInput(TextArea):
    """TextArea wired to the query history.

    Enter runs the buffer when its trimmed text ends with `;` and inserts a
    newline otherwise. Up/Down walk the history while the buffer is empty or
    a walk is already in progress.
    """

    DEFAULT_CSS = """
    QueryInput {
        height: 6;
        border: round $primary 40%;
    }

    QueryInput:focus {
        border: round $primary;
    }
    """

    class Submitted(Message):
        """Posted when a complete statement is committed."""

        def __init__(self, query_input: QueryInput, sql: str) -> None:
            super().__init__()
            self.query_input = query_input
            self.sql = sql

        @property
        def control(self) -> QueryInput:
            return self.query_input

    def __init__(self, history: QueryHistory, *, id: str | None = "query-input") -> None:
        super().__init__("", id=id, soft_wrap=True, show_line_numbers=False)
        self.border_title = "Query"
        self._query_history = history

    @property
    def query_history(self) -> QueryHistory:
        return self._query_history

    async def _on_key(self, event: events.Key) -> None:
        key = event.key
        if key == "enter":
            sql = self.text.strip()
            if sql.endswith(";"):
                event.stop()
                event.prevent_default()
                self._query_history.add(sql)
                self.load_text("")
                self.post_message(self.Submitted(self, sql))
            return
        if key in {"up", "down"} and (not self.text or self._query_history.is_navigating):
            event.stop()
            event.prevent_default()
            entry = self._query_history.previous() if key == "up" else self._query_history.next()
            self._show_entry(entry)
            return
        # Any other key ends the walk; TextArea's own handler still runs.
        self._query_history.reset()

    def _show_entry(self, entry: str) -> None:
        self.load_text(entry)
        self.move_cursor(self.document.end)


__all__ = ["QueryInput"]
