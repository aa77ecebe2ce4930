"""Scrolling log of executed statements and their outcomes."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.widgets import Button, DataTable, Static

from sqlpane.results import QueryResult

NO_RESULTS_MESSAGE = "Success: 0 results returned"


class ResultBlock(Vertical):
    """One executed statement: the echoed SQL, copy actions and its outcome."""

    DEFAULT_CSS = """
    ResultBlock {
        height: auto;
        margin-bottom: 1;
    }

    ResultBlock .result-header {
        height: auto;
    }

    ResultBlock .result-sql {
        width: 1fr;
        color: $text-muted;
    }

    ResultBlock .result-actions {
        width: auto;
        height: auto;
    }

    ResultBlock .result-actions Button {
        min-width: 10;
        height: 1;
        border: none;
        margin-left: 1;
    }

    ResultBlock .result-error {
        color: $error;
    }

    ResultBlock DataTable {
        height: auto;
        max-height: 20;
    }
    """

    def __init__(
        self,
        sql: str,
        result: QueryResult | None = None,
        *,
        error: str | None = None,
        result_limit: int = 500,
    ) -> None:
        super().__init__()
        self.sql = sql
        self.result = result
        self.error = error
        self._result_limit = result_limit

    @property
    def has_rows(self) -> bool:
        return self.error is None and self.result is not None and self.result.row_count > 0

    @property
    def output_text(self) -> str:
        """Text copied by "Copy Output" for blocks without rows."""

        return self.error if self.error is not None else NO_RESULTS_MESSAGE

    def compose(self) -> ComposeResult:
        with Horizontal(classes="result-header"):
            yield Static(f"> {self.sql}", markup=False, classes="result-sql")
            with Horizontal(classes="result-actions"):
                if self.has_rows:
                    yield Button("Copy as CSV", id="copy-csv")
                    yield Button("Copy as JSON", id="copy-json")
                else:
                    yield Button("Copy Output", id="copy-output")
        if self.error is not None:
            yield Static(self.error, markup=False, classes="result-error")
        elif self.has_rows:
            yield DataTable(zebra_stripes=True, cursor_type="cell")
        else:
            yield Static(NO_RESULTS_MESSAGE, classes="result-empty")

    def on_mount(self) -> None:
        if not self.has_rows or self.result is None:
            return
        table = self.query_one(DataTable)
        table.add_columns(*self.result.columns)
        for row in self.result.rows[: self._result_limit]:
            table.add_row(*(str(row[column]) for column in self.result.columns))
        hidden = self.result.row_count - self._result_limit
        if hidden > 0:
            self.mount(Static(f"… {hidden} more rows not shown", classes="result-truncated"))

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        if event.button.id == "copy-csv" and self.result is not None:
            self._copy(self.result.to_csv().decode("utf-8"), "CSV")
        elif event.button.id == "copy-json" and self.result is not None:
            self._copy(self.result.to_json().decode("utf-8"), "JSON")
        elif event.button.id == "copy-output":
            self._copy(self.output_text, "Output")

    def on_data_table_cell_selected(self, event: DataTable.CellSelected) -> None:
        event.stop()
        self._copy(str(event.value), "Cell")

    def _copy(self, text: str, label: str) -> None:
        self.app.copy_to_clipboard(text)
        self.app.notify(f"{label} copied to clipboard.", timeout=2)


class ResultLog(VerticalScroll):
    """Append-only column of result blocks, newest at the bottom."""

    DEFAULT_CSS = """
    ResultLog {
        height: 1fr;
        padding: 0 1;
    }

    ResultLog .result-error {
        color: $error;
    }
    """

    def __init__(self, *, result_limit: int = 500, id: str | None = "result-log") -> None:
        super().__init__(id=id)
        self._result_limit = result_limit

    async def add_result(self, sql: str, result: QueryResult | None) -> ResultBlock:
        return await self._append(ResultBlock(sql, result, result_limit=self._result_limit))

    async def add_error(self, sql: str, error: str) -> ResultBlock:
        return await self._append(ResultBlock(sql, error=error, result_limit=self._result_limit))

    async def add_message(self, text: str, *, error: bool = False) -> Static:
        message = Static(text, markup=False, classes="result-error" if error else "result-note")
        await self.mount(message)
        self.scroll_end(animate=False)
        return message

    async def clear_results(self) -> None:
        await self.remove_children()

    async def _append(self, block: ResultBlock) -> ResultBlock:
        await self.mount(block)
        self.scroll_end(animate=False)
        return block


__all__ = ["NO_RESULTS_MESSAGE", "ResultBlock", "ResultLog"]
