"""Textual application shell for sqlpane."""

from __future__ import annotations

import logging

from textual import work
from textual.app import App, ComposeResult
from textual.widgets import Footer, Header

from .connections import DatabaseConnectionError
from .history import QueryHistory
from .models import ConnectionOptions
from .providers import DatabaseSwitchProvider
from .query import RECOVERABLE_ERRORS, QueryExecutor
from .widgets import QueryInput, ResultLog, StatusBar

LOG = logging.getLogger(__name__)


class SqlpaneApp(App[None]):
    """Result log on top, query editor below, one connection underneath."""

    TITLE = "sqlpane"
    COMMANDS = App.COMMANDS | {DatabaseSwitchProvider}
    CSS = """
    Screen {
        layout: vertical;
    }
    #result-log {
        height: 1fr;
    }
    #query-input {
        margin: 0 1;
    }
    """

    BINDINGS = [
        ("ctrl+c", "quit", "Quit"),
        ("ctrl+l", "clear_results", "Clear Results"),
        ("ctrl+p", "command_palette", "Command Palette"),
    ]

    def __init__(
        self,
        executor: QueryExecutor,
        *,
        history_size: int = 100,
        result_limit: int = 500,
    ) -> None:
        super().__init__()
        self._executor = executor
        self._history = QueryHistory(history_size)
        self._result_limit = result_limit
        self._result_log: ResultLog | None = None
        self._status_bar: StatusBar | None = None

    @property
    def executor(self) -> QueryExecutor:
        return self._executor

    @property
    def query_history(self) -> QueryHistory:
        return self._history

    @property
    def connection_options(self) -> ConnectionOptions:
        return self._executor.manager.options

    def compose(self) -> ComposeResult:
        """Compose the root layout."""

        yield Header(show_clock=True)
        self._result_log = ResultLog(result_limit=self._result_limit)
        yield self._result_log
        yield QueryInput(self._history)
        self._status_bar = StatusBar(self.connection_options)
        yield self._status_bar
        yield Footer()

    async def on_mount(self) -> None:
        self.sub_title = str(self.connection_options.flavor)
        self.query_one(QueryInput).focus()
        self._connect()

    @work(exclusive=True, group="connect")
    async def _connect(self) -> None:
        try:
            await self._executor.manager.connect()
        except DatabaseConnectionError as exc:
            LOG.warning("Initial connection failed", extra={"error": str(exc)})
            self._set_status("Disconnected")
            if self._result_log is not None:
                await self._result_log.add_message(str(exc), error=True)
            return
        self._set_status("Connected")

    async def on_query_input_submitted(self, event: QueryInput.Submitted) -> None:
        event.stop()
        await self.run_statement(event.sql)

    async def run_statement(self, sql: str) -> None:
        """Execute a statement and append its outcome to the result log."""

        result_log = self._require_result_log()
        self._set_status("Executing…")
        try:
            result = await self._executor.query(sql)
        except RECOVERABLE_ERRORS as exc:
            self._set_status("Error")
            await result_log.add_error(sql, str(exc))
            return
        rows = result.row_count if result is not None else 0
        self._set_status(f"{rows} row{'s' if rows != 1 else ''}")
        await result_log.add_result(sql, result)

    async def switch_database(self, name: str) -> None:
        """Reconnect to another database; the current one is kept on failure."""

        try:
            await self._executor.manager.use_database(name)
        except DatabaseConnectionError as exc:
            LOG.info("Database switch failed", extra={"database": name, "error": str(exc)})
            self.notify(str(exc), title="Use database", severity="error")
            return
        if self._status_bar is not None:
            self._status_bar.set_options(self.connection_options)
        self._set_status("Connected")
        self.notify(f"Using database {name}", title="Use database")

    async def action_clear_results(self) -> None:
        await self._require_result_log().clear_results()

    async def on_unmount(self) -> None:
        await self._executor.close()

    def _set_status(self, status: str) -> None:
        if self._status_bar is not None:
            self._status_bar.set_status(status)

    def _require_result_log(self) -> ResultLog:
        if self._result_log is None:
            raise RuntimeError("Result log is not mounted.")
        return self._result_log


__all__ = ["SqlpaneApp"]
