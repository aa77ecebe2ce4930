"""Status bar widget that mirrors the connection and the last statement."""

from __future__ import annotations

from textual.widgets import Static

from sqlpane.models import ConnectionOptions


class StatusBar(Static):
    """Compact status strip rendered above Textual's footer."""

    DEFAULT_CSS = """
    StatusBar {
        height: 1;
        padding: 0 1;
        background: $surface-darken-3;
        color: $text;
    }
    """

    def __init__(self, options: ConnectionOptions) -> None:
        super().__init__("", id="status-bar", markup=False)
        self._options = options
        self._status = "Connecting"

    @property
    def status(self) -> str:
        return self._status

    def on_mount(self) -> None:
        self._render_status()

    def set_options(self, options: ConnectionOptions) -> None:
        self._options = options
        self._render_status()

    def set_status(self, status: str) -> None:
        # Multi-line driver errors are cut to their first line.
        self._status = status.splitlines()[0][:80] if status else ""
        self._render_status()

    def _render_status(self) -> None:
        options = self._options
        target = options.host or "default"
        if options.port:
            target = f"{target}:{options.port}"
        parts = [
            f"Flavor: {options.flavor}",
            f"Target: {target}",
            f"Database: {options.database or '—'}",
        ]
        if options.safe_mode:
            parts.append("Safe mode")
        if self._status:
            parts.append(f"Status: {self._status}")
        self.update(" | ".join(parts))


__all__ = ["StatusBar"]
