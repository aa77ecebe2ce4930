"""Command palette providers for core app features."""

from __future__ import annotations

from textual.command import DiscoveryHit, Hit, Hits, Provider
from textual.types import IgnoreReturnCallbackType

_IDENTIFIER_CHARS = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_$-")


class DatabaseSwitchProvider(Provider):
    """Offer `Use database: <name>` for whatever name is typed into the palette."""

    _HELP = "Reconnect to another database on the same server."

    async def search(self, query: str) -> Hits:
        name = query.strip()
        if not self._can_switch or not self._is_database_name(name):
            return
        label = f"Use database: {name}"
        matcher = self.matcher(query)
        yield Hit(
            score=max(matcher.match(label), 1.0),
            match_display=label,
            command=self._build_callback(name),
            help=self._HELP,
        )

    async def discover(self) -> Hits:
        database = self._current_database
        if not self._can_switch or not database:
            return
        yield DiscoveryHit(
            display=f"Reconnect to database: {database}",
            command=self._build_callback(database),
            help=self._HELP,
        )

    @property
    def _can_switch(self) -> bool:
        return callable(getattr(self.app, "switch_database", None))

    @property
    def _current_database(self) -> str:
        options = getattr(self.app, "connection_options", None)
        return getattr(options, "database", "") or ""

    @staticmethod
    def _is_database_name(name: str) -> bool:
        return bool(name) and all(char in _IDENTIFIER_CHARS for char in name)

    def _build_callback(self, name: str) -> IgnoreReturnCallbackType:
        async def _run() -> None:
            switcher = getattr(self.app, "switch_database", None)
            if switcher is None:
                return
            await switcher(name)

        return _run


__all__ = ["DatabaseSwitchProvider"]
