"""Bounded history of committed statements with previous/next browsing."""

from __future__ import annotations


class QueryHistory:
    """Ring buffer of the last `size` statements.

    Browsing starts at the newest entry and walks backwards; adding an entry
    ends any browsing in progress.
    """

    def __init__(self, size: int = 100) -> None:
        if size < 1:
            raise ValueError("History size must be at least 1.")
        self._entries: list[str] = [""] * size
        self._size = size
        self._write = 0
        self._read: int | None = None

    @property
    def size(self) -> int:
        return self._size

    @property
    def is_navigating(self) -> bool:
        return self._read is not None

    def add(self, entry: str) -> None:
        self.reset()
        self._entries[self._write] = entry
        self._write = self._step(self._write, 1)

    def previous(self) -> str:
        """Step back one entry; empty once the oldest entry has been passed."""

        if self._read == self._write:
            return ""
        if self._read is None:
            self._read = self._write
        self._read = self._step(self._read, -1)
        if self._entries[self._read] == "":
            # Ran into unused slots or came full circle; stay put.
            self._read = self._step(self._read, 1)
        return self._entries[self._read]

    def next(self) -> str:
        """Step forward one entry; empty when not browsing or already at the newest."""

        if self._read is None:
            return ""
        if self._read == self._step(self._write, -1):
            return ""
        self._read = self._step(self._read, 1)
        return self._entries[self._read]

    def reset(self) -> None:
        """Stop browsing; the next `previous()` starts from the newest entry."""

        self._read = None

    def _step(self, index: int, delta: int) -> int:
        return (index + delta) % self._size


__all__ = ["QueryHistory"]
