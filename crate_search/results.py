from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import replace

from crate_search.models import Crate


class ResultSet:
    """Crates returned by one query, plus the cursor and readme scroll offset.

    The sequence never changes length after construction. A single lock
    guards the records, the cursor and the scroll offset; it is held only for
    the in-memory work of each call so the enrichment thread can share the
    instance with the interface.
    """

    def __init__(self, crates: Iterable[Crate] = ()) -> None:
        self._lock = threading.Lock()
        self._crates: list[Crate] = list(crates)
        self._selected: int | None = None
        self._scroll = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._crates)

    @property
    def selected(self) -> int | None:
        with self._lock:
            return self._selected

    @property
    def scroll(self) -> int:
        with self._lock:
            return self._scroll

    def _select_locked(self, index: int | None) -> None:
        if index is not None:
            if not self._crates:
                index = None
            else:
                index = min(max(index, 0), len(self._crates) - 1)
        self._selected = index
        self._scroll = 0

    def select(self, index: int | None) -> None:
        with self._lock:
            self._select_locked(index)

    def select_relative(self, delta: int, count: int = 1) -> None:
        with self._lock:
            if self._selected is None:
                return
            self._select_locked(self._selected + delta * count)

    def select_last(self) -> None:
        with self._lock:
            if self._crates:
                self._select_locked(len(self._crates) - 1)

    def scroll_by(self, delta: int) -> None:
        with self._lock:
            self._scroll = max(0, self._scroll + delta)

    def get(self, index: int) -> Crate | None:
        with self._lock:
            if 0 <= index < len(self._crates):
                return self._crates[index]
            return None

    def selected_record(self) -> Crate | None:
        with self._lock:
            if self._selected is None:
                return None
            return self._crates[self._selected]

    def set_enrichment(self, index: int, text: str) -> bool:
        """Store readme text unless the record already has some."""
        with self._lock:
            if not 0 <= index < len(self._crates):
                return False
            crate = self._crates[index]
            if crate.readme is not None:
                return False
            self._crates[index] = replace(crate, readme=text)
            return True

    def pending_enrichment(self) -> list[tuple[int, str]]:
        with self._lock:
            return [
                (index, crate.repository)
                for index, crate in enumerate(self._crates)
                if crate.readme is None and crate.repository
            ]

    def snapshot(self) -> tuple[tuple[Crate, ...], int | None, int]:
        with self._lock:
            return tuple(self._crates), self._selected, self._scroll
