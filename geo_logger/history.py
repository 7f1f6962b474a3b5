"""In-memory, append-only session history."""

from __future__ import annotations

import logging
from typing import Callable, Iterator

from geo_logger.models import HistoryEntry

logger = logging.getLogger(__name__)


class SessionHistory:
    """Ordered sequence of captured entries, kept for the session lifetime only.

    Entries are never removed, reordered or replaced. :meth:`iterate` returns a
    snapshot, so a reader holding it does not observe later appends.
    """

    def __init__(self, on_append: Callable[[HistoryEntry], None] | None = None) -> None:
        self._entries: list[HistoryEntry] = []
        self._on_append = on_append

    def append(self, entry: HistoryEntry) -> None:
        self._entries.append(entry)
        logger.debug("history append #%s at %s", len(self._entries), entry.timestamp)
        if self._on_append is not None:
            self._on_append(entry)

    def is_empty(self) -> bool:
        return not self._entries

    def count(self) -> int:
        return len(self._entries)

    def iterate(self) -> tuple[HistoryEntry, ...]:
        """Snapshot of all entries in capture order."""

        return tuple(self._entries)

    def latest(self) -> HistoryEntry | None:
        return self._entries[-1] if self._entries else None

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(self.iterate())
