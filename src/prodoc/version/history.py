"""
Linear undo/redo history over serialized content snapshots.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 50


@dataclass(frozen=True)
class HistoryEntry:
    """A recorded snapshot of document content."""

    content: str
    timestamp: datetime = field(default_factory=datetime.now, compare=False)


class HistoryManager:
    """
    Bounded list of snapshots with a cursor.

    Recording after an undo discards the redo branch. Adjacent entries never
    hold equal content, and the oldest entry is evicted once the limit is
    exceeded.
    """

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT):
        if limit < 1:
            raise ValueError(f"History limit must be positive, got {limit}")
        self.limit = limit
        self._entries: List[HistoryEntry] = []
        self._cursor = -1

    def record(self, snapshot: str) -> bool:
        """
        Record a snapshot of the current content.

        Args:
            snapshot: Serialized document content

        Returns:
            False when the snapshot equals the current entry and nothing was
            recorded
        """
        if self._cursor >= 0 and self._entries[self._cursor].content == snapshot:
            return False

        del self._entries[self._cursor + 1:]
        self._entries.append(HistoryEntry(snapshot))
        self._cursor += 1

        if len(self._entries) > self.limit:
            self._entries.pop(0)
            self._cursor -= 1

        logger.debug(f"Recorded history entry {self._cursor + 1}/{len(self._entries)}")
        return True

    def undo(self) -> Optional[HistoryEntry]:
        """Step back; returns the entry to apply, or None at the oldest entry."""
        if not self.can_undo:
            return None
        self._cursor -= 1
        return self._entries[self._cursor]

    def redo(self) -> Optional[HistoryEntry]:
        """Step forward; returns the entry to apply, or None at the newest entry."""
        if not self.can_redo:
            return None
        self._cursor += 1
        return self._entries[self._cursor]

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._entries) - 1

    @property
    def current(self) -> Optional[HistoryEntry]:
        return self._entries[self._cursor] if self._cursor >= 0 else None

    @property
    def entries(self) -> List[HistoryEntry]:
        return list(self._entries)

    @property
    def cursor(self) -> int:
        return self._cursor

    def clear(self) -> None:
        self._entries.clear()
        self._cursor = -1
