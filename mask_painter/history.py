"""Undo/redo over full mask snapshots."""
from __future__ import annotations

from typing import List, Optional

import numpy as np

from .logging_config import logger


class HistoryStack:
    """Ordered snapshots plus a cursor pointing at the live state.

    Entries after the cursor are redo states; pushing a new snapshot drops
    them. Undo/redo at either end are no-ops returning None.
    """

    def __init__(self, max_depth: Optional[int] = None):
        self.max_depth = None if max_depth is None else max(1, int(max_depth))
        self._entries: List[np.ndarray] = []
        self._cursor = -1

    def __len__(self):
        return len(self._entries)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return 0 <= self._cursor < len(self._entries) - 1

    def reset(self, bitmap: np.ndarray):
        self._entries = [bitmap.copy()]
        self._cursor = 0

    def clear(self):
        self._entries = []
        self._cursor = -1

    def push(self, bitmap: np.ndarray):
        del self._entries[self._cursor + 1:]
        self._entries.append(bitmap.copy())
        if self.max_depth is not None and len(self._entries) > self.max_depth:
            self._entries = self._entries[-self.max_depth:]
        self._cursor = len(self._entries) - 1
        logger.debug(f"[History] push -> {len(self._entries)} entries, cursor={self._cursor}")

    def undo(self) -> Optional[np.ndarray]:
        if not self.can_undo:
            return None
        self._cursor -= 1
        logger.debug(f"[History] undo cursor={self._cursor}")
        return self._entries[self._cursor]

    def redo(self) -> Optional[np.ndarray]:
        if not self.can_redo:
            return None
        self._cursor += 1
        logger.debug(f"[History] redo cursor={self._cursor}")
        return self._entries[self._cursor]

    def current(self) -> Optional[np.ndarray]:
        if self._cursor < 0:
            return None
        return self._entries[self._cursor]


__all__ = ['HistoryStack']
