"""Bounded redo stack of moves taken back by undo."""

from collections import deque
from dataclasses import dataclass
from typing import Deque, Optional

from pawnstorm.core.board import MoveRecord

STACK_SIZE = 100


@dataclass(frozen=True)
class HistoryEntry:
    """A reversed move; the record alone is enough to push it again verbatim."""

    record: MoveRecord


class HistoryStack:
    """LIFO with a fixed capacity. Pushing past it drops the oldest entries."""

    def __init__(self, capacity: int = STACK_SIZE):
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._entries: Deque[HistoryEntry] = deque(maxlen=capacity)

    def push(self, entry: HistoryEntry):
        self._entries.append(entry)

    def pop(self) -> Optional[HistoryEntry]:
        """Most recent entry, or None when empty."""
        if not self._entries:
            return None
        return self._entries.pop()

    def peek(self) -> Optional[HistoryEntry]:
        return self._entries[-1] if self._entries else None

    def clear(self):
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)
