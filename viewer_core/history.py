# viewer_core/history.py
from __future__ import annotations
from collections import deque
from typing import Iterator, List


class QueryHistory:
    """Last N submitted query strings, oldest first."""

    def __init__(self, capacity: int = 10):
        if capacity < 1:
            raise ValueError("capacity must be > 0")
        self.capacity = capacity
        self._items: deque[str] = deque(maxlen=capacity)

    def push(self, sql: str) -> None:
        self._items.append(sql)

    def items(self) -> List[str]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)
