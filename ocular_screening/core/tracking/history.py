"""
Bounded sample history.

FIFO buffer with a fixed capacity; the oldest entry is evicted on overflow.
Append and snapshot are atomic so a host may read from another thread.
"""
from collections import deque
from threading import Lock
from typing import Deque, Generic, Optional, Tuple, TypeVar

T = TypeVar("T")


class SampleHistory(Generic[T]):
    """Capacity-bounded rolling window of immutable samples."""

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"History capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._items: Deque[T] = deque(maxlen=capacity)
        self._lock = Lock()

    def append(self, item: T) -> None:
        with self._lock:
            self._items.append(item)

    def snapshot(self) -> Tuple[T, ...]:
        """Oldest-first immutable copy of the current window."""
        with self._lock:
            return tuple(self._items)

    def last(self) -> Optional[T]:
        with self._lock:
            return self._items[-1] if self._items else None

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __repr__(self) -> str:
        return f"<SampleHistory({len(self)}/{self.capacity})>"
