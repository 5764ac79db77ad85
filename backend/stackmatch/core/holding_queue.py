"""Bounded FIFO holding queue for pieces that fit no lane."""
from collections import deque
from typing import Callable, Deque, Optional, Tuple

from ..models.level import PieceColor, PushResult


class HoldingQueue:
    """Bounded FIFO of colors. A push against a full queue is rejected."""

    def __init__(self, capacity: int = 4):
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._items: Deque[PieceColor] = deque()

    @property
    def capacity(self) -> int:
        return self._capacity

    def push(self, color: PieceColor) -> PushResult:
        """
        Append a color at the tail.

        Returns:
            PushResult; `overflow` is set and nothing is stored when the
            queue is already at capacity.
        """
        if len(self._items) >= self._capacity:
            return PushResult(accepted=False, size=len(self._items), capacity=self._capacity)
        self._items.append(color)
        return PushResult(accepted=True, size=len(self._items), capacity=self._capacity)

    def pop(self) -> Optional[PieceColor]:
        """Remove and return the head, or None when empty."""
        if not self._items:
            return None
        return self._items.popleft()

    def take_first(self, predicate: Callable[[PieceColor], bool]) -> Optional[PieceColor]:
        """
        Remove and return the first color, head first, that satisfies `predicate`.

        Colors ahead of it keep their relative order. Returns None when no
        queued color matches.
        """
        for i, color in enumerate(self._items):
            if predicate(color):
                del self._items[i]
                return color
        return None

    def peek(self) -> Optional[PieceColor]:
        """Head of the queue without removing it."""
        return self._items[0] if self._items else None

    def snapshot(self) -> Tuple[PieceColor, ...]:
        """Read-only copy, head first."""
        return tuple(self._items)

    def size(self) -> int:
        return len(self._items)

    def is_empty(self) -> bool:
        return not self._items

    def is_full(self) -> bool:
        return len(self._items) >= self._capacity

    def __len__(self) -> int:
        return len(self._items)

    def to_dict(self):
        """Convert to dictionary."""
        return {
            "colors": [c.value for c in self._items],
            "size": len(self._items),
            "capacity": self._capacity,
        }
