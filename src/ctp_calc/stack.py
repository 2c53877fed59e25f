"""
Value stack used by the parser.

A list-backed LIFO container. The parser creates one for operands and one
for operators per call; both are cleared on every exit path by using the
stack as a context manager.
"""

from typing import Generic, TypeVar

from ctp_calc.observers import ParseObserver

T = TypeVar("T")


class Stack(Generic[T]):
    """Last-in-first-out container with an optional observer."""

    def __init__(self, name: str = "stack", observer: ParseObserver | None = None):
        self.name = name
        self.observer = observer
        self._items: list[T] = []

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __repr__(self) -> str:
        return f"Stack({self.name!r}, {self._items!r})"

    def __enter__(self) -> "Stack[T]":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.clear()

    def push(self, item: T) -> None:
        """Push an item on top of the stack."""
        self._items.append(item)
        if self.observer is not None:
            self.observer.pushed(self.name, item)

    def pop(self) -> T:
        """Remove and return the top item."""
        if not self._items:
            raise IndexError(f"pop from empty {self.name} stack")
        item = self._items.pop()
        if self.observer is not None:
            self.observer.popped(self.name, item)
        return item

    def top(self) -> T:
        """Return the top item without removing it."""
        if not self._items:
            raise IndexError(f"top of empty {self.name} stack")
        return self._items[-1]

    def is_empty(self) -> bool:
        return not self._items

    def snapshot(self) -> list[T]:
        """Return a copy of the items, bottom first."""
        return self._items.copy()

    def clear(self) -> None:
        """Pop every remaining item."""
        while self._items:
            self.pop()
