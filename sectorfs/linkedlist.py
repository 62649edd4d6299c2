"""Singly linked lists of arbitrary items, plain and kept in sorted order."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any


class _Node:
    __slots__ = ("item", "next")

    def __init__(self, item: Any) -> None:
        self.item = item
        self.next: _Node | None = None


class LinkedList:
    """A singly linked list; an item may appear in it at most once."""

    def __init__(self) -> None:
        self._first: _Node | None = None
        self._last: _Node | None = None
        self._count = 0

    def _nodes(self) -> Iterator[_Node]:
        node = self._first
        while node is not None:
            yield node
            node = node.next

    def _require_absent(self, item: Any) -> None:
        if item in self:
            raise ValueError(f"{item!r} is already in the list")

    def prepend(self, item: Any) -> None:
        """Put ``item`` at the front of the list."""
        self._require_absent(item)
        node = _Node(item)
        if self._first is None:
            self._first = self._last = node
        else:
            node.next = self._first
            self._first = node
        self._count += 1

    def append(self, item: Any) -> None:
        """Put ``item`` at the end of the list."""
        self._require_absent(item)
        node = _Node(item)
        if self._last is None:
            self._first = self._last = node
        else:
            self._last.next = node
            self._last = node
        self._count += 1

    def front(self) -> Any:
        """Return the first item without removing it."""
        if self._first is None:
            raise IndexError("front of an empty list")
        return self._first.item

    def remove_front(self) -> Any:
        """Remove and return the first item."""
        node = self._first
        if node is None:
            raise IndexError("remove_front from an empty list")
        self._first = node.next
        if self._first is None:
            self._last = None
        self._count -= 1
        return node.item

    def remove(self, item: Any) -> None:
        """Remove ``item``, which must be in the list."""
        prev: _Node | None = None
        for node in self._nodes():
            if item == node.item:
                if prev is None:
                    self._first = node.next
                else:
                    prev.next = node.next
                if node is self._last:
                    self._last = prev
                self._count -= 1
                return
            prev = node
        raise ValueError(f"{item!r} is not in the list")

    def is_empty(self) -> bool:
        """Return whether the list holds no items."""
        return self._count == 0

    def apply(self, func: Callable[[Any], Any]) -> None:
        """Call ``func`` on every item, front to back."""
        for item in self:
            func(item)

    def sanity_check(self) -> None:
        """Raise RuntimeError if the list's links or count are inconsistent."""
        if self._first is None:
            if self._count != 0 or self._last is not None:
                raise RuntimeError("empty list has a count or a last element")
            return
        found = 0
        node: _Node | None = self._first
        tail = self._first
        while node is not None:
            found += 1
            if found > self._count:
                raise RuntimeError("list holds more elements than its count")
            tail = node
            node = node.next
        if found != self._count:
            raise RuntimeError("list holds fewer elements than its count")
        if tail is not self._last:
            raise RuntimeError("last element is not the end of the chain")

    def __contains__(self, item: Any) -> bool:
        return any(item == node.item for node in self._nodes())

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[Any]:
        return (node.item for node in self._nodes())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self)!r})"


class SortedList(LinkedList):
    """A linked list kept in increasing order by a three-way ``compare`` function.

    ``compare(x, y)`` returns a negative number if x < y, zero if they are
    equal and a positive number if x > y. Equal items keep insertion order.
    """

    def __init__(self, compare: Callable[[Any, Any], int]) -> None:
        super().__init__()
        self._compare = compare

    def insert(self, item: Any) -> None:
        """Insert ``item`` after every item not greater than it."""
        self._require_absent(item)
        node = _Node(item)
        if self._first is None:
            self._first = self._last = node
        elif self._compare(item, self._first.item) < 0:
            node.next = self._first
            self._first = node
        else:
            prev = self._first
            while prev.next is not None and self._compare(item, prev.next.item) >= 0:
                prev = prev.next
            node.next = prev.next
            prev.next = node
            if node.next is None:
                self._last = node
        self._count += 1

    def append(self, item: Any) -> None:
        """Insert ``item`` in sorted position."""
        self.insert(item)

    def prepend(self, item: Any) -> None:
        """Insert ``item`` in sorted position."""
        self.insert(item)

    def sanity_check(self) -> None:
        """Raise RuntimeError if the list is inconsistent or out of order."""
        super().sanity_check()
        items = list(self)
        for left, right in zip(items, items[1:]):
            if self._compare(left, right) > 0:
                raise RuntimeError(f"{left!r} is ordered before {right!r}")