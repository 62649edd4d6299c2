"""A self-expanding chained hash table of items, each carrying its own key."""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterator
from typing import Any

from sectorfs.linkedlist import LinkedList

INITIAL_BUCKETS = 4
RESIZE_RATIO = 3
INCREASE_SIZE_BY = 4

_UNSIGNED_MASK = 0xFFFFFFFF


class HashTable:
    """A hash table of items looked up by a key derived from each item.

    ``get_key(item)`` returns the item's key and ``hash_func(key)`` returns a
    number for it; the hash is taken as an unsigned 32-bit value. Collisions
    are chained, and the bucket array grows fourfold once the table holds
    three items per bucket on average.
    """

    def __init__(
        self,
        get_key: Callable[[Any], Hashable],
        hash_func: Callable[[Any], int],
    ) -> None:
        self._get_key = get_key
        self._hash = hash_func
        self._count = 0
        self._buckets = self._new_buckets(INITIAL_BUCKETS)

    @staticmethod
    def _new_buckets(size: int) -> list[LinkedList]:
        return [LinkedList() for _ in range(size)]

    @property
    def bucket_count(self) -> int:
        """The current number of buckets."""
        return len(self._buckets)

    def _bucket_index(self, key: Any) -> int:
        return (self._hash(key) & _UNSIGNED_MASK) % len(self._buckets)

    def _find_in_bucket(self, index: int, key: Any) -> tuple[bool, Any]:
        for item in self._buckets[index]:
            if key == self._get_key(item):
                return True, item
        return False, None

    def _rehash(self) -> None:
        self.sanity_check()
        old = self._buckets
        self._buckets = self._new_buckets(len(old) * INCREASE_SIZE_BY)
        for bucket in old:
            while not bucket.is_empty():
                item = bucket.remove_front()
                self._buckets[self._bucket_index(self._get_key(item))].append(item)
        self.sanity_check()

    def insert(self, item: Any) -> None:
        """Add ``item``; its key must not already be in the table."""
        key = self._get_key(item)
        if key in self:
            raise ValueError(f"key {key!r} is already in the table")
        if self._count // len(self._buckets) >= RESIZE_RATIO:
            self._rehash()
        self._buckets[self._bucket_index(key)].append(item)
        self._count += 1

    def remove(self, key: Any) -> Any:
        """Remove and return the item with ``key``, which must be in the table."""
        index = self._bucket_index(key)
        found, item = self._find_in_bucket(index, key)
        if not found:
            raise KeyError(key)
        self._buckets[index].remove(item)
        self._count -= 1
        return item

    def find(self, key: Any) -> Any:
        """Return the item with ``key``, or None if there is none."""
        return self._find_in_bucket(self._bucket_index(key), key)[1]

    def is_empty(self) -> bool:
        """Return whether the table holds no items."""
        return self._count == 0

    def apply(self, func: Callable[[Any], Any]) -> None:
        """Call ``func`` on every item, bucket by bucket."""
        for item in self:
            func(item)

    def sanity_check(self) -> None:
        """Raise RuntimeError if the buckets, count or placement are inconsistent."""
        found = 0
        for index, bucket in enumerate(self._buckets):
            bucket.sanity_check()
            found += len(bucket)
            for item in bucket:
                if self._bucket_index(self._get_key(item)) != index:
                    raise RuntimeError(f"{item!r} is stored in the wrong bucket")
        if found != self._count:
            raise RuntimeError(
                f"table counts {self._count} items but holds {found}"
            )

    def __contains__(self, key: Any) -> bool:
        return self._find_in_bucket(self._bucket_index(key), key)[0]

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[Any]:
        return (item for bucket in self._buckets for item in bucket)