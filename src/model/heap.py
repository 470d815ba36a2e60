"""Implements the indexable priority queue used to pick the next cell to collapse."""

from __future__ import annotations

from typing import Any, Callable, Generic, Protocol, TypeVar, TYPE_CHECKING

if TYPE_CHECKING:
    import random


class HeapItem(Protocol):
    """An item that knows its own position inside an 'IndexedHeap'."""

    heap_index: int


T = TypeVar("T", bound=HeapItem)


class RandomTieBreaker:
    """Decides ties between equal keys with a coin flip per comparison.

    All flips are drawn from the given random number generator, so the heap's shape is reproducible for a seeded
    generator but otherwise free of any directional bias.
    """

    _rng: random.Random

    def __init__(self, rng: random.Random) -> None:
        self._rng = rng

    def __call__(self, item: Any, other: Any) -> bool:
        return self._rng.random() < 0.5


class StableTieBreaker:
    """Decides ties between equal keys by comparing a secondary sort key (e.g. the cell coordinates)."""

    _sort_key: Callable[[Any], Any]

    def __init__(self, sort_key: Callable[[Any], Any]) -> None:
        self._sort_key = sort_key

    def __call__(self, item: Any, other: Any) -> bool:
        return self._sort_key(item) < self._sort_key(other)


class IndexedHeap(Generic[T]):
    """Array-backed min-heap with a fixed capacity whose items track their own position.

    Items are ordered by ascending key. Because every item stores its current array position in 'heap_index', an item
    whose key has shrunk can be moved to its new position in O(log n) without searching for it. Keys are expected to
    only shrink while an item is inside the heap, so 'reorder()' only ever sifts up.

    Attributes:
        capacity: The maximum number of items the heap can hold.
    """

    capacity: int

    # The heap array; only the first '_count' entries are valid.
    _items: list[T | None]
    # Current number of items in the heap.
    _count: int
    # Returns the ordering key of an item (smaller keys come first).
    _key: Callable[[T], int]
    # Returns True if the first of two items with equal keys should come first.
    _tie_breaker: Callable[[T, T], bool]

    def __init__(self, capacity: int, key: Callable[[T], int], tie_breaker: Callable[[T, T], bool]) -> None:
        """Creates an empty heap.

        Args:
            capacity: The maximum number of items the heap can hold.
            key: Returns the ordering key of an item (smaller keys come first).
            tie_breaker: Returns True if the first of two items with equal keys should come first.
        """
        self.capacity = capacity
        self._items = [None] * capacity
        self._count = 0
        self._key = key
        self._tie_breaker = tie_breaker

    def __len__(self) -> int:
        return self._count

    def __bool__(self) -> bool:
        return self._count > 0

    def __contains__(self, item: T) -> bool:
        return 0 <= item.heap_index < self._count and self._items[item.heap_index] is item

    def insert(self, item: T) -> None:
        """Adds an item to the heap.

        Raises:
            OverflowError: If the heap is already at capacity.
        """
        if self._count >= self.capacity:
            raise OverflowError(f"Heap capacity of {self.capacity} items exceeded")

        item.heap_index = self._count
        self._items[self._count] = item
        self._count += 1
        self._sift_up(item)

    def peek_top(self) -> T:
        """Returns the item with the smallest key without removing it.

        Raises:
            IndexError: If the heap is empty.
        """
        if self._count == 0:
            raise IndexError("peek from an empty heap")
        return self._get(0)

    def pop_top(self) -> T:
        """Removes and returns the item with the smallest key.

        Raises:
            IndexError: If the heap is empty.
        """
        if self._count == 0:
            raise IndexError("pop from an empty heap")

        top = self._get(0)
        self._count -= 1
        last = self._get(self._count)
        self._items[self._count] = None

        if self._count > 0:
            last.heap_index = 0
            self._items[0] = last
            self._sift_down(last)

        top.heap_index = -1
        return top

    def reorder(self, item: T) -> None:
        """Restores the heap order after the key of an item in the heap has shrunk."""
        if item in self:
            self._sift_up(item)

    def _get(self, index: int) -> T:
        item = self._items[index]
        assert item is not None
        return item

    def _precedes(self, item: T, other: T) -> bool:
        """Checks if 'item' has to be placed above 'other'."""
        item_key = self._key(item)
        other_key = self._key(other)
        if item_key != other_key:
            return item_key < other_key
        return self._tie_breaker(item, other)

    def _sift_up(self, item: T) -> None:
        while item.heap_index > 0:
            parent = self._get((item.heap_index - 1) // 2)
            if not self._precedes(item, parent):
                break
            self._swap(item, parent)

    def _sift_down(self, item: T) -> None:
        while True:
            left_index = item.heap_index * 2 + 1
            right_index = left_index + 1
            if left_index >= self._count:
                return

            child = self._get(left_index)
            if right_index < self._count and self._precedes(self._get(right_index), child):
                child = self._get(right_index)

            if not self._precedes(child, item):
                return
            self._swap(item, child)

    def _swap(self, item_a: T, item_b: T) -> None:
        self._items[item_a.heap_index] = item_b
        self._items[item_b.heap_index] = item_a
        item_a.heap_index, item_b.heap_index = item_b.heap_index, item_a.heap_index
