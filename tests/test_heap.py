"""Tests for model.heap."""

import random

import pytest

from model.heap import IndexedHeap, RandomTieBreaker, StableTieBreaker


class _Item:
    """Minimal heap item with a mutable key."""

    def __init__(self, name: str, key: int) -> None:
        self.name = name
        self.key = key
        self.heap_index = -1

    def __repr__(self) -> str:
        return f"_Item({self.name}, {self.key})"


def _stable_heap(capacity: int) -> IndexedHeap[_Item]:
    return IndexedHeap(capacity, lambda item: item.key, StableTieBreaker(lambda item: item.name))


def _drain(heap: IndexedHeap[_Item]) -> list[str]:
    names = []
    while heap:
        names.append(heap.pop_top().name)
    return names


class TestIndexedHeap:
    """Tests for IndexedHeap."""

    def test_pops_in_ascending_key_order(self):
        heap = _stable_heap(5)
        for name, key in [("e", 5), ("c", 3), ("h", 8), ("a", 1), ("d", 4)]:
            heap.insert(_Item(name, key))

        assert len(heap) == 5
        assert _drain(heap) == ["a", "c", "d", "e", "h"]
        assert len(heap) == 0

    def test_peek_does_not_remove(self):
        heap = _stable_heap(2)
        heap.insert(_Item("b", 2))
        heap.insert(_Item("a", 1))

        assert heap.peek_top().name == "a"
        assert len(heap) == 2

    def test_heap_index_is_tracked(self):
        heap = _stable_heap(4)
        items = [_Item(name, key) for name, key in [("a", 4), ("b", 3), ("c", 2), ("d", 1)]]
        for item in items:
            heap.insert(item)

        assert all(item in heap for item in items)
        assert sorted(item.heap_index for item in items) == [0, 1, 2, 3]

        popped = heap.pop_top()
        assert popped.heap_index == -1
        assert popped not in heap

    def test_reorder_after_key_shrinks(self):
        heap = _stable_heap(4)
        items = {name: _Item(name, key) for name, key in [("a", 2), ("b", 3), ("c", 4), ("d", 5)]}
        for item in items.values():
            heap.insert(item)

        items["d"].key = 1
        heap.reorder(items["d"])

        assert heap.peek_top() is items["d"]
        assert _drain(heap) == ["d", "a", "b", "c"]

    def test_reorder_ignores_items_outside_the_heap(self):
        heap = _stable_heap(2)
        heap.insert(_Item("a", 1))
        stranger = _Item("z", 0)

        heap.reorder(stranger)

        assert heap.peek_top().name == "a"
        assert stranger.heap_index == -1

    def test_insert_beyond_capacity(self):
        heap = _stable_heap(1)
        heap.insert(_Item("a", 1))

        with pytest.raises(OverflowError):
            heap.insert(_Item("b", 2))

    def test_empty_heap(self):
        heap = _stable_heap(1)

        assert not heap
        with pytest.raises(IndexError):
            heap.peek_top()
        with pytest.raises(IndexError):
            heap.pop_top()


class TestTieBreakers:
    """Tests for the ordering of items with equal keys."""

    def test_stable_tie_breaker_uses_sort_key(self):
        heap = _stable_heap(4)
        for name in ["c", "a", "d", "b"]:
            heap.insert(_Item(name, 1))

        assert _drain(heap) == ["a", "b", "c", "d"]

    def test_random_tie_breaker_is_reproducible(self):
        def pop_order(seed: int) -> list[str]:
            heap = IndexedHeap(8, lambda item: item.key, RandomTieBreaker(random.Random(seed)))
            for name in "abcdefgh":
                heap.insert(_Item(name, 1))
            return _drain(heap)

        assert pop_order(7) == pop_order(7)
        assert sorted(pop_order(7)) == list("abcdefgh")

    def test_random_tie_breaker_still_respects_keys(self):
        heap = IndexedHeap(6, lambda item: item.key, RandomTieBreaker(random.Random(3)))
        for name, key in [("x1", 2), ("y1", 1), ("x2", 2), ("y2", 1), ("x3", 2), ("y3", 1)]:
            heap.insert(_Item(name, key))

        order = _drain(heap)

        assert all(name.startswith("y") for name in order[:3])
        assert all(name.startswith("x") for name in order[3:])
