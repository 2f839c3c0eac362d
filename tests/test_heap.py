"""
Unit tests for the indexed binary min-heap used by the fast marching sweep.
"""

import pytest

import numpy as np

from Heap import Heap, HeapError


class TestHeapOperations:
    """Insert, extract-min and decrease-key."""

    def test_pop_in_key_order(self):
        heap = Heap(10)
        for node, key in [(4, 0.7), (1, 0.2), (9, 1.5), (0, 0.05), (5, 0.9)]:
            heap.push(node, key)

        popped = [heap.pop() for _ in range(5)]

        assert [node for node, _ in popped] == [0, 1, 4, 5, 9]
        assert [key for _, key in popped] == sorted(key for _, key in popped)
        assert heap.empty()

    def test_decrease_moves_node_to_top(self):
        heap = Heap(6, isTest=True)
        for node in range(6):
            heap.push(node, float(node + 1))

        heap.decrease(5, 0.5)

        assert heap.key(5) == 0.5
        assert heap.pop() == (5, 0.5)
        assert not heap.contains(5)

    def test_decrease_to_same_key_is_allowed(self):
        heap = Heap(3)
        heap.push(2, 1.0)
        heap.decrease(2, 1.0)
        assert heap.key(2) == 1.0

    def test_contains_and_len(self):
        heap = Heap(4)
        assert len(heap) == 0
        heap.push(3, 0.1)
        heap.push(1, 0.3)

        assert len(heap) == 2
        assert heap.contains(3)
        assert heap.contains(1)
        assert not heap.contains(0)

    def test_clear_resets_back_pointers(self):
        heap = Heap(5)
        for node in range(5):
            heap.push(node, 1.0 / (node + 1))

        heap.clear()

        assert heap.empty()
        assert heap.heapPtr == [-1] * 5
        heap.push(2, 0.4)
        assert heap.pop() == (2, 0.4)

    def test_random_sequence_matches_sorted_order(self):
        rng = np.random.default_rng(1234)
        n = 200
        keys = rng.random(n)
        heap = Heap(n, isTest=True)
        for node in range(n):
            heap.push(node, keys[node])
        # decrease half of them
        for node in range(0, n, 2):
            keys[node] = keys[node] / 3
            heap.decrease(node, keys[node])

        order = [heap.pop()[0] for _ in range(n)]

        assert list(keys[order]) == sorted(keys)


class TestHeapErrors:
    """Misuse of the heap API and invariant checking."""

    def test_pop_empty_raises_index_error(self):
        with pytest.raises(IndexError):
            Heap(3).pop()

    def test_duplicate_push_raises(self):
        heap = Heap(3)
        heap.push(1, 0.5)
        with pytest.raises(HeapError):
            heap.push(1, 0.1)

    def test_decrease_cannot_increase_key(self):
        heap = Heap(3)
        heap.push(1, 0.5)
        with pytest.raises(HeapError):
            heap.decrease(1, 0.6)

    def test_decrease_absent_node_raises(self):
        heap = Heap(3)
        with pytest.raises(HeapError):
            heap.decrease(2, 0.1)

    def test_key_of_absent_node_raises(self):
        with pytest.raises(HeapError):
            Heap(3).key(0)

    def test_validation_detects_broken_heap_property(self):
        heap = Heap(4)
        heap.push(0, 0.1)
        heap.push(1, 0.2)
        heap.keys[0] = 10.0

        with pytest.raises(HeapError):
            heap.test()

    def test_validation_detects_broken_back_pointer(self):
        heap = Heap(4)
        heap.push(0, 0.1)
        heap.push(1, 0.2)
        heap.heapPtr[1] = 0

        with pytest.raises(HeapError):
            heap.test()

    def test_validation_does_not_mutate(self):
        heap = Heap(8)
        for node, key in enumerate([0.8, 0.3, 0.5, 0.1]):
            heap.push(node, key)
        nodes, keys, ptr = list(heap.nodes), list(heap.keys), list(heap.heapPtr)

        assert heap.test()
        assert heap.nodes == nodes
        assert heap.keys == keys
        assert heap.heapPtr == ptr
