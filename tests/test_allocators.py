import unittest
from composable import allocators
from composable.allocators import HeapAllocator, FailingAllocator
from composable.exceptions import AllocationError

class TestHeapAllocator(unittest.TestCase):
    def setUp(self):
        self.heap = HeapAllocator()

    def test_alloc_and_free(self):
        buf = self.heap.alloc(16)
        self.assertEqual(len(buf), 16)
        self.assertEqual(self.heap.live_bytes, 16)
        self.assertEqual(self.heap.total_allocations, 1)
        self.assertTrue(self.heap.owns(buf))
        self.heap.free(buf)
        self.assertFalse(self.heap.leaked())

    def test_zero_size_is_free(self):
        buf = self.heap.alloc(0)
        self.assertEqual(buf, bytearray())
        self.assertEqual(self.heap.total_allocations, 0)
        self.heap.free(buf)

    def test_negative_size(self):
        with self.assertRaises(ValueError):
            self.heap.alloc(-1)

    def test_limit(self):
        heap = HeapAllocator(limit=10)
        buf = heap.alloc(8)
        with self.assertRaises(AllocationError) as cm:
            heap.alloc(3)
        self.assertEqual(cm.exception.size, 3)
        heap.free(buf)
        heap.free(heap.alloc(10))

    def test_realloc_grows_in_place(self):
        buf = self.heap.alloc(4)
        buf[:] = b'abcd'
        grown = self.heap.realloc(buf, 8)
        self.assertIs(grown, buf)
        self.assertEqual(grown[:4], b'abcd')
        self.assertEqual(self.heap.live_bytes, 8)
        self.heap.free(grown)

    def test_realloc_relocates_pinned_buffer(self):
        buf = self.heap.alloc(4)
        buf[:] = b'abcd'
        view = memoryview(buf)
        grown = self.heap.realloc(buf, 8)
        self.assertIsNot(grown, buf)
        self.assertEqual(grown[:4], b'abcd')
        self.assertFalse(self.heap.owns(buf))
        self.assertEqual(self.heap.live_bytes, 8)
        view.release()
        self.heap.free(grown)

    def test_relocation_counts_both_buffers_against_limit(self):
        heap = HeapAllocator(limit=12)
        buf = heap.alloc(4)
        with memoryview(buf):
            with self.assertRaises(AllocationError):
                heap.realloc(buf, 9)
            self.assertEqual(heap.live_bytes, 4)
            grown = heap.realloc(buf, 8)
        self.assertIsNot(grown, buf)
        self.assertEqual(heap.live_bytes, 8)
        heap.free(grown)

    def test_realloc_failure_leaves_buffer(self):
        heap = HeapAllocator(limit=6)
        buf = heap.alloc(4)
        buf[:] = b'abcd'
        with self.assertRaises(AllocationError):
            heap.realloc(buf, 8)
        self.assertEqual(buf, b'abcd')
        self.assertEqual(heap.live_bytes, 4)
        heap.free(buf)

    def test_resize_shrinks_in_place(self):
        buf = self.heap.alloc(8)
        self.assertTrue(self.heap.resize(buf, 3))
        self.assertEqual(len(buf), 3)
        self.assertEqual(self.heap.live_bytes, 3)
        self.assertTrue(self.heap.resize(buf, 0))
        self.assertFalse(self.heap.leaked())

    def test_resize_refused_while_pinned(self):
        buf = self.heap.alloc(8)
        with memoryview(buf):
            self.assertFalse(self.heap.resize(buf, 3))
        self.assertEqual(len(buf), 8)
        self.heap.free(buf)

    def test_free_unknown_buffer(self):
        with self.assertRaises(ValueError):
            self.heap.free(bytearray(b'stray'))

    def test_double_free(self):
        buf = self.heap.alloc(4)
        self.heap.free(buf)
        with self.assertRaises(ValueError):
            self.heap.free(buf)

class TestFailingAllocator(unittest.TestCase):
    def test_fail_index(self):
        heap = HeapAllocator()
        failing = FailingAllocator(heap, fail_index=2)
        first = failing.alloc(1)
        second = failing.realloc(first, 4)
        with self.assertRaises(AllocationError):
            failing.alloc(1)
        with self.assertRaises(AllocationError):
            failing.realloc(second, 8)
        self.assertTrue(failing.resize(second, 2))
        failing.free(second)
        self.assertFalse(heap.leaked())

    def test_fail_immediately(self):
        failing = FailingAllocator(fail_index=0)
        with self.assertRaises(AllocationError):
            failing.alloc(1)
        self.assertEqual(failing.alloc(0), bytearray())

    def test_growth_by_resize_is_refused(self):
        heap = HeapAllocator()
        failing = FailingAllocator(heap, fail_index=5)
        buf = failing.alloc(2)
        self.assertFalse(failing.resize(buf, 4))
        failing.free(buf)

class TestDefaultAllocator(unittest.TestCase):
    def test_default_allocator_is_shared(self):
        self.assertIsInstance(allocators.default_allocator(), HeapAllocator)
        self.assertIs(allocators.default_allocator(), allocators.default_allocator())
