"""Allocation authorities for managed string buffers.

A `composable.strings.Str` never grows, shrinks or releases its buffer on
its own: every such request goes through the allocator it was created with.
Buffers are plain `bytearray` objects.

Example:
    >>> heap = HeapAllocator(limit=1024)
    >>> buf = heap.alloc(16)
    >>> heap.live_bytes
    16
    >>> heap.free(buf)
    >>> heap.leaked()
    False
"""

__docformat__ = 'google'

__all__ = [
    # Classes
    'Allocator',
    'HeapAllocator',
    'FailingAllocator',

    # Functions
    'default_allocator'
]

import logging
from functools import cache
from typing import Dict, Optional, Tuple
from composable.config import get_config
from composable.exceptions import AllocationError

logger = logging.getLogger(__name__)

class Allocator:
    """
    Base class for allocators.

    The public methods handle zero-sized requests and argument checks, then
    delegate to `_alloc`, `_realloc`, `_resize` and `_free`. Zero-sized
    buffers are never handed to a subclass: `alloc(0)` always succeeds and
    freeing an empty buffer does nothing.
    """

    def alloc(self, size: int) -> bytearray:
        """
        Allocate a zero-filled buffer of exactly `size` bytes.

        Raises:
            AllocationError: If the request cannot be satisfied
        """
        _check_size(size)
        if size == 0:
            return bytearray()
        return self._alloc(size)

    def realloc(self, buf: bytearray, size: int) -> bytearray:
        """
        Grow or shrink `buf` to `size` bytes, keeping its leading content.

        The returned buffer may be `buf` itself or a new buffer. On failure
        `buf` is left exactly as it was.

        Raises:
            AllocationError: If the request cannot be satisfied
        """
        _check_size(size)
        if len(buf) == 0:
            return self.alloc(size)
        if size == 0:
            self.free(buf)
            return bytearray()
        return self._realloc(buf, size)

    def resize(self, buf: bytearray, size: int) -> bool:
        """
        Try to change the size of `buf` in place.

        Returns:
            True if `buf` now has `size` bytes, False if the allocator could
            not resize it without relocating. Never raises for a refused
            request.
        """
        _check_size(size)
        if size == len(buf):
            return True
        if len(buf) == 0:
            return False
        return self._resize(buf, size)

    def free(self, buf: bytearray) -> None:
        """Return `buf` to the allocator."""
        if len(buf) == 0:
            return
        self._free(buf)

    def _alloc(self, size: int) -> bytearray:
        raise NotImplementedError

    def _realloc(self, buf: bytearray, size: int) -> bytearray:
        raise NotImplementedError

    def _resize(self, buf: bytearray, size: int) -> bool:
        raise NotImplementedError

    def _free(self, buf: bytearray) -> None:
        raise NotImplementedError

class HeapAllocator(Allocator):
    """
    General purpose allocator with bookkeeping.

    Every live buffer is tracked, which makes leaks and double releases
    detectable in tests.

    Args:
        limit: Maximum number of live bytes, or None for no limit. Moving a
            buffer that cannot grow in place needs the old and the new buffer
            at once, so that move counts both against the limit.
    """

    def __init__(self, limit: Optional[int] = None):
        if limit is not None and limit < 0:
            raise ValueError(f'limit must not be negative, got: {limit}')
        self.limit = limit
        self.total_allocations = 0
        self._live: Dict[int, Tuple[bytearray, int]] = {}

    def __repr__(self):
        return f'{type(self).__name__}(limit={self.limit!r}, live_bytes={self.live_bytes})'

    @property
    def live_bytes(self) -> int:
        return sum(size for _, size in self._live.values())

    @property
    def live_buffers(self) -> int:
        return len(self._live)

    def leaked(self) -> bool:
        """True if any buffer handed out has not been freed."""
        return bool(self._live)

    def owns(self, buf: bytearray) -> bool:
        return id(buf) in self._live

    def _reserve(self, extra: int):
        if self.limit is not None and self.live_bytes + extra > self.limit:
            logger.warning('Refusing %d byte request, limit of %d bytes reached', extra, self.limit)
            raise AllocationError(extra, f'heap limit of {self.limit} bytes reached')

    def _track(self, buf: bytearray):
        self._live[id(buf)] = (buf, len(buf))

    def _alloc(self, size: int) -> bytearray:
        self._reserve(size)
        buf = bytearray(size)
        self.total_allocations += 1
        self._track(buf)
        return buf

    def _realloc(self, buf: bytearray, size: int) -> bytearray:
        old_size = self._size_of(buf)
        if size <= old_size:
            if self._resize(buf, size):
                return buf
        else:
            self._reserve(size - old_size)
            try:
                buf.extend(bytes(size - old_size))
            except BufferError:
                # an exported view pins the buffer, so it has to move
                pass
            else:
                self._track(buf)
                return buf

        logger.debug('Relocating %d byte buffer to %d bytes', old_size, size)
        new_buf = self._alloc(size)
        keep = min(old_size, size)
        new_buf[:keep] = buf[:keep]
        self._free(buf)
        return new_buf

    def _resize(self, buf: bytearray, size: int) -> bool:
        old_size = self._size_of(buf)
        if size > old_size:
            if self.limit is not None and self.live_bytes + size - old_size > self.limit:
                return False
            try:
                buf.extend(bytes(size - old_size))
            except BufferError:
                return False
        else:
            try:
                del buf[size:]
            except BufferError:
                return False
        if size == 0:
            del self._live[id(buf)]
        else:
            self._track(buf)
        return True

    def _free(self, buf: bytearray) -> None:
        self._size_of(buf)
        del self._live[id(buf)]

    def _size_of(self, buf: bytearray) -> int:
        entry = self._live.get(id(buf))
        if entry is None or entry[0] is not buf:
            raise ValueError('Buffer is not owned by this allocator (already freed?)')
        return entry[1]

class FailingAllocator(Allocator):
    """
    Allocator that starts refusing requests after a number of successes.

    The `fail_index`-th growing request (counting from zero) and all later
    ones raise `AllocationError`. Shrinking and freeing are passed through to
    `parent` unchanged.

    Args:
        parent: Allocator that serves the requests that do not fail
        fail_index: Number of growing requests allowed to succeed

    Example:
        >>> failing = FailingAllocator(HeapAllocator(), fail_index=0)
        >>> failing.alloc(4)
        Traceback (most recent call last):
            ...
        composable.exceptions.AllocationError: Cannot allocate 4 bytes: injected failure
    """

    def __init__(self, parent: Optional[Allocator] = None, fail_index: int = 0):
        self.parent = parent if parent is not None else HeapAllocator()
        self.fail_index = fail_index
        self.allocations = 0

    def _check(self, size: int):
        if self.allocations >= self.fail_index:
            logger.warning('Injected failure for %d byte request', size)
            raise AllocationError(size, 'injected failure')
        self.allocations += 1

    def _alloc(self, size: int) -> bytearray:
        self._check(size)
        return self.parent.alloc(size)

    def _realloc(self, buf: bytearray, size: int) -> bytearray:
        if size > len(buf):
            self._check(size)
        return self.parent.realloc(buf, size)

    def _resize(self, buf: bytearray, size: int) -> bool:
        if size > len(buf):
            return False
        return self.parent.resize(buf, size)

    def _free(self, buf: bytearray) -> None:
        self.parent.free(buf)

def _check_size(size: int):
    if size < 0:
        raise ValueError(f'Allocation size must not be negative, got: {size}')

@cache
def default_allocator() -> HeapAllocator:
    """Process-wide heap allocator limited by `Config.heap_limit`."""
    return HeapAllocator(limit=get_config().heap_limit)
