"""Mutable, owned, UTF-8 encoded strings with explicit allocation.

A `Str` owns a byte buffer obtained from an allocator, and goes back to that
same allocator whenever it needs to grow, shrink or release the buffer.
Nothing is released implicitly: call `Str.deinit()` (or use the string as a
context manager) when it is no longer needed.

Example:
    >>> from composable.allocators import HeapAllocator
    >>> heap = HeapAllocator()
    >>> with Str.init(heap, '  Hello') as hello:
    ...     hello.concat(', World!  ')
    ...     hello.trim()
    ...     hello.u8
    b'Hello, World!'
    >>> heap.leaked()
    False
"""

__docformat__ = 'google'

__all__ = [
    # Classes
    'Str',

    # Functions
    'as_bytes'
]

import logging
from functools import singledispatch
from typing import Optional
from composable import codepoints, validation
from composable.allocators import Allocator
from composable.exceptions import FormatError, InvalidEncoding
from composable.iterators import StrIterator

logger = logging.getLogger(__name__)

@singledispatch
def as_bytes(source):
    """
    Byte view of anything a `Str` can be built from or extended with.

    Accepted sources are `Str`, `bytes`, `bytearray`, `memoryview` and `str`
    (encoded as UTF-8). Register another type with `as_bytes.register`.

    Raises:
        TypeError: If `source` has an unsupported type
    """
    raise TypeError(
        f'Incorrect type of parameter, expected Str, bytes-like object or str, got: {type(source).__name__}'
    )

@as_bytes.register(bytes)
@as_bytes.register(bytearray)
def _(source):
    return source

@as_bytes.register(memoryview)
def _(source):
    # len() of a wide or strided view does not count bytes
    if source.c_contiguous:
        return source.cast('B')
    return source.tobytes()

@as_bytes.register(str)
def _(source):
    return source.encode('utf-8')

class Str:
    """
    A UTF-8 string that owns its buffer.

    `u8` holds the content. The physical buffer may be longer than the
    content when the allocator could not shrink it in place; those bytes
    are capacity and never visible through the public interface.

    Iterators returned by `iterator()` and `iterator_unchecked()` borrow the
    buffer and must not be used after any mutating call (`concat`, `set`,
    `clear`, `trim`, `trim_start`, `trim_end`, `deinit`).

    Use the `init`, `init_fmt` and `init_empty` constructors.
    """

    __hash__ = None

    def __init__(self, buffer: bytearray, allocator: Allocator, length: Optional[int] = None):
        self._buffer = buffer
        self._length = len(buffer) if length is None else length
        self.allocator = allocator

    @classmethod
    def init(cls, allocator: Allocator, source):
        """
        Create a string holding a copy of `source`.

        Args:
            allocator: Allocator used for this string's whole lifetime
            source: A `Str`, bytes-like object or `str`

        Raises:
            AllocationError: If the allocator cannot provide the buffer
            TypeError: If `source` has an unsupported type

        Example:
            >>> from composable.allocators import HeapAllocator
            >>> Str.init(HeapAllocator(), b'Hello').u8
            b'Hello'
        """
        src = as_bytes(source)
        buf = allocator.alloc(len(src))
        buf[:] = src
        return cls(buf, allocator)

    @classmethod
    def init_fmt(cls, allocator: Allocator, template: str, *args, **kwargs):
        """
        Create a string from a `str.format` template.

        Args:
            allocator: Allocator used for this string's whole lifetime
            template: Format string, see `str.format`
            *args: Positional replacement values
            **kwargs: Named replacement values

        Raises:
            AllocationError: If the allocator cannot provide the buffer
            FormatError: If the template cannot be rendered with the given arguments

        Example:
            >>> from composable.allocators import HeapAllocator
            >>> Str.init_fmt(HeapAllocator(), 'Hello, {}', 'composable-string').u8
            b'Hello, composable-string'
        """
        try:
            rendered = template.format(*args, **kwargs).encode('utf-8')
        except (KeyError, IndexError, ValueError, AttributeError, TypeError) as e:
            raise FormatError(f'Cannot format {template!r}: {e}') from e
        return cls.init(allocator, rendered)

    @classmethod
    def init_empty(cls, allocator: Allocator):
        """Create an empty string. Never allocates, never fails."""
        return cls(bytearray(), allocator)

    def deinit(self):
        """Return the buffer to the allocator. Releasing twice is undefined."""
        self.allocator.free(self._buffer)
        self._buffer = bytearray()
        self._length = 0

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.deinit()

    @property
    def u8(self) -> bytes:
        """Content of the string as UTF-8 bytes."""
        return bytes(self._buffer[:self._length])

    @property
    def capacity(self) -> int:
        """Size of the underlying buffer, at least `len(self)`."""
        return len(self._buffer)

    def __len__(self):
        return self._length

    def __bytes__(self):
        return self.u8

    def __str__(self):
        return self.u8.decode('utf-8', errors='replace')

    def __repr__(self):
        return f'{type(self).__name__}({self.u8!r})'

    def __eq__(self, other):
        if isinstance(other, Str):
            return self.u8 == other.u8
        if isinstance(other, (bytes, bytearray, memoryview)):
            return self.u8 == bytes(other)
        return NotImplemented

    def clone(self):
        """
        Copy this string into a new buffer from the same allocator.

        Raises:
            AllocationError: If the allocator cannot provide the buffer
        """
        buf = self.allocator.alloc(self._length)
        buf[:] = self._buffer[:self._length]
        return type(self)(buf, self.allocator)

    def concat(self, other):
        """
        Append `other` to the end of this string.

        Nothing is reallocated when `other` is empty. On failure the content
        is left unchanged.

        Args:
            other: A `Str`, bytes-like object or `str`

        Raises:
            AllocationError: If the buffer cannot grow
            TypeError: If `other` has an unsupported type
        """
        src = as_bytes(other)
        if len(src) == 0:
            return

        new_length = self._length + len(src)
        if new_length > len(self._buffer):
            buf = self.allocator.realloc(self._buffer, new_length)
            if buf is not self._buffer:
                logger.debug('Buffer relocated while growing to %d bytes', new_length)
            self._buffer = buf
        self._buffer[self._length:new_length] = src
        self._length = new_length

    append = concat

    def set(self, source):
        """
        Replace the whole content with a copy of `source`.

        The new content always lives in a freshly allocated buffer. On failure
        the old content is left unchanged.

        Raises:
            AllocationError: If the new buffer cannot be allocated
            TypeError: If `source` has an unsupported type
        """
        src = as_bytes(source)
        buf = self.allocator.alloc(len(src))
        buf[:] = src
        self.allocator.free(self._buffer)
        self._buffer = buf
        self._length = len(buf)

    def clear(self):
        """Make the string empty. It stays usable."""
        self._shrink(0)

    def is_valid_utf8(self) -> bool:
        """Check if the content is well-formed UTF-8, see `composable.validation.is_valid`."""
        with memoryview(self._buffer) as view:
            return validation.is_valid(view[:self._length])

    def iterator(self) -> StrIterator:
        """
        Iterator over the scalars of this string.

        Raises:
            InvalidEncoding: If the content is not well-formed UTF-8

        Example:
            >>> from composable.allocators import HeapAllocator
            >>> s = Str.init(HeapAllocator(), 'día')
            >>> with s.iterator() as it:
            ...     [it.next_scalar_bytes() for _ in range(3)]
            [b'd', b'\\xc3\\xad', b'a']
        """
        with memoryview(self._buffer) as view:
            offset = validation.first_invalid_offset(view[:self._length])
        if offset is not None:
            logger.debug('Refusing iterator over invalid UTF-8 (first bad byte at %d)', offset)
            raise InvalidEncoding('String is not valid UTF-8', offset=offset)
        return self.iterator_unchecked()

    def iterator_unchecked(self) -> StrIterator:
        """
        Iterator over the scalars of this string, without validation.

        **No validity checks are made.** If the content is not well-formed
        UTF-8 the behaviour of the iterator is unspecified.
        """
        with memoryview(self._buffer) as view:
            return StrIterator(view[:self._length])

    def char_count(self) -> int:
        """
        Number of Unicode scalar values in this string.

        One scalar takes up to four bytes, so for non-ASCII text this differs
        from `len()`, which counts bytes. Grapheme clusters (several scalars
        drawn as one character) are not merged. Assumes well-formed UTF-8.

        Example:
            >>> from composable.allocators import HeapAllocator
            >>> s = Str.init(HeapAllocator(), '日本語')
            >>> s.char_count(), len(s)
            (3, 9)
        """
        count = 0
        i = 0
        while i < self._length:
            count += 1
            i += codepoints.sequence_length(self._buffer[i])
        return count

    def trim(self):
        """Remove whitespace and line terminators from both ends."""
        self._trim(start=True, end=True)

    def trim_start(self):
        """Remove leading whitespace and line terminators."""
        self._trim(start=True, end=False)

    def trim_end(self):
        """Remove trailing whitespace and line terminators."""
        self._trim(start=False, end=True)

    def _trim(self, start: bool, end: bool):
        if self._length == 0 or not self.is_valid_utf8():
            return

        start_offset = 0
        end_offset = self._length
        is_space = codepoints.is_whitespace_or_line_terminator

        with self.iterator_unchecked() as it:
            if start:
                for scalar in it:
                    if not is_space(scalar):
                        break
                    start_offset = it.cursor

            if start_offset == self._length:
                end_offset = start_offset
            elif end:
                it.seek_end()
                for scalar in iter(it.prev_scalar, None):
                    if not is_space(scalar):
                        break
                    end_offset = it.cursor

        new_length = end_offset - start_offset
        if start_offset != 0 and new_length > 0:
            self._buffer[:new_length] = self._buffer[start_offset:end_offset]
        self._shrink(new_length)

    def _shrink(self, length: int):
        # Failing to shrink in place is fine: the tail just becomes capacity
        if not self.allocator.resize(self._buffer, length):
            logger.debug('Allocator kept %d byte buffer, truncating to %d bytes', len(self._buffer), length)
        self._length = length

@as_bytes.register(Str)
def _(source):
    # a copy, so s.concat(s) and s.set(s) never read a buffer being replaced
    return source.u8
