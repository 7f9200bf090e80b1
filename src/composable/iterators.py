"""Bidirectional cursor over the UTF-8 bytes of a managed string."""

__docformat__ = 'google'

__all__ = [
    'StrIterator'
]

from typing import Optional
from composable import codepoints

class StrIterator:
    """
    A byte cursor that decodes one scalar at a time in either direction.

    The iterator borrows a read-only view of the owning string's buffer. It
    does not own that memory: once the owning `composable.strings.Str` is
    mutated, the iterator must not be used any more, and what it returns
    after that point is unspecified. While the view is held the buffer
    cannot be resized in place, so call `release()` (or use the iterator as
    a context manager) when done.

    Decoding assumes well-formed UTF-8. Use `Str.iterator()` to get an
    iterator only after validation.

    Args:
        data: Bytes-like object to iterate over
        cursor: Starting byte offset

    Example:
        >>> it = StrIterator(b'a\\xc2\\xa0b')
        >>> it.next_scalar_bytes()
        b'a'
        >>> hex(it.next_scalar())
        '0xa0'
        >>> it.seek_end()
        >>> chr(it.prev_scalar())
        'b'
    """

    def __init__(self, data, cursor: int = 0):
        view = memoryview(data)
        self.bytes = view.toreadonly()
        view.release()
        self.cursor = cursor

    def __repr__(self):
        return f'{type(self).__name__}(cursor={self._cursor}, length={len(self)})'

    def __len__(self):
        return self.bytes.nbytes

    def __iter__(self):
        return self

    def __next__(self) -> int:
        scalar = self.next_scalar()
        if scalar is None:
            raise StopIteration
        return scalar

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.release()

    @property
    def cursor(self) -> int:
        """Current byte offset, always within `0..len(self)`."""
        return self._cursor

    @cursor.setter
    def cursor(self, value: int):
        if not 0 <= value <= len(self):
            raise IndexError(f'Cursor {value} out of range 0..{len(self)}')
        self._cursor = value

    def release(self):
        """Drop the borrowed view. The iterator is unusable afterwards."""
        self.bytes.release()

    def next_scalar_bytes(self) -> Optional[bytes]:
        """
        Bytes of the scalar at the cursor, advancing past it.

        Returns:
            The encoded scalar, or None when the cursor is at the end
        """
        if self._cursor >= len(self):
            return None
        start = self._cursor
        length = codepoints.sequence_length(self.bytes[start])
        self._cursor = min(start + length, len(self))
        return bytes(self.bytes[start:self._cursor])

    def next_scalar(self) -> Optional[int]:
        """Scalar at the cursor, advancing past it. None at the end."""
        sequence = self.next_scalar_bytes()
        if sequence is None:
            return None
        return codepoints.decode(sequence)

    def prev_scalar_bytes(self) -> Optional[bytes]:
        """
        Bytes of the scalar that ends at the cursor, moving the cursor to its start.

        Returns:
            The encoded scalar, or None when the cursor is at the start
        """
        end = self._cursor
        if end <= 0:
            return None
        start = end - 1
        # 0b10xxxxxx marks a continuation byte
        while self.bytes[start] & 0xC0 == 0x80:
            if start == 0:
                self._cursor = 0
                return None
            start -= 1
        self._cursor = start
        return bytes(self.bytes[start:end])

    def prev_scalar(self) -> Optional[int]:
        """Scalar that ends at the cursor, moving the cursor to its start. None at the start."""
        sequence = self.prev_scalar_bytes()
        if sequence is None:
            return None
        return codepoints.decode(sequence)

    def seek_start(self):
        self._cursor = 0

    def seek_end(self):
        self._cursor = len(self)
