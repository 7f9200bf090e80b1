"""Error kinds raised by managed strings and their collaborators."""

__docformat__ = 'google'

__all__ = [
    'ComposableError',
    'AllocationError',
    'FormatError',
    'InvalidEncoding'
]

from typing import Optional

class ComposableError(Exception):
    """Base class for every error raised by this package."""

class AllocationError(ComposableError, MemoryError):
    """
    An allocator could not satisfy a request.

    Args:
        size: Number of bytes that were requested
        reason: Why the request was refused
    """
    def __init__(self, size: int, reason: str = 'out of memory'):
        self.size = size
        self.reason = reason
        super().__init__(f'Cannot allocate {size} bytes: {reason}')

class FormatError(ComposableError, ValueError):
    """The formatting facility rejected its template or arguments."""

class InvalidEncoding(ComposableError, ValueError):
    """
    Bytes are not well-formed UTF-8.

    Args:
        message: Description of the problem
        offset: Byte offset of the first offending byte, if known
    """
    def __init__(self, message: str = 'Invalid UTF-8', offset: Optional[int] = None):
        self.offset = offset
        if offset is not None:
            message = f'{message} at byte {offset}'
        super().__init__(message)
