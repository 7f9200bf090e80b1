"""
.. include:: ../../README.md

See individual module documentation for detailed information.
"""
from . import allocators
from . import codepoints
from . import config
from . import exceptions
from . import iterators
from . import strings
from . import validation
from .allocators import HeapAllocator, FailingAllocator, default_allocator
from .exceptions import AllocationError, FormatError, InvalidEncoding
from .iterators import StrIterator
from .strings import Str

__all__ = [
    'allocators',
    'codepoints',
    'config',
    'exceptions',
    'iterators',
    'strings',
    'validation',
    'Str',
    'StrIterator',
    'HeapAllocator',
    'FailingAllocator',
    'default_allocator',
    'AllocationError',
    'FormatError',
    'InvalidEncoding'
]
