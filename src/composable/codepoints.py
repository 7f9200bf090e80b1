"""Utilities for single Unicode scalar values and their UTF-8 sequences.

The whitespace classification matches the set JavaScript engines strip in
`String.prototype.trim`, see
https://developer.mozilla.org/en-US/docs/Glossary/Whitespace#in_javascript
"""

__docformat__ = 'google'

__all__ = [
    # Functions
    'is_whitespace_or_line_terminator',
    'name',
    'sequence_length',
    'byte_length',
    'decode',
    'encode',

    # Constants
    'MAX_SCALAR'
]

from functools import cache
from typing import Optional
from composable.exceptions import InvalidEncoding
from composable.lookups import WhitespaceData

MAX_SCALAR = 0x10FFFF
"""Largest Unicode scalar value."""

SURROGATES = range(0xD800, 0xE000)
"""Code points reserved for UTF-16 surrogate halves."""

MIN_SCALAR_FOR_LENGTH = {1: 0x0, 2: 0x80, 3: 0x800, 4: 0x10000}
"""Smallest scalar each sequence length may encode; anything below is overlong."""

LEAD_BYTE_MASK = {1: 0x7F, 2: 0x1F, 3: 0x0F, 4: 0x07}
"""Payload bits of a lead byte, by sequence length."""

@cache
def _whitespace_data() -> WhitespaceData:
    return WhitespaceData()

@cache
def _whitespace() -> frozenset:
    return _whitespace_data().codepoints

def is_whitespace_or_line_terminator(scalar: int) -> bool:
    """
    Check if a scalar value is a whitespace or line terminator.

    Args:
        scalar: A Unicode scalar value

    Returns:
        True for the characters stripped by `trim`, else False

    Example:
        >>> is_whitespace_or_line_terminator(0x20)
        True
        >>> is_whitespace_or_line_terminator(0x1680)
        True
        >>> is_whitespace_or_line_terminator(ord('a'))
        False
    """
    if scalar == 0x20:
        return True
    # most text lives here
    if 0x0E <= scalar < 0xA0:
        return False
    return scalar in _whitespace()

def name(scalar: int) -> Optional[str]:
    """
    Descriptive name of a whitespace or line terminator scalar.

    Example:
        >>> name(0x2028)
        'LINE SEPARATOR'
        >>> name(ord('a')) is None
        True
    """
    return _whitespace_data().code_to_name.get(scalar)

def sequence_length(lead_byte: int) -> int:
    """
    Number of bytes in the UTF-8 sequence that starts with `lead_byte`.

    Raises:
        InvalidEncoding: If `lead_byte` is a continuation byte or can never start a sequence
    """
    if lead_byte < 0x80:
        return 1
    if lead_byte & 0xE0 == 0xC0:
        return 2
    if lead_byte & 0xF0 == 0xE0:
        return 3
    if lead_byte & 0xF8 == 0xF0:
        return 4
    raise InvalidEncoding(f'Invalid UTF-8 lead byte 0x{lead_byte:02X}')

def byte_length(scalar: int) -> int:
    """
    Number of bytes the UTF-8 encoding of `scalar` takes.

    Raises:
        ValueError: If `scalar` is outside 0..U+10FFFF

    Example:
        >>> byte_length(ord('a')), byte_length(0xA0), byte_length(0x3000), byte_length(0x1F600)
        (1, 2, 3, 4)
    """
    if scalar < 0 or scalar > MAX_SCALAR:
        raise ValueError(f'Code point out of range: {scalar:#x}')
    if scalar < 0x80:
        return 1
    if scalar < 0x800:
        return 2
    if scalar < 0x10000:
        return 3
    return 4

def decode(sequence: bytes, allow_surrogates: bool = True) -> int:
    """
    Decode exactly one UTF-8 sequence into a scalar value.

    Surrogate halves are accepted by default (WTF-8), which is what iteration
    over already validated buffers needs.

    Args:
        sequence: The bytes of a single encoded scalar
        allow_surrogates: Accept encoded U+D800..U+DFFF

    Returns:
        The decoded scalar value

    Raises:
        InvalidEncoding: If `sequence` is not one well-formed encoded scalar

    Example:
        >>> hex(decode(b'\\xe3\\x80\\x80'))
        '0x3000'
    """
    if len(sequence) == 0:
        raise InvalidEncoding('Empty UTF-8 sequence')

    length = sequence_length(sequence[0])
    if len(sequence) != length:
        raise InvalidEncoding(f'Expected {length} byte sequence, got {len(sequence)} bytes')

    scalar = sequence[0] & LEAD_BYTE_MASK[length]
    for i in range(1, length):
        if sequence[i] & 0xC0 != 0x80:
            raise InvalidEncoding('Expected continuation byte', offset=i)
        scalar = (scalar << 6) | (sequence[i] & 0x3F)

    if scalar < MIN_SCALAR_FOR_LENGTH[length]:
        raise InvalidEncoding(f'Overlong encoding of U+{scalar:04X}')
    if scalar > MAX_SCALAR:
        raise InvalidEncoding(f'Code point out of range: {scalar:#x}')
    if not allow_surrogates and scalar in SURROGATES:
        raise InvalidEncoding(f'Encoded surrogate half U+{scalar:04X}')
    return scalar

def encode(scalar: int) -> bytes:
    """
    Encode a scalar value as UTF-8. Surrogate halves are encoded as-is.

    Raises:
        ValueError: If `scalar` is outside 0..U+10FFFF
    """
    length = byte_length(scalar)
    if length == 1:
        return bytes((scalar,))
    lead_prefix = {2: 0xC0, 3: 0xE0, 4: 0xF0}[length]
    tail = []
    for _ in range(length - 1):
        tail.append(0x80 | (scalar & 0x3F))
        scalar >>= 6
    return bytes([lead_prefix | scalar] + tail[::-1])
