"""UTF-8 well-formedness checks.

Validation is strict by default: truncated sequences, overlong encodings,
values above U+10FFFF and encoded surrogate halves are all rejected. Setting
`allow_surrogates` (per call, or through `composable.config.Config`)
switches to the lenient WTF-8 policy that accepts surrogate halves.
"""

__docformat__ = 'google'

__all__ = [
    'is_valid',
    'first_invalid_offset'
]

import codecs
from typing import Optional
from composable.config import get_config

def _error_handler(allow_surrogates: Optional[bool]) -> str:
    if allow_surrogates is None:
        allow_surrogates = get_config().allow_surrogates
    return 'surrogatepass' if allow_surrogates else 'strict'

def first_invalid_offset(data, allow_surrogates: Optional[bool] = None) -> Optional[int]:
    """
    Find the first byte that breaks UTF-8 well-formedness.

    Args:
        data: Any bytes-like object
        allow_surrogates: Accept encoded surrogate halves. None uses the configured policy.

    Returns:
        Offset of the first offending byte, or None if `data` is well-formed

    Example:
        >>> first_invalid_offset(b'abc')
        >>> first_invalid_offset(b'ab\\xe3\\x80')
        2
    """
    try:
        codecs.decode(data, 'utf-8', _error_handler(allow_surrogates))
    except UnicodeDecodeError as e:
        return e.start
    return None

def is_valid(data, allow_surrogates: Optional[bool] = None) -> bool:
    """
    Check if bytes are well-formed UTF-8.

    Args:
        data: Any bytes-like object
        allow_surrogates: Accept encoded surrogate halves. None uses the configured policy.

    Returns:
        True if `data` decodes as a sequence of scalar values, else False

    Example:
        >>> is_valid('日本語'.encode())
        True
        >>> is_valid(b'\\xc0\\xaf')
        False
        >>> is_valid(b'\\xed\\xa0\\x80', allow_surrogates=True)
        True
    """
    return first_invalid_offset(data, allow_surrogates) is None
