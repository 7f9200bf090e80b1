"""Runtime configuration for validation policy and the default allocator.

Defaults are packaged in `composable/data/defaults.yaml`. Environment
variables override them:

    COMPOSABLE_ALLOW_SURROGATES: `1`, `true`, `yes`, `on` or `0`, `false`, `no`, `off`
    COMPOSABLE_HEAP_LIMIT: byte cap for `composable.allocators.default_allocator`,
        or empty / `none` for unlimited
"""

__docformat__ = 'google'

__all__ = [
    # Classes
    'Config',

    # Functions
    'get_config'
]

import os
from dataclasses import dataclass
from functools import cache
from pathlib import Path
from typing import Optional
import yaml
from composable.connections import ConfigSource

TRUE_VALUES = ('1', 'true', 'yes', 'on')
FALSE_VALUES = ('0', 'false', 'no', 'off')

def _parse_bool(value: str, variable: str) -> bool:
    normalized = value.strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    raise ValueError(f'{variable} must be one of {TRUE_VALUES + FALSE_VALUES}, got: {value!r}')

def _parse_limit(value, variable: str) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if value.lower() in ('', 'none', 'null'):
            return None
    try:
        limit = int(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f'{variable} must be an integer, got: {value!r}') from e
    if limit < 0:
        raise ValueError(f'{variable} must not be negative, got: {limit}')
    return limit

@dataclass(frozen=True)
class Config(ConfigSource):
    """
    Package configuration.

    Args:
        allow_surrogates: Treat UTF-8 encoded surrogate halves as valid (WTF-8 policy)
        heap_limit: Byte cap for the default heap allocator, None for unlimited
    """
    allow_surrogates: bool = False
    heap_limit: Optional[int] = None

    @classmethod
    def load(cls, file_path = None, environ = None):
        """
        Read packaged defaults and apply environment overrides.

        Args:
            file_path: YAML file to read instead of the packaged defaults
            environ: Mapping to read overrides from, defaults to `os.environ`

        Raises:
            ValueError: If a setting has a malformed value
        """
        file_path = Path(file_path) if isinstance(file_path, str) else (file_path or cls.yaml_path)
        environ = os.environ if environ is None else environ

        with file_path.open('r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        allow_surrogates = data.get('allow_surrogates', False)
        if isinstance(allow_surrogates, str):
            allow_surrogates = _parse_bool(allow_surrogates, 'allow_surrogates')
        allow_surrogates = bool(allow_surrogates)
        heap_limit = _parse_limit(data.get('heap_limit'), 'heap_limit')

        if 'COMPOSABLE_ALLOW_SURROGATES' in environ:
            allow_surrogates = _parse_bool(environ['COMPOSABLE_ALLOW_SURROGATES'], 'COMPOSABLE_ALLOW_SURROGATES')
        if 'COMPOSABLE_HEAP_LIMIT' in environ:
            heap_limit = _parse_limit(environ['COMPOSABLE_HEAP_LIMIT'], 'COMPOSABLE_HEAP_LIMIT')

        return cls(allow_surrogates=allow_surrogates, heap_limit=heap_limit)

@cache
def get_config() -> Config:
    """Process-wide configuration, loaded on first use."""
    return Config.load()
