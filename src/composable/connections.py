from importlib import resources
from functools import cache

class cached_class_attr:
    """Read-only class attribute computed once per class."""
    def __init__(self, f):
        self.f = cache(f)
        self.__doc__ = f.__doc__

    def __get__(self, instance, owner):
        return self.f(owner)

class WhitespaceDataSource:
    @cached_class_attr
    def csv_path(cls):
        """ Whitespace and line terminator table """
        return resources.files('composable.data').joinpath('whitespace.csv')

class ConfigSource:
    @cached_class_attr
    def yaml_path(cls):
        return resources.files('composable.data').joinpath('defaults.yaml')
