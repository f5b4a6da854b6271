"""Name to class lookup, used to pick a progress reporter from the command line.

Example:
    >>> reporters = Registry[ProgressReporter]("reporter")
    >>> @reporters.register("quiet")
    ... class QuietReporter(EmptyProgressReporter): ...
    >>> reporters.create("quiet")
"""

from typing import Callable, Generic, TypeVar

from sentinel_explorer.errors import InvalidArgument

T = TypeVar("T")


class Registry(Generic[T]):
    def __init__(self, name: str):
        self.name = name
        self._classes: dict[str, type[T]] = {}

    def names(self) -> list[str]:
        return list(self._classes)

    def register(self, key: str) -> Callable[[type[T]], type[T]]:
        """Class decorator adding the decorated class under `key`."""

        def decorator(cls: type[T]) -> type[T]:
            if key in self._classes:
                raise InvalidArgument(f"{self.name.capitalize()} '{key}' is already registered")
            self._classes[key] = cls
            return cls

        return decorator

    def get(self, key: str) -> type[T]:
        if key not in self._classes:
            raise InvalidArgument(f"{self.name.capitalize()} '{key}' not found, expected one of {self.names()}")
        return self._classes[key]

    def create(self, key: str, **kwargs) -> T:
        return self.get(key)(**kwargs)
