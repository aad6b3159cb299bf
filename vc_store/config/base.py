"""Read-only settings interface consumed by the store and logging setup."""

from abc import abstractmethod
from typing import Any, Iterator, Mapping, Optional

FALSE_VALUES = ("false", "False", "0")


class BaseSettings(Mapping[str, Any]):
    """Settings keyed by dotted names such as `store.auto_initialize`."""

    @abstractmethod
    def get_value(self, *var_names, default: Optional[Any] = None) -> Any:
        """Return the first defined setting among `var_names`, else `default`."""

    def get_bool(self, *var_names, default: Optional[bool] = None) -> Optional[bool]:
        """Fetch a flag; the strings "false", "False" and "0" count as false."""
        value = self.get_value(*var_names, default=default)
        if value is None:
            return None
        return bool(value) and value not in FALSE_VALUES

    def get_str(self, *var_names, default: Optional[str] = None) -> Optional[str]:
        """Fetch a setting as a string, e.g. a log level name."""
        value = self.get_value(*var_names, default=default)
        return None if value is None else str(value)

    def __getitem__(self, name: str):
        """Fetch a setting by name."""
        missing = object()
        value = self.get_value(name, default=missing)
        if value is missing:
            raise KeyError("Undefined setting: {}".format(name))
        return value

    @abstractmethod
    def __iter__(self) -> Iterator[str]:
        """Iterate setting names."""

    @abstractmethod
    def __len__(self) -> int:
        """Count the defined settings."""
