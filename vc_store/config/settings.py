"""Settings implementation."""

from typing import Mapping

from .base import BaseSettings

# Declare the vault indexes when a store is created through the factory
AUTO_INITIALIZE = "store.auto_initialize"
# Root logger level name, e.g. "DEBUG"
LOG_LEVEL = "log.level"
# Emit JSON log lines instead of plain text
LOG_JSON = "log.json"


class Settings(BaseSettings):
    """Settings fixed at construction from a plain mapping."""

    def __init__(self, values: Mapping[str, object] = None):
        """Initialize a Settings object from an optional mapping."""
        self._values = dict(values or {})

    def get_value(self, *var_names, default=None):
        """Return the first defined setting among `var_names`, else `default`."""
        for name in var_names:
            if name in self._values:
                return self._values[name]
        return default

    def __contains__(self, name):
        """Check whether a setting is defined."""
        return name in self._values

    def __iter__(self):
        """Iterate setting names."""
        return iter(self._values)

    def __len__(self):
        """Count the defined settings."""
        return len(self._values)
