"""Utilities related to logging."""

import logging
import sys

from pythonjsonlogger import jsonlogger

from .base import BaseSettings
from .settings import LOG_JSON, LOG_LEVEL

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


class LoggingConfigurator:
    """Utility class used to configure logging."""

    @classmethod
    def configure(cls, log_level: str = None, log_json: bool = False):
        """Configure the root logger.

        Args:
            log_level: Name of the root logger level, e.g. "debug"
            log_json: Emit each record as a JSON object instead of plain text

        Returns:
            The installed handler

        """
        handler = logging.StreamHandler(sys.stderr)
        if log_json:
            handler.setFormatter(jsonlogger.JsonFormatter(LOG_FORMAT))
        else:
            handler.setFormatter(logging.Formatter(LOG_FORMAT))

        root = logging.getLogger()
        for existing in list(root.handlers):
            root.removeHandler(existing)
        root.addHandler(handler)

        if log_level:
            log_level = log_level.upper()
            if not isinstance(logging.getLevelName(log_level), int):
                raise ValueError(f"Unknown log level: {log_level}")
            root.setLevel(log_level)

        return handler

    @classmethod
    def configure_from_settings(cls, settings: BaseSettings):
        """Configure logging from the `log.*` settings."""
        return cls.configure(
            settings.get_str(LOG_LEVEL),
            settings.get_bool(LOG_JSON, default=False),
        )
