"""Common exception classes."""

import re


class BaseError(Exception):
    """Generic exception class which other exceptions should inherit from."""

    def __init__(self, *args, error_code: str = None, **kwargs):
        """Initialize a BaseError instance."""
        super().__init__(*args, **kwargs)
        self.error_code = error_code if error_code else None

    @property
    def message(self) -> str:
        """Accessor for the error message."""
        return str(self.args[0]).strip() if self.args else ""

    @property
    def roll_up(self) -> str:
        """
        Accessor for the error message and its causes rolled into one line.

        Vault client errors often wrap transport errors with multi-line bodies.
        """

        def flatten(exc: Exception):
            text = str(exc.args[0]).strip() if exc.args else exc.__class__.__name__
            return re.sub(r"\n\s*", ". ", text).strip().rstrip(".")

        parts = [flatten(self)]
        err = self
        while err.__cause__:
            err = err.__cause__
            parts.append(flatten(err))
        return ". ".join(parts) + "."
