"""Encrypted data vault client exceptions."""

from ..core.error import BaseError


class EdvError(BaseError):
    """Base class for errors raised by an encrypted data vault client.

    `status` carries the HTTP status of the failed vault request, if any.
    """

    def __init__(self, *args, status: int = None, **kwargs):
        """Initialize an EdvError instance."""
        super().__init__(*args, **kwargs)
        self.status = status


class EdvNotFoundError(EdvError):
    """Document not found in the vault."""

    def __init__(self, *args, status: int = 404, **kwargs):
        """Initialize an EdvNotFoundError instance."""
        super().__init__(*args, status=status, **kwargs)


class EdvDuplicateError(EdvError):
    """Document conflicts with an existing id or unique index entry."""

    def __init__(self, *args, status: int = 409, **kwargs):
        """Initialize an EdvDuplicateError instance."""
        super().__init__(*args, status=status, **kwargs)
