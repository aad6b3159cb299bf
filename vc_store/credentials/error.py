"""Credential store exceptions."""

from enum import Enum

from ..core.error import BaseError


class ErrorKind(Enum):
    """Kinds of error raised by the credential store itself.

    Failures reported by the vault client are raised as `EdvError` (or the
    client's own exception types) and pass through unchanged.
    """

    CONFIGURATION = "configuration"
    VALIDATION = "validation"
    NOT_SUPPORTED = "not_supported"
    NOT_FOUND = "not_found"


class CredentialStoreError(BaseError):
    """Base class for credential store errors."""

    kind: ErrorKind = None

    def __init__(self, *args, error_code: str = None, **kwargs):
        """Initialize a CredentialStoreError, defaulting the code to the kind."""
        super().__init__(
            *args,
            error_code=error_code or (self.kind.value if self.kind else None),
            **kwargs,
        )


class ConfigurationError(CredentialStoreError):
    """Malformed or missing query input."""

    kind = ErrorKind.CONFIGURATION


class ValidationError(CredentialStoreError):
    """Credential content violates the issuer invariant."""

    kind = ErrorKind.VALIDATION


class NotSupportedError(CredentialStoreError):
    """Structurally valid but unsupported query input."""

    kind = ErrorKind.NOT_SUPPORTED


class NotFoundError(CredentialStoreError):
    """A required credential lookup found nothing."""

    kind = ErrorKind.NOT_FOUND
