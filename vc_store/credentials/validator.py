"""Verifiable credential shape checks."""

from typing import Mapping

from .error import ValidationError


def derive_issuer_id(credential: Mapping) -> str:
    """
    Return the canonical issuer identifier of a credential.

    The `issuer` property is either a URI string or an object with a string
    `id` property.

    Args:
        credential: The credential object

    Returns:
        The issuer URI

    Raises:
        ValidationError: If the issuer is missing or malformed

    """
    if not isinstance(credential, Mapping):
        raise ValidationError("A verifiable credential MUST be an object")
    issuer = credential.get("issuer")
    if not issuer:
        raise ValidationError("A verifiable credential MUST have an issuer property")
    if isinstance(issuer, str):
        return issuer
    if isinstance(issuer, Mapping) and isinstance(issuer.get("id"), str):
        return issuer["id"]
    raise ValidationError(
        "The value of the issuer property MUST be either a URI"
        " or an object containing an id property."
    )
