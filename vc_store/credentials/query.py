"""Query by example: expansion of example clauses into equality criteria.

A `QueryByExample` credential query lists one or more clauses of the form::

    {
        "example": {"type": "UniversityDegreeCredential"},
        "trustedIssuer": [{"id": "did:example:university"}],
    }

Each clause becomes the set of `{"type", "issuer"}` filters covering every
combination of its types and trusted issuers; a clause without trusted
issuers matches its types from any issuer.
"""

import asyncio

from typing import Awaitable, Callable, Mapping, Sequence

from .error import ConfigurationError, NotSupportedError

QUERY_BY_EXAMPLE = "QueryByExample"


def as_list(value) -> list:
    """Normalize a scalar-or-list query value to a list."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def trusted_issuer_ids(trusted_issuer) -> Sequence[str]:
    """
    Extract the issuer ids from a `trustedIssuer` value.

    Raises:
        NotSupportedError: If an issuer reference has no string `id`

    """
    issuer_ids = []
    for ref in as_list(trusted_issuer):
        issuer_id = ref.get("id") if isinstance(ref, Mapping) else None
        if not issuer_id or not isinstance(issuer_id, str):
            raise NotSupportedError('trustedIssuer without an "id" is unsupported.')
        issuer_ids.append(issuer_id)
    return issuer_ids


def expand_example_clause(clause: Mapping) -> Sequence[dict]:
    """
    Expand one example clause into find filters.

    Args:
        clause: A credential query clause with `example` and optional
            `trustedIssuer` properties

    Returns:
        One `{"type": ...}` filter per type when no issuer is trusted,
        otherwise one `{"type": ..., "issuer": ...}` filter per type and issuer

    Raises:
        ConfigurationError: If the clause has no example type
        NotSupportedError: If a trusted issuer has no `id`

    """
    if not isinstance(clause, Mapping):
        raise ConfigurationError("Each credentialQuery entry must be an object.")
    example = clause.get("example")
    if not isinstance(example, Mapping):
        raise ConfigurationError('"example" is needed to execute a QueryByExample.')
    types = as_list(example.get("type"))
    if not types:
        raise ConfigurationError(
            '"example.type" is needed to execute a QueryByExample.'
        )
    if not all(isinstance(type_, str) for type_ in types):
        raise ConfigurationError('"example.type" must be a string or an array.')
    issuers = trusted_issuer_ids(clause.get("trustedIssuer"))

    criteria = []
    for type_ in types:
        if not issuers:
            criteria.append({"type": type_})
            continue
        for issuer in issuers:
            criteria.append({"type": type_, "issuer": issuer})
    return criteria


def expand_credential_query(credential_query) -> Sequence[Sequence[dict]]:
    """
    Expand a credential query into one list of find filters per clause.

    Every clause is checked before any filter is returned.

    Raises:
        ConfigurationError: If the credential query is missing or malformed

    """
    if credential_query is None:
        raise ConfigurationError(
            '"credentialQuery" is needed to execute a QueryByExample.'
        )
    if not isinstance(credential_query, (Mapping, list, tuple)):
        raise ConfigurationError('"credentialQuery" must be an object or an array.')
    return [expand_example_clause(clause) for clause in as_list(credential_query)]


async def query_by_example(
    find: Callable[[Sequence[Mapping]], Awaitable[Sequence]], credential_query
) -> list:
    """
    Run a credential query through a find coroutine.

    The per-clause lookups run concurrently; results are concatenated in
    clause order and are not de-duplicated. If a lookup fails, the lookups
    still pending are cancelled before the error propagates.

    Args:
        find: Coroutine function taking a list of filters and returning
            the matching records
        credential_query: A clause or list of clauses

    Returns:
        The matching records of every clause

    """
    per_clause = expand_credential_query(credential_query)
    tasks = [asyncio.ensure_future(find(criteria)) for criteria in per_clause]
    try:
        results = await asyncio.gather(*tasks)
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()
    return [record for clause_results in results for record in clause_results]
