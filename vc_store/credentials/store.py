"""Verifiable credential store over an encrypted data vault."""

import logging

from typing import Callable, Mapping, Sequence

from aiohttp import ClientResponseError

from ..config.base import BaseSettings
from ..config.settings import AUTO_INITIALIZE
from ..edv.base import BaseEdvClient
from ..edv.document import EdvDocument
from ..edv.error import EdvError
from .error import ConfigurationError, NotFoundError
from .query import QUERY_BY_EXAMPLE, as_list, query_by_example
from .record import CredentialRecord
from .validator import derive_issuer_id

LOGGER = logging.getLogger(__name__)

INDEX_ATTRIBUTES = ("meta.issuer", "meta.displayable", "content.type")
UNIQUE_INDEX_ATTRIBUTE = "content.id"

# find filter property -> vault document attribute
FILTER_ATTRIBUTES = {
    "type": "content.type",
    "issuer": "meta.issuer",
    "displayable": "meta.displayable",
}


def identity(record: CredentialRecord) -> CredentialRecord:
    """Return a match result unchanged."""
    return record


def build_equality_clause(spec: Mapping) -> dict:
    """
    Convert a find filter into a vault equality clause.

    Only the filter properties which are present (not None) are matched.

    Raises:
        ConfigurationError: If the filter is not an object

    """
    if not isinstance(spec, Mapping):
        raise ConfigurationError("Each query filter must be an object.")
    return {
        attribute: spec[name]
        for name, attribute in FILTER_ATTRIBUTES.items()
        if spec.get(name) is not None
    }


class VerifiableCredentialStore:
    """Store verifiable credentials as documents in an encrypted data vault.

    Each instance is bound to a single vault client and the capability
    invocation signer authorizing its requests.
    """

    def __init__(self, edv: BaseEdvClient, invocation_signer):
        """
        Initialize a `VerifiableCredentialStore` instance.

        Args:
            edv: The vault client used to store credentials
            invocation_signer: Object with an `id` property and a `sign`
                coroutine, passed to every vault request

        """
        self._edv = edv
        self._invocation_signer = invocation_signer

    @property
    def edv(self) -> BaseEdvClient:
        """Accessor for the vault client."""
        return self._edv

    @property
    def invocation_signer(self):
        """Accessor for the capability invocation signer."""
        return self._invocation_signer

    @classmethod
    async def create(
        cls, edv: BaseEdvClient, invocation_signer, settings: BaseSettings = None
    ) -> "VerifiableCredentialStore":
        """
        Create a store, declaring the vault indexes unless disabled.

        Args:
            edv: The vault client used to store credentials
            invocation_signer: The capability invocation signer
            settings: Optional settings; `store.auto_initialize` defaults to true

        """
        store = cls(edv, invocation_signer)
        auto_initialize = (
            settings.get_bool(AUTO_INITIALIZE, default=True)
            if settings is not None
            else True
        )
        if auto_initialize:
            await store.initialize()
        return store

    async def initialize(self):
        """Declare the vault indexes the store queries rely on."""
        await self._edv.ensure_index(list(INDEX_ATTRIBUTES))
        await self._edv.ensure_index(UNIQUE_INDEX_ATTRIBUTE, unique=True)

    async def _find_by_given_id(self, given_id: str) -> Sequence[EdvDocument]:
        return await self._edv.find(
            {UNIQUE_INDEX_ATTRIBUTE: given_id}, self._invocation_signer
        )

    async def get(self, given_id: str) -> CredentialRecord:
        """
        Fetch a credential by its 'id' property.

        Raises:
            NotFoundError: If no stored credential has this id

        """
        docs = await self._find_by_given_id(given_id)
        if not docs:
            raise NotFoundError("Verifiable Credential not found.")
        return CredentialRecord.from_document(docs[0])

    async def find(self, query) -> Sequence[CredentialRecord]:
        """
        Fetch the credentials matching any of the given filters.

        Args:
            query: A filter or list of filters, each with optional `type`,
                `issuer` and `displayable` properties

        Returns:
            The matching records; a credential matching several filters is
            returned as often as the vault reports it

        Raises:
            ConfigurationError: If the query is missing or malformed

        """
        filters = as_list(query)
        if not filters:
            raise ConfigurationError('"query" is a required parameter.')
        equals = [build_equality_clause(spec) for spec in filters]
        LOGGER.debug("Finding credentials with %d filter(s)", len(equals))
        docs = await self._edv.find(equals, self._invocation_signer)
        return [CredentialRecord.from_document(doc) for doc in docs]

    async def match(
        self,
        query: Mapping,
        result_transform: Callable[[CredentialRecord], object] = None,
    ) -> list:
        """
        Find the credentials matching a verifiable presentation query.

        Only `QueryByExample` queries are supported.

        Args:
            query: The presentation request query
            result_transform: Applied to each matching record, identity if None

        Raises:
            ConfigurationError: If the query type is unsupported or the query
                is malformed
            NotSupportedError: If a trusted issuer has no `id`

        """
        if not isinstance(query, Mapping):
            raise ConfigurationError('"query" must be an object.')
        query_type = query.get("type")
        if query_type != QUERY_BY_EXAMPLE:
            raise ConfigurationError(f'Unsupported query type: "{query_type}"')
        results = await query_by_example(self.find, query.get("credentialQuery"))
        transform = result_transform or identity
        return [transform(record) for record in results]

    async def insert(
        self, credential: Mapping, meta: Mapping = None, doc_id: str = None
    ) -> CredentialRecord:
        """
        Store a verifiable credential.

        The `issuer` metadata is always derived from the credential, replacing
        any caller-supplied value. The caller's `meta` is not modified.

        Args:
            credential: The credential to store
            meta: Additional metadata, e.g. `displayable`
            doc_id: Optional vault document id

        Returns:
            The stored record

        Raises:
            ValidationError: If the credential issuer is missing or malformed
            EdvDuplicateError: If a credential with the same id is stored

        """
        if meta is not None and not isinstance(meta, Mapping):
            raise ConfigurationError('"meta" must be an object.')
        meta = dict(meta or {})
        meta["issuer"] = derive_issuer_id(credential)
        doc = await self._edv.insert(
            EdvDocument(doc_id, meta, credential), self._invocation_signer
        )
        LOGGER.debug("Stored credential in document %s", doc.id)
        return CredentialRecord.from_document(doc)

    async def delete(self, given_id: str) -> bool:
        """
        Remove a credential by its 'id' property.

        Returns:
            False if no such credential is stored, otherwise the vault result

        """
        try:
            docs = await self._find_by_given_id(given_id)
            if not docs:
                return False
            LOGGER.debug("Deleting credential document %s", docs[0].id)
            return await self._edv.delete(docs[0], self._invocation_signer)
        except (EdvError, ClientResponseError) as err:
            if err.status == 404:
                return False
            raise

    def __repr__(self) -> str:
        """Human readable representation of this instance."""
        return "<{}(edv={!r})>".format(self.__class__.__name__, self._edv)
