"""Basic in-memory encrypted data vault client (no encryption, no transport)."""

import logging

from copy import deepcopy
from typing import Mapping, Sequence, Union
from uuid import uuid4

from .base import BaseEdvClient
from .document import EdvDocument
from .error import EdvDuplicateError, EdvError, EdvNotFoundError

LOGGER = logging.getLogger(__name__)


def attribute_match(value, expected) -> bool:
    """Match a single document attribute value against a query value.

    Array attributes are indexed per element, so a list value matches any of
    its members.
    """
    if value is None:
        return False
    if isinstance(value, (list, tuple)):
        return expected in value
    return value == expected


def clause_match(doc: EdvDocument, clause: Mapping) -> bool:
    """Match a document against every field of one equality clause."""
    return all(attribute_match(doc.resolve(k), v) for k, v in clause.items())


def normalize_equals(equals: Union[Mapping, Sequence[Mapping]]) -> Sequence[Mapping]:
    """Validate an equality query and return it as a list of clauses."""
    if isinstance(equals, Mapping):
        return [equals]
    if not isinstance(equals, (list, tuple)):
        raise EdvError("Expected an equality clause or a list of clauses")
    if not equals:
        raise EdvError("At least one equality clause is required")
    for clause in equals:
        if not isinstance(clause, Mapping):
            raise EdvError("Expected object for equality clause: {}".format(clause))
    return list(equals)


class InMemoryEdvClient(BaseEdvClient):
    """Vault client keeping documents in a dictionary."""

    def __init__(self):
        """Initialize an `InMemoryEdvClient` instance."""
        self.documents = {}
        self.indexes = []

    def indexed(self, attribute: str) -> bool:
        """Check whether a declared index covers an attribute path."""
        return any(attribute in attrs for attrs, _ in self.indexes)

    async def ensure_index(
        self, attribute: Union[str, Sequence[str]], unique: bool = False
    ):
        """
        Declare an index over one or more document attributes.

        Args:
            attribute: A dotted attribute path or a list of paths
            unique: Reject documents duplicating the indexed values

        """
        attrs = (attribute,) if isinstance(attribute, str) else tuple(attribute)
        if not attrs or not all(isinstance(a, str) and a for a in attrs):
            raise EdvError("Index attribute must be a non-empty path")
        index = (attrs, bool(unique))
        if index not in self.indexes:
            LOGGER.debug("Adding index on %s (unique=%s)", attrs, bool(unique))
            self.indexes.append(index)

    async def find(
        self,
        equals: Union[Mapping, Sequence[Mapping]],
        invocation_signer,
    ) -> Sequence[EdvDocument]:
        """
        Find documents matching at least one equality clause.

        Raises:
            EdvError: If the query is malformed or uses an unindexed attribute

        """
        clauses = normalize_equals(equals)
        for clause in clauses:
            for attribute in clause:
                if not self.indexed(attribute):
                    raise EdvError("Attribute not indexed: {}".format(attribute))
        LOGGER.debug("Finding documents with %d equality clause(s)", len(clauses))
        return [
            deepcopy(doc)
            for doc in self.documents.values()
            if any(clause_match(doc, clause) for clause in clauses)
        ]

    def _check_unique(self, doc: EdvDocument):
        for attrs, unique in self.indexes:
            if not unique:
                continue
            values = [doc.resolve(a) for a in attrs]
            if any(v is None for v in values):
                continue
            for existing in self.documents.values():
                if [existing.resolve(a) for a in attrs] == values:
                    raise EdvDuplicateError(
                        "Duplicate value for unique index: {}".format(", ".join(attrs))
                    )

    async def insert(self, doc: EdvDocument, invocation_signer) -> EdvDocument:
        """
        Insert a new document, assigning an id when none is given.

        Raises:
            EdvError: If the document content is not an object
            EdvDuplicateError: If the id or a unique index value is taken

        """
        if not isinstance(doc.content, Mapping):
            raise EdvError("Document content must be an object")
        doc = EdvDocument(
            doc.id or uuid4().hex, deepcopy(doc.meta), deepcopy(doc.content)
        )
        if doc.id in self.documents:
            raise EdvDuplicateError("Duplicate document: {}".format(doc.id))
        self._check_unique(doc)
        self.documents[doc.id] = doc
        LOGGER.debug("Inserted document %s", doc.id)
        return deepcopy(doc)

    async def delete(self, doc: EdvDocument, invocation_signer) -> bool:
        """
        Delete a document by id.

        Raises:
            EdvNotFoundError: If the document is not stored

        """
        if doc.id not in self.documents:
            raise EdvNotFoundError("Document not found: {}".format(doc.id))
        del self.documents[doc.id]
        LOGGER.debug("Deleted document %s", doc.id)
        return True
