"""Abstract interface for encrypted data vault clients."""

from abc import ABC, abstractmethod
from typing import Mapping, Sequence, Union

from .document import EdvDocument


class BaseEdvClient(ABC):
    """Abstract encrypted data vault client.

    Implementations own encryption, transport, capability invocation and
    index maintenance. Every request carries the caller's invocation signer,
    an object with an `id` property and a `sign` coroutine, which is passed
    through untouched.
    """

    @abstractmethod
    async def ensure_index(
        self, attribute: Union[str, Sequence[str]], unique: bool = False
    ):
        """
        Declare an index over one or more document attributes.

        Args:
            attribute: A dotted attribute path, or a list of paths for a
                multi-attribute index
            unique: Reject documents duplicating an indexed value

        """

    @abstractmethod
    async def find(
        self,
        equals: Union[Mapping, Sequence[Mapping]],
        invocation_signer,
    ) -> Sequence[EdvDocument]:
        """
        Find documents by attribute equality.

        Args:
            equals: An equality clause mapping attribute paths to values, or a
                list of clauses. A document matches if it satisfies every
                field of at least one clause.
            invocation_signer: Capability invocation signer

        Returns:
            The matching `EdvDocument` instances

        """

    @abstractmethod
    async def insert(self, doc: EdvDocument, invocation_signer) -> EdvDocument:
        """
        Insert a new document.

        Args:
            doc: The document; a new id is assigned when `doc.id` is empty
            invocation_signer: Capability invocation signer

        Returns:
            The stored document

        Raises:
            EdvDuplicateError: If the id or a unique index value is taken

        """

    @abstractmethod
    async def delete(self, doc: EdvDocument, invocation_signer) -> bool:
        """
        Delete an existing document.

        Args:
            doc: The document to delete
            invocation_signer: Capability invocation signer

        Returns:
            True if the document was deleted

        Raises:
            EdvNotFoundError: If the vault reports the document as absent

        """

    def __repr__(self) -> str:
        """Human readable representation of a `BaseEdvClient` implementation."""
        return "<{}>".format(self.__class__.__name__)
