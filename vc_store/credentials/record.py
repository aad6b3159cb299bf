"""Model for a verifiable credential stored in an encrypted data vault."""

from typing import Mapping

from marshmallow import EXCLUDE, fields

from ..edv.document import EdvDocument
from ..models.base import BaseModel, BaseModelSchema


class CredentialRecord(BaseModel):
    """Verifiable credential with its vault metadata and document id."""

    class Meta:
        """CredentialRecord metadata."""

        schema_class = "CredentialRecordSchema"

    def __init__(
        self,
        *,
        content: Mapping,  # the credential as a JSON-serializable mapping
        meta: Mapping = None,  # indexed metadata, including the issuer id
        document_id: str = None,  # id of the vault document holding the credential
    ):
        """Initialize a new CredentialRecord."""
        super().__init__()
        self.content = content
        self.meta = meta
        self.document_id = document_id

    @classmethod
    def from_document(cls, doc: EdvDocument) -> "CredentialRecord":
        """Build a record from a vault document."""
        return cls(content=doc.content, meta=doc.meta, document_id=doc.id)

    @property
    def given_id(self) -> str:
        """Accessor for the credential 'id' property."""
        return self.content.get("id") if self.content else None

    def __eq__(self, other: object) -> bool:
        """Compare two credential records for equality."""
        if not isinstance(other, CredentialRecord):
            return False
        return (
            other.content == self.content
            and other.meta == self.meta
            and other.document_id == self.document_id
        )


class CredentialRecordSchema(BaseModelSchema):
    """Credential record schema class."""

    class Meta:
        """Credential record schema metadata."""

        model_class = CredentialRecord
        unknown = EXCLUDE

    content = fields.Dict(
        required=True,
        metadata={"description": "(JSON-serializable) credential value"},
    )
    meta = fields.Dict(
        allow_none=True,
        metadata={
            "description": "Credential metadata",
            "example": {"issuer": "https://example.edu/issuers/14"},
        },
    )
    document_id = fields.Str(
        data_key="documentId",
        allow_none=True,
        metadata={
            "description": "Vault document identifier",
            "example": "z19pjdSMQMkBqqJ5zsaagncfU",
        },
    )
