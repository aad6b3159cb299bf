import pytest
import pytest_asyncio

from unittest import IsolatedAsyncioTestCase, mock

from aiohttp import ClientResponseError

from ...config.settings import AUTO_INITIALIZE, Settings
from ...edv.base import BaseEdvClient
from ...edv.document import EdvDocument
from ...edv.error import EdvDuplicateError, EdvError, EdvNotFoundError
from ...edv.in_memory import InMemoryEdvClient
from ..error import (
    ConfigurationError,
    NotFoundError,
    NotSupportedError,
    ValidationError,
)
from ..record import CredentialRecord
from ..store import VerifiableCredentialStore, build_equality_clause

ISSUER_ID = "https://example.edu/issuers/565049"
OTHER_ISSUER_ID = "did:example:76e12ec712ebc6f1c221ebfeb1f"


def make_credential(given_id, types=("AlumniCredential",), issuer=ISSUER_ID):
    return {
        "@context": ["https://www.w3.org/2018/credentials/v1"],
        "id": given_id,
        "type": ["VerifiableCredential", *types],
        "issuer": issuer,
        "issuanceDate": "2010-01-01T19:23:24Z",
        "credentialSubject": {"id": "did:example:ebfeb1f712ebc6f1c276e12ec21"},
    }


class MockSigner:
    id = "did:key:z6MkvKh2NF7DG5a5xeyz2a4UvGJqzHkaPXKXRj9Bm2ZnSAsq#capability"

    async def sign(self, data):
        return b"signature"


@pytest_asyncio.fixture()
async def store():
    yield await VerifiableCredentialStore.create(InMemoryEdvClient(), MockSigner())


class TestBuildEqualityClause:
    def test_fields(self):
        assert build_equality_clause(
            {"type": "A", "issuer": ISSUER_ID, "displayable": True}
        ) == {
            "content.type": "A",
            "meta.issuer": ISSUER_ID,
            "meta.displayable": True,
        }
        assert build_equality_clause({"type": "A", "other": "x"}) == {
            "content.type": "A"
        }
        assert build_equality_clause({"displayable": False}) == {
            "meta.displayable": False
        }
        assert build_equality_clause({"issuer": None}) == {}

    def test_not_object(self):
        with pytest.raises(ConfigurationError):
            build_equality_clause("A")


class TestVerifiableCredentialStore:
    @pytest.mark.asyncio
    async def test_repr(self, store):
        assert "VerifiableCredentialStore" in repr(store)
        assert "InMemoryEdvClient" in repr(store)

    @pytest.mark.asyncio
    async def test_create_initializes(self, store):
        assert store.edv.indexes == [
            (("meta.issuer", "meta.displayable", "content.type"), False),
            (("content.id",), True),
        ]
        assert isinstance(store.invocation_signer, MockSigner)

    @pytest.mark.asyncio
    async def test_create_empty_settings_initializes(self):
        store = await VerifiableCredentialStore.create(
            InMemoryEdvClient(), MockSigner(), Settings()
        )
        assert len(store.edv.indexes) == 2

    @pytest.mark.asyncio
    async def test_create_without_initialize(self):
        store = await VerifiableCredentialStore.create(
            InMemoryEdvClient(), MockSigner(), Settings({AUTO_INITIALIZE: False})
        )
        assert store.edv.indexes == []
        with pytest.raises(EdvError):
            await store.get("http://example.edu/credentials/1")

    @pytest.mark.asyncio
    async def test_insert_get_string_issuer(self, store):
        credential = make_credential("http://example.edu/credentials/1")
        inserted = await store.insert(credential, meta={"displayable": True})
        assert inserted.content == credential
        assert inserted.document_id
        assert inserted.meta == {"displayable": True, "issuer": ISSUER_ID}

        record = await store.get(credential["id"])
        assert record == inserted
        assert record.meta["issuer"] == ISSUER_ID

    @pytest.mark.asyncio
    async def test_insert_get_object_issuer(self, store):
        credential = make_credential(
            "http://example.edu/credentials/2",
            issuer={"id": OTHER_ISSUER_ID, "name": "Example University"},
        )
        await store.insert(credential)
        record = await store.get(credential["id"])
        assert record.meta["issuer"] == OTHER_ISSUER_ID

    @pytest.mark.asyncio
    async def test_insert_overrides_issuer_meta(self, store):
        meta = {"issuer": "did:example:forged"}
        credential = make_credential("http://example.edu/credentials/3")
        inserted = await store.insert(credential, meta=meta, doc_id="doc-3")
        assert inserted.document_id == "doc-3"
        assert inserted.meta["issuer"] == ISSUER_ID
        assert meta == {"issuer": "did:example:forged"}

    @pytest.mark.asyncio
    async def test_insert_invalid_issuer(self, store):
        credential = make_credential("http://example.edu/credentials/4")
        del credential["issuer"]
        with pytest.raises(ValidationError):
            await store.insert(credential)

        credential["issuer"] = {"name": "x"}
        with pytest.raises(ValidationError):
            await store.insert(credential)
        assert not store.edv.documents

    @pytest.mark.asyncio
    async def test_insert_bad_meta(self, store):
        with pytest.raises(ConfigurationError):
            await store.insert(make_credential("urn:uuid:1"), meta=["displayable"])

    @pytest.mark.asyncio
    async def test_insert_duplicate(self, store):
        credential = make_credential("http://example.edu/credentials/5")
        await store.insert(credential)
        with pytest.raises(EdvDuplicateError):
            await store.insert(credential)

    @pytest.mark.asyncio
    async def test_get_missing(self, store):
        with pytest.raises(NotFoundError):
            await store.get("http://example.edu/credentials/missing")

    @pytest.mark.asyncio
    async def test_delete(self, store):
        credential = make_credential("http://example.edu/credentials/6")
        await store.insert(credential)
        assert await store.delete(credential["id"]) is True
        with pytest.raises(NotFoundError):
            await store.get(credential["id"])
        assert await store.delete(credential["id"]) is False

    @pytest.mark.asyncio
    async def test_delete_never_inserted(self, store):
        assert await store.delete("http://example.edu/credentials/none") is False
        assert await store.delete("http://example.edu/credentials/none") is False

    @pytest.mark.asyncio
    async def test_find_by_type(self, store):
        alumni = []
        for i in range(5):
            types = ("AlumniCredential",) if i % 2 else ("UniversityDegreeCredential",)
            credential = make_credential(f"http://example.edu/credentials/{i}", types)
            await store.insert(credential)
            if i % 2:
                alumni.append(credential["id"])

        records = await store.find({"type": "AlumniCredential"})
        assert sorted(r.given_id for r in records) == sorted(alumni)
        assert all(isinstance(r, CredentialRecord) for r in records)

        records = await store.find([{"type": "AlumniCredential"}, {"issuer": "x"}])
        assert len(records) == len(alumni)

        assert await store.find({"type": "AlumniCredential", "issuer": "x"}) == []

    @pytest.mark.asyncio
    async def test_find_displayable(self, store):
        await store.insert(make_credential("urn:uuid:1"), meta={"displayable": True})
        await store.insert(make_credential("urn:uuid:2"), meta={"displayable": False})
        await store.insert(make_credential("urn:uuid:3"))

        shown = await store.find({"displayable": True})
        assert [r.given_id for r in shown] == ["urn:uuid:1"]
        hidden = await store.find({"displayable": False})
        assert [r.given_id for r in hidden] == ["urn:uuid:2"]

    @pytest.mark.asyncio
    async def test_find_missing_query(self, store):
        with pytest.raises(ConfigurationError):
            await store.find(None)
        with pytest.raises(ConfigurationError):
            await store.find([])

    @pytest.mark.asyncio
    async def test_match(self, store):
        await store.insert(make_credential("urn:uuid:1", ("A",), "x"))
        await store.insert(make_credential("urn:uuid:2", ("B",), "y"))
        await store.insert(make_credential("urn:uuid:3", ("A",), "z"))
        await store.insert(make_credential("urn:uuid:4", ("C",), "x"))

        records = await store.match(
            {
                "type": "QueryByExample",
                "credentialQuery": {
                    "example": {"type": ["A", "B"]},
                    "trustedIssuer": [{"id": "x"}, {"id": "y"}],
                },
            }
        )
        assert sorted(r.given_id for r in records) == ["urn:uuid:1", "urn:uuid:2"]

        records = await store.match(
            {"type": "QueryByExample", "credentialQuery": {"example": {"type": "A"}}}
        )
        assert sorted(r.given_id for r in records) == ["urn:uuid:1", "urn:uuid:3"]

    @pytest.mark.asyncio
    async def test_match_duplicates_across_clauses(self, store):
        await store.insert(make_credential("urn:uuid:1", ("A", "B"), "x"))
        records = await store.match(
            {
                "type": "QueryByExample",
                "credentialQuery": [
                    {"example": {"type": "A"}},
                    {"example": {"type": "B"}, "trustedIssuer": {"id": "x"}},
                ],
            }
        )
        assert [r.given_id for r in records] == ["urn:uuid:1", "urn:uuid:1"]

    @pytest.mark.asyncio
    async def test_match_transform(self, store):
        await store.insert(make_credential("urn:uuid:1", ("A",)))
        results = await store.match(
            {"type": "QueryByExample", "credentialQuery": {"example": {"type": "A"}}},
            result_transform=lambda record: record.content,
        )
        assert results == [make_credential("urn:uuid:1", ("A",))]

    @pytest.mark.asyncio
    async def test_match_unsupported(self, store):
        with pytest.raises(ConfigurationError) as excinfo:
            await store.match({"type": "PresentationExchange"})
        assert "PresentationExchange" in excinfo.value.message

        with pytest.raises(ConfigurationError):
            await store.match("QueryByExample")

        with pytest.raises(ConfigurationError):
            await store.match({"type": "QueryByExample"})

    @pytest.mark.asyncio
    async def test_match_trusted_issuer_without_id(self, store):
        with pytest.raises(NotSupportedError):
            await store.match(
                {
                    "type": "QueryByExample",
                    "credentialQuery": {
                        "example": {"type": "A"},
                        "trustedIssuer": {"name": "x"},
                    },
                }
            )


class TestVerifiableCredentialStoreRequests(IsolatedAsyncioTestCase):
    """Check the requests sent to the vault client."""

    async def asyncSetUp(self):
        self.edv = mock.create_autospec(BaseEdvClient, instance=True)
        self.edv.find.return_value = []
        self.signer = MockSigner()
        self.store = VerifiableCredentialStore(self.edv, self.signer)

    async def test_initialize(self):
        await self.store.initialize()
        self.edv.ensure_index.assert_has_awaits(
            [
                mock.call(["meta.issuer", "meta.displayable", "content.type"]),
                mock.call("content.id", unique=True),
            ]
        )

    async def test_initialize_error(self):
        self.edv.ensure_index.side_effect = EdvError("Index failure")
        with self.assertRaises(EdvError):
            await self.store.initialize()

    async def test_get_passes_signer(self):
        self.edv.find.return_value = [
            EdvDocument("doc-1", {"issuer": "x"}, {"id": "urn:uuid:1"}),
            EdvDocument("doc-2", {"issuer": "x"}, {"id": "urn:uuid:1"}),
        ]
        record = await self.store.get("urn:uuid:1")
        assert record.document_id == "doc-1"
        self.edv.find.assert_awaited_once_with(
            {"content.id": "urn:uuid:1"}, self.signer
        )

    async def test_find_single_request(self):
        await self.store.find([{"type": "A"}, {"type": "A"}, {"issuer": "x"}])
        self.edv.find.assert_awaited_once_with(
            [{"content.type": "A"}, {"content.type": "A"}, {"meta.issuer": "x"}],
            self.signer,
        )

    async def test_match_cross_product_criteria(self):
        doc = EdvDocument("doc-1", {"issuer": "x"}, {"id": "urn:uuid:1"})
        self.edv.find.return_value = [doc, doc]
        records = await self.store.match(
            {
                "type": "QueryByExample",
                "credentialQuery": {
                    "example": {"type": ["A", "B"]},
                    "trustedIssuer": [{"id": "x"}, {"id": "y"}],
                },
            }
        )
        self.edv.find.assert_awaited_once_with(
            [
                {"content.type": "A", "meta.issuer": "x"},
                {"content.type": "A", "meta.issuer": "y"},
                {"content.type": "B", "meta.issuer": "x"},
                {"content.type": "B", "meta.issuer": "y"},
            ],
            self.signer,
        )
        assert len(records) == 2

    async def test_match_type_only_criteria(self):
        await self.store.match(
            {"type": "QueryByExample", "credentialQuery": {"example": {"type": "A"}}}
        )
        self.edv.find.assert_awaited_once_with([{"content.type": "A"}], self.signer)

    async def test_match_one_request_per_clause(self):
        await self.store.match(
            {
                "type": "QueryByExample",
                "credentialQuery": [
                    {"example": {"type": "A"}},
                    {"example": {"type": "B"}},
                ],
            }
        )
        self.edv.find.assert_has_awaits(
            [
                mock.call([{"content.type": "A"}], self.signer),
                mock.call([{"content.type": "B"}], self.signer),
            ]
        )

    async def test_invalid_input_no_requests(self):
        with self.assertRaises(ValidationError):
            await self.store.insert({"id": "urn:uuid:1"})
        with self.assertRaises(NotSupportedError):
            await self.store.match(
                {
                    "type": "QueryByExample",
                    "credentialQuery": [
                        {"example": {"type": "A"}},
                        {"example": {"type": "A"}, "trustedIssuer": [{}]},
                    ],
                }
            )
        self.edv.find.assert_not_awaited()
        self.edv.insert.assert_not_awaited()

    async def test_insert_request(self):
        credential = make_credential("urn:uuid:1")
        self.edv.insert.return_value = EdvDocument(
            "doc-1", {"issuer": ISSUER_ID}, credential
        )
        record = await self.store.insert(credential)
        self.edv.insert.assert_awaited_once_with(
            EdvDocument(None, {"issuer": ISSUER_ID}, credential), self.signer
        )
        assert record.document_id == "doc-1"

    async def test_delete_returns_vault_result(self):
        doc = EdvDocument("doc-1", {"issuer": "x"}, {"id": "urn:uuid:1"})
        self.edv.find.return_value = [doc]
        self.edv.delete.return_value = False
        assert await self.store.delete("urn:uuid:1") is False
        self.edv.delete.assert_awaited_once_with(doc, self.signer)

    async def test_delete_not_found_status(self):
        self.edv.find.return_value = [EdvDocument("doc-1", {}, {"id": "urn:uuid:1"})]
        self.edv.delete.side_effect = EdvNotFoundError("Gone")
        assert await self.store.delete("urn:uuid:1") is False

        self.edv.delete.side_effect = ClientResponseError(
            mock.MagicMock(), (), status=404
        )
        assert await self.store.delete("urn:uuid:1") is False

        self.edv.find.side_effect = EdvError("Vault missing", status=404)
        assert await self.store.delete("urn:uuid:1") is False

    async def test_delete_other_errors(self):
        self.edv.find.return_value = [EdvDocument("doc-1", {}, {"id": "urn:uuid:1"})]
        self.edv.delete.side_effect = ClientResponseError(
            mock.MagicMock(), (), status=403
        )
        with self.assertRaises(ClientResponseError):
            await self.store.delete("urn:uuid:1")

        self.edv.delete.side_effect = EdvError("Network failure")
        with self.assertRaises(EdvError):
            await self.store.delete("urn:uuid:1")
