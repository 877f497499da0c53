"""Unit tests for PineconeProvider (SDK is mocked)."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
import urllib3.exceptions

from src.models.document import VectorRecord
from src.providers.vector_store.pinecone_provider import (
    PineconeProvider,
    _http_status,
    _is_connect_timeout,
)
from src.utils.errors import ConnectionTimeoutError, VectorStoreError
from tests.conftest import make_settings

_PINECONE_PATH = "src.providers.vector_store.pinecone_provider.Pinecone"


class _StatusCodeError(Exception):
    """Shape of current SDK API errors: the HTTP status lives on ``status_code``."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"[{status_code}] {message}")
        self.status_code = status_code


class _LegacyStatusError(Exception):
    """Shape of older SDK API errors: the HTTP status lives on ``status``."""

    def __init__(self, status: int, reason: str) -> None:
        super().__init__(f"({status}) {reason}")
        self.status = status


def _connect_timeout() -> urllib3.exceptions.MaxRetryError:
    return urllib3.exceptions.MaxRetryError(
        None,
        "https://api.pinecone.io/indexes",
        urllib3.exceptions.ConnectTimeoutError("connect timed out"),
    )


def _records(count: int) -> list[VectorRecord]:
    return [
        VectorRecord(id=f"r{i}", values=[0.1, 0.2], metadata={"id": f"r{i}", "pageContent": "t"})
        for i in range(count)
    ]


@pytest.fixture
def client() -> MagicMock:
    mock_client = MagicMock()
    mock_client.list_indexes.return_value.names.return_value = []
    return mock_client


@pytest.fixture
def provider(client: MagicMock):
    with patch(_PINECONE_PATH, return_value=client):
        yield PineconeProvider(make_settings())


class TestIsConnectTimeout:
    def test_max_retry_with_connect_timeout(self) -> None:
        assert _is_connect_timeout(_connect_timeout()) is True

    def test_chained_cause(self) -> None:
        try:
            try:
                raise urllib3.exceptions.ConnectTimeoutError("slow")
            except urllib3.exceptions.ConnectTimeoutError as inner:
                raise RuntimeError("wrapped") from inner
        except RuntimeError as outer:
            assert _is_connect_timeout(outer) is True

    def test_other_errors(self) -> None:
        assert _is_connect_timeout(RuntimeError("boom")) is False
        read_retry = urllib3.exceptions.MaxRetryError(None, "u", urllib3.exceptions.ProtocolError("x"))
        assert _is_connect_timeout(read_retry) is False


class TestHttpStatus:
    def test_reads_status_code(self) -> None:
        assert _http_status(_StatusCodeError(409, "already exists")) == 409

    def test_reads_legacy_status(self) -> None:
        assert _http_status(_LegacyStatusError(404, "Not Found")) == 404

    def test_plain_exception_has_none(self) -> None:
        assert _http_status(RuntimeError("boom")) is None


class TestCreateIndex:
    @pytest.mark.asyncio
    async def test_creates_missing_index(self, provider: PineconeProvider, client: MagicMock) -> None:
        created = await provider.create_index_if_absent("contracts", 1024)

        assert created is True
        client.create_index.assert_called_once()
        kwargs = client.create_index.call_args.kwargs
        assert kwargs["name"] == "contracts"
        assert kwargs["dimension"] == 1024
        assert kwargs["metric"] == "cosine"
        assert kwargs["spec"].cloud == "aws"
        assert kwargs["spec"].region == "us-east-1"

    @pytest.mark.asyncio
    async def test_existing_index_left_alone(self, provider: PineconeProvider, client: MagicMock) -> None:
        client.list_indexes.return_value.names.return_value = ["contracts"]

        assert await provider.create_index_if_absent("contracts", 1024) is False
        client.create_index.assert_not_called()

    @pytest.mark.asyncio
    async def test_conflict_treated_as_existing(self, provider: PineconeProvider, client: MagicMock) -> None:
        client.create_index.side_effect = _StatusCodeError(409, "already exists")

        assert await provider.create_index_if_absent("contracts", 1024) is False

    @pytest.mark.asyncio
    async def test_legacy_conflict_treated_as_existing(
        self, provider: PineconeProvider, client: MagicMock
    ) -> None:
        client.create_index.side_effect = _LegacyStatusError(409, "Conflict")

        assert await provider.create_index_if_absent("contracts", 1024) is False

    @pytest.mark.asyncio
    async def test_connect_timeout_mapped(self, provider: PineconeProvider, client: MagicMock) -> None:
        client.list_indexes.side_effect = _connect_timeout()

        with pytest.raises(ConnectionTimeoutError):
            await provider.create_index_if_absent("contracts", 1024)

    @pytest.mark.asyncio
    async def test_other_failures_mapped(self, provider: PineconeProvider, client: MagicMock) -> None:
        client.create_index.side_effect = _StatusCodeError(403, "forbidden")

        with pytest.raises(VectorStoreError):
            await provider.create_index_if_absent("contracts", 1024)


class TestRecordCount:
    @pytest.mark.asyncio
    async def test_has_vectors_true(self, provider: PineconeProvider, client: MagicMock) -> None:
        client.Index.return_value.describe_index_stats.return_value = SimpleNamespace(
            total_vector_count=12
        )
        assert await provider.get_record_count("contracts") == 12
        assert await provider.has_vectors("contracts") is True

    @pytest.mark.asyncio
    async def test_has_vectors_false_when_empty(self, provider: PineconeProvider, client: MagicMock) -> None:
        client.Index.return_value.describe_index_stats.return_value = SimpleNamespace(
            total_vector_count=0
        )
        assert await provider.has_vectors("contracts") is False

    @pytest.mark.asyncio
    async def test_has_vectors_false_on_error(self, provider: PineconeProvider, client: MagicMock) -> None:
        client.Index.return_value.describe_index_stats.side_effect = RuntimeError("down")
        assert await provider.has_vectors("contracts") is False

    @pytest.mark.asyncio
    async def test_get_record_count_raises_on_error(
        self, provider: PineconeProvider, client: MagicMock
    ) -> None:
        client.Index.return_value.describe_index_stats.side_effect = RuntimeError("down")
        with pytest.raises(VectorStoreError):
            await provider.get_record_count("contracts")


class TestUpsert:
    @pytest.mark.asyncio
    async def test_sub_batches_in_order(self, provider: PineconeProvider, client: MagicMock) -> None:
        index = client.Index.return_value

        total = await provider.upsert_batched("contracts", _records(5), batch_size=2)

        assert total == 5
        assert index.upsert.call_count == 3
        sizes = [len(call.kwargs["vectors"]) for call in index.upsert.call_args_list]
        assert sizes == [2, 2, 1]
        first = index.upsert.call_args_list[0].kwargs["vectors"]
        assert [v["id"] for v in first] == ["r0", "r1"]
        assert "namespace" not in index.upsert.call_args_list[0].kwargs

    @pytest.mark.asyncio
    async def test_namespace_passed_when_set(self, provider: PineconeProvider, client: MagicMock) -> None:
        await provider.upsert_batched("contracts", _records(1), batch_size=2, namespace="legal")
        assert client.Index.return_value.upsert.call_args.kwargs["namespace"] == "legal"

    @pytest.mark.asyncio
    async def test_empty_records_no_calls(self, provider: PineconeProvider, client: MagicMock) -> None:
        assert await provider.upsert_batched("contracts", [], batch_size=2) == 0
        client.Index.return_value.upsert.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_batch_size(self, provider: PineconeProvider) -> None:
        with pytest.raises(ValueError):
            await provider.upsert_batched("contracts", _records(1), batch_size=0)

    @pytest.mark.asyncio
    async def test_upsert_failure_mapped(self, provider: PineconeProvider, client: MagicMock) -> None:
        client.Index.return_value.upsert.side_effect = RuntimeError("bad request")
        with pytest.raises(VectorStoreError):
            await provider.upsert_batched("contracts", _records(2), batch_size=2)


class TestQuery:
    @pytest.mark.asyncio
    async def test_matches_mapped_to_scored_records(
        self, provider: PineconeProvider, client: MagicMock
    ) -> None:
        client.Index.return_value.query.return_value = SimpleNamespace(
            matches=[
                SimpleNamespace(id="a", score=0.91, values=[0.1, 0.2], metadata={"pageContent": "A"}),
                SimpleNamespace(id="b", score=0.5, values=None, metadata=None),
            ]
        )

        results = await provider.query(
            "contracts", [0.1, 0.2], top_k=40, namespace="legal", include_values=True
        )

        assert [r.id for r in results] == ["a", "b"]
        assert results[0].values == [0.1, 0.2]
        assert results[0].metadata == {"pageContent": "A"}
        assert results[1].values == []
        assert results[1].metadata == {}
        kwargs = client.Index.return_value.query.call_args.kwargs
        assert kwargs["top_k"] == 40
        assert kwargs["namespace"] == "legal"
        assert kwargs["include_values"] is True
        assert kwargs["include_metadata"] is True


class TestAvailability:
    def test_available_with_key(self) -> None:
        assert PineconeProvider(make_settings()).is_available() is True

    def test_unavailable_without_key(self) -> None:
        assert PineconeProvider(make_settings(pinecone_api_key="")).is_available() is False

    def test_provider_name(self) -> None:
        assert PineconeProvider(make_settings()).get_provider_name() == "pinecone"
