"""Pinecone vector index provider adapter.

Wraps the synchronous ``pinecone`` SDK to implement
:class:`IVectorStoreProvider`.  Every SDK call runs in a worker thread via
``asyncio.to_thread`` so a long bootstrap run never blocks the event loop.

Indexes are serverless, cosine-metric, and created on demand with the
embedding model's dimension.
"""

from __future__ import annotations

import asyncio
from typing import Any

import urllib3.exceptions
from pinecone import Pinecone, ServerlessSpec

from src.config.settings import Settings
from src.interfaces.vector_store_provider import IVectorStoreProvider
from src.models.document import ScoredRecord, VectorRecord
from src.utils.errors import ConnectionTimeoutError, LexSearchError, VectorStoreError
from src.utils.logging import get_logger

logger = get_logger(__name__)

_HTTP_CONFLICT = 409


def _http_status(exc: BaseException) -> int | None:
    """Return the HTTP status carried by a Pinecone SDK exception, if any.

    Older SDK releases expose it as ``status``, newer ones as ``status_code``.
    """
    for attr in ("status", "status_code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return value
    return None


def _is_connect_timeout(exc: BaseException) -> bool:
    """Return ``True`` if *exc*, or anything in its cause chain, is a connect timeout."""
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, (urllib3.exceptions.ConnectTimeoutError, TimeoutError)):
            return True
        if isinstance(current, urllib3.exceptions.MaxRetryError) and isinstance(
            current.reason, urllib3.exceptions.ConnectTimeoutError
        ):
            return True
        current = current.__cause__ or current.__context__
    return False


class PineconeProvider(IVectorStoreProvider):
    """Vector index provider backed by Pinecone serverless indexes.

    The Pinecone client and per-index handles are created lazily, so the
    application starts without credentials and reports the provider as
    unavailable instead.
    """

    def __init__(
        self,
        settings: Settings,
        metric: str = "cosine",
    ) -> None:
        self._settings = settings
        self._api_key = settings.pinecone_api_key
        self._cloud = settings.pinecone_cloud
        self._region = settings.pinecone_region
        self._metric = metric
        self._client: Pinecone | None = None
        # Names come from PINECONE_INDEX or operator calls to /api/ingest, and
        # each is created in the project before its handle is cached, so the
        # cache is bounded by the project's index quota.
        self._indexes: dict[str, Any] = {}

    def _get_client(self) -> Pinecone:
        """Lazily initialize and return the Pinecone client."""
        if self._client is None:
            self._client = Pinecone(api_key=self._api_key)
        return self._client

    def _get_index(self, index_name: str) -> Any:
        """Return a cached data-plane handle for *index_name*."""
        if index_name not in self._indexes:
            self._indexes[index_name] = self._get_client().Index(index_name)
        return self._indexes[index_name]

    def _translate(self, exc: Exception, action: str, index_name: str) -> LexSearchError:
        if isinstance(exc, LexSearchError):
            return exc
        if _is_connect_timeout(exc):
            return ConnectionTimeoutError(
                message=f"Timed out connecting to Pinecone during {action} on '{index_name}'",
                provider_name=self.get_provider_name(),
            )
        return VectorStoreError(
            message=f"Pinecone {action} failed on '{index_name}': {exc}",
            provider_name=self.get_provider_name(),
        )

    # -- Sync helpers (executed via asyncio.to_thread) -------------------------

    def _create_index_sync(self, index_name: str, dimension: int) -> bool:
        client = self._get_client()
        if index_name in client.list_indexes().names():
            return False
        try:
            # timeout=None blocks until the index reports ready.
            client.create_index(
                name=index_name,
                dimension=dimension,
                metric=self._metric,
                spec=ServerlessSpec(cloud=self._cloud, region=self._region),
                timeout=None,
            )
        except Exception as exc:
            if _http_status(exc) == _HTTP_CONFLICT:
                return False
            raise
        return True

    def _record_count_sync(self, index_name: str) -> int:
        stats = self._get_index(index_name).describe_index_stats()
        return int(getattr(stats, "total_vector_count", 0) or 0)

    def _upsert_sync(self, index_name: str, vectors: list[dict[str, Any]], namespace: str) -> None:
        kwargs: dict[str, Any] = {"vectors": vectors}
        if namespace:
            kwargs["namespace"] = namespace
        self._get_index(index_name).upsert(**kwargs)

    def _query_sync(
        self,
        index_name: str,
        vector: list[float],
        top_k: int,
        namespace: str,
        include_values: bool,
    ) -> list[ScoredRecord]:
        kwargs: dict[str, Any] = {
            "vector": vector,
            "top_k": top_k,
            "include_values": include_values,
            "include_metadata": True,
        }
        if namespace:
            kwargs["namespace"] = namespace
        response = self._get_index(index_name).query(**kwargs)
        return [
            ScoredRecord(
                id=match.id,
                score=float(match.score or 0.0),
                values=list(match.values or []),
                metadata=dict(match.metadata or {}),
            )
            for match in response.matches
        ]

    # ------------------------------------------------------------------
    # IVectorStoreProvider implementation
    # ------------------------------------------------------------------

    async def create_index_if_absent(self, index_name: str, dimension: int) -> bool:
        try:
            created = await asyncio.to_thread(self._create_index_sync, index_name, dimension)
        except Exception as exc:
            raise self._translate(exc, "create_index", index_name) from exc

        logger.info(
            "pinecone_index_ready",
            index=index_name,
            created=created,
            dimension=dimension,
            metric=self._metric,
        )
        return created

    async def get_record_count(self, index_name: str) -> int:
        try:
            return await asyncio.to_thread(self._record_count_sync, index_name)
        except Exception as exc:
            raise self._translate(exc, "describe_index_stats", index_name) from exc

    async def has_vectors(self, index_name: str) -> bool:
        try:
            count = await self.get_record_count(index_name)
        except LexSearchError as exc:
            logger.warning("pinecone_has_vectors_failed", index=index_name, error=str(exc))
            return False
        logger.info("pinecone_record_count", index=index_name, count=count)
        return count > 0

    async def upsert_batched(
        self,
        index_name: str,
        records: list[VectorRecord],
        batch_size: int,
        namespace: str = "",
    ) -> int:
        """Upsert *records* in order, one sub-batch per request."""
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        if not records:
            return 0

        total = 0
        for start in range(0, len(records), batch_size):
            batch = [r.to_upsert() for r in records[start : start + batch_size]]
            try:
                await asyncio.to_thread(self._upsert_sync, index_name, batch, namespace)
            except Exception as exc:
                raise self._translate(exc, "upsert", index_name) from exc
            total += len(batch)

        logger.info(
            "pinecone_upsert",
            index=index_name,
            namespace=namespace or "(default)",
            count=total,
            batches=(len(records) + batch_size - 1) // batch_size,
        )
        return total

    async def query(
        self,
        index_name: str,
        vector: list[float],
        top_k: int,
        namespace: str = "",
        include_values: bool = False,
    ) -> list[ScoredRecord]:
        try:
            return await asyncio.to_thread(
                self._query_sync, index_name, vector, top_k, namespace, include_values
            )
        except Exception as exc:
            raise self._translate(exc, "query", index_name) from exc

    def get_provider_name(self) -> str:
        return "pinecone"

    def is_available(self) -> bool:
        """Return ``True`` if an API key is configured."""
        return bool(self._api_key)
