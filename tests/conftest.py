"""Shared pytest fixtures for the lexsearch test suite."""

from __future__ import annotations

import hashlib
import math
from pathlib import Path
from typing import Any

import fitz
import pytest

from src.config.settings import Settings
from src.interfaces.embedding_provider import IEmbeddingProvider
from src.interfaces.vector_store_provider import IVectorStoreProvider
from src.models.document import ScoredRecord, VectorRecord

_EMBEDDING_DIM = 1024


# ---------------------------------------------------------------------------
# Settings / paths
# ---------------------------------------------------------------------------


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


def make_settings(**overrides: Any) -> Settings:
    """Build Settings from explicit values only, ignoring any local .env file."""
    defaults: dict[str, Any] = {
        "pinecone_api_key": "pc-test",
        "pinecone_index": "test-index",
        "pinecone_namespace": "",
        "voyage_api_key": "vo-test",
        "voyage_model": "voyage-law-2",
        "production_url": "",
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


@pytest.fixture
def test_settings() -> Settings:
    return make_settings()


# ---------------------------------------------------------------------------
# PDF fixtures
# ---------------------------------------------------------------------------


def write_pdf(path: Path, pages: list[str], fontsize: float = 9) -> Path:
    """Write a PDF with one page per entry of *pages*.

    Text is placed line by line, so callers should keep lines short enough
    to fit the page width.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    pdf = fitz.open()
    try:
        for text in pages:
            page = pdf.new_page()
            if text:
                page.insert_text((50, 60), text, fontsize=fontsize)
        pdf.save(str(path))
    finally:
        pdf.close()
    return path


def legal_page_text(page_number: int, lines: int = 30) -> str:
    """Return deterministic contract-like text for one page (~70 chars per line)."""
    return "\n".join(
        f"Section {page_number}.{line}: The parties agree that clause {line} governs payment."
        for line in range(1, lines + 1)
    )


# ---------------------------------------------------------------------------
# In-memory providers
# ---------------------------------------------------------------------------


def _hash_to_vector(text: str, dim: int = _EMBEDDING_DIM) -> list[float]:
    """Generate a deterministic unit vector by hashing *text*.

    Same text always produces the same vector.
    """
    raw = hashlib.sha256(text.encode("utf-8")).digest()
    while len(raw) < dim:
        raw += hashlib.sha256(raw).digest()
    values = [(b - 127.5) / 127.5 for b in raw[:dim]]
    magnitude = max(math.sqrt(sum(v * v for v in values)), 1e-10)
    return [v / magnitude for v in values]


class MockEmbeddingProvider(IEmbeddingProvider):
    """Deterministic embedding provider that records every call."""

    def __init__(self, dimension: int = _EMBEDDING_DIM) -> None:
        self._dimension = dimension
        self.document_calls: list[list[str]] = []
        self.query_calls: list[str] = []

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        self.document_calls.append(list(texts))
        return [_hash_to_vector(t, self._dimension) for t in texts]

    async def embed_query(self, text: str) -> list[float]:
        self.query_calls.append(text)
        return _hash_to_vector(text, self._dimension)

    def get_dimension(self) -> int:
        return self._dimension

    def get_provider_name(self) -> str:
        return "mock-embedding"

    def is_available(self) -> bool:
        return True


class MockVectorStore(IVectorStoreProvider):
    """In-memory vector index keyed by index name, then record id."""

    def __init__(self) -> None:
        self.indexes: dict[str, dict[str, VectorRecord]] = {}
        self.created: list[str] = []
        self.upsert_calls: list[tuple[str, int, str]] = []

    async def create_index_if_absent(self, index_name: str, dimension: int) -> bool:
        if index_name in self.indexes:
            return False
        self.indexes[index_name] = {}
        self.created.append(index_name)
        return True

    async def get_record_count(self, index_name: str) -> int:
        return len(self.indexes.get(index_name, {}))

    async def has_vectors(self, index_name: str) -> bool:
        return await self.get_record_count(index_name) > 0

    async def upsert_batched(
        self,
        index_name: str,
        records: list[VectorRecord],
        batch_size: int,
        namespace: str = "",
    ) -> int:
        store = self.indexes.setdefault(index_name, {})
        for start in range(0, len(records), batch_size):
            batch = records[start : start + batch_size]
            self.upsert_calls.append((index_name, len(batch), namespace))
            for record in batch:
                store[record.id] = record
        return len(records)

    async def query(
        self,
        index_name: str,
        vector: list[float],
        top_k: int,
        namespace: str = "",
        include_values: bool = False,
    ) -> list[ScoredRecord]:
        scored = [
            ScoredRecord(
                id=record.id,
                score=sum(a * b for a, b in zip(vector, record.values)),
                values=list(record.values) if include_values else [],
                metadata=dict(record.metadata),
            )
            for record in self.indexes.get(index_name, {}).values()
        ]
        scored.sort(key=lambda r: r.score, reverse=True)
        return scored[:top_k]

    def all_records(self, index_name: str) -> list[VectorRecord]:
        return list(self.indexes.get(index_name, {}).values())

    def get_provider_name(self) -> str:
        return "mock-vector-store"

    def is_available(self) -> bool:
        return True


@pytest.fixture
def mock_embedding_provider() -> MockEmbeddingProvider:
    return MockEmbeddingProvider()


@pytest.fixture
def mock_vector_store() -> MockVectorStore:
    return MockVectorStore()
