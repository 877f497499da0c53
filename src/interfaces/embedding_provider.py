"""Abstract base class for text-embedding service providers.

Embedding models used here are asymmetric: stored passages and search
queries are embedded in different modes, so the contract exposes one
method per mode instead of a single ``embed``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementation: VoyageEmbeddingProvider (src/providers/embedding/)
class IEmbeddingProvider(ABC):
    """Contract for text-embedding services used by ingestion and search.

    Vectors produced by :meth:`embed_documents` are written to an
    :class:`~src.interfaces.vector_store_provider.IVectorStoreProvider`;
    vectors produced by :meth:`embed_query` are used to query it.
    """

    @abstractmethod
    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        """Embed passages for storage (document mode).

        Parameters
        ----------
        texts:
            Passages to embed.  Implementations split inputs larger than
            the API's per-request limit into several calls.

        Returns
        -------
        list[list[float]]
            One vector per input, in input order.  An empty input returns
            an empty list without calling the API.

        Raises
        ------
        src.utils.errors.EmbeddingError
            If the embedding API call fails.
        src.utils.errors.ConnectionTimeoutError
            If the embedding API cannot be reached in time.
        """

    @abstractmethod
    async def embed_query(self, text: str) -> list[float]:
        """Embed a single search query (query mode)."""

    @abstractmethod
    def get_dimension(self) -> int:
        """Return the length of every vector this provider produces.

        Must match the dimension the vector index was created with.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"voyage-law-2"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured (credentials present)."""
