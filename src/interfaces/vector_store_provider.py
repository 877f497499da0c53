"""Abstract base class for vector-index service providers.

Defines the contract for creating an index, checking whether it already
holds data, writing embedded chunks, and running similarity queries.  The
bootstrap and search services depend only on this interface, so the
managed index behind it can be swapped or faked in tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.document import ScoredRecord, VectorRecord


# Concrete implementation: PineconeProvider (src/providers/vector_store/)
class IVectorStoreProvider(ABC):
    """Contract for vector-index services.

    All network-bound methods are async so the event loop keeps serving
    requests while a bootstrap run is writing.
    """

    @abstractmethod
    async def create_index_if_absent(self, index_name: str, dimension: int) -> bool:
        """Create *index_name* unless it already exists, waiting until ready.

        Returns
        -------
        bool
            ``True`` if the index was created by this call, ``False`` if it
            already existed.  A creation conflict (another process created it
            first) counts as already existing.

        Raises
        ------
        src.utils.errors.VectorStoreError
            If the index cannot be listed or created.
        """

    @abstractmethod
    async def get_record_count(self, index_name: str) -> int:
        """Return the total number of records stored in *index_name*.

        Raises
        ------
        src.utils.errors.VectorStoreError
            If the stats request fails.
        """

    @abstractmethod
    async def has_vectors(self, index_name: str) -> bool:
        """Return ``True`` iff *index_name* reports at least one record.

        Never raises: any failure is logged and reported as ``False`` so a
        bootstrap run proceeds to write.
        """

    @abstractmethod
    async def upsert_batched(
        self,
        index_name: str,
        records: list[VectorRecord],
        batch_size: int,
        namespace: str = "",
    ) -> int:
        """Write *records* in sequential sub-batches of *batch_size*.

        Returns
        -------
        int
            The number of records submitted.

        Raises
        ------
        src.utils.errors.VectorStoreError
            If any sub-batch is rejected.  Earlier sub-batches stay written.
        """

    @abstractmethod
    async def query(
        self,
        index_name: str,
        vector: list[float],
        top_k: int,
        namespace: str = "",
        include_values: bool = False,
    ) -> list[ScoredRecord]:
        """Return up to *top_k* nearest records, most similar first.

        Set *include_values* when the caller needs the stored vectors, e.g.
        for maximal-marginal-relevance re-ranking.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"pinecone"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured (credentials present)."""
