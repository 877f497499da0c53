"""Semantic search over the bootstrapped index.

Query flow: **embed (query mode) -> fetch candidates -> MMR re-rank ->
de-duplicate**.

Candidates are fetched with their stored vectors so maximal marginal
relevance can trade query similarity against redundancy among the
results.  Because bootstrap runs may write overlapping chunks more than
once, results are finally de-duplicated on the chunk id kept in metadata.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from src.models.document import ScoredRecord, SearchHit
from src.utils.logging import get_logger
from src.utils.vector_math import maximal_marginal_relevance

if TYPE_CHECKING:
    from src.interfaces.embedding_provider import IEmbeddingProvider
    from src.interfaces.vector_store_provider import IVectorStoreProvider

logger = get_logger(__name__)


def deduplicate_results(records: list[ScoredRecord]) -> list[ScoredRecord]:
    """Drop records whose ``metadata["id"]`` was already seen, keeping order.

    Records without a metadata id fall back to the record's own id.
    """
    seen: set[str] = set()
    unique: list[ScoredRecord] = []
    for record in records:
        key = str(record.metadata.get("id") or record.id)
        if key in seen:
            continue
        seen.add(key)
        unique.append(record)
    return unique


class SearchService:
    """Runs MMR similarity search against one index and namespace.

    Parameters
    ----------
    embedding_provider:
        Embeds the query text (query mode).
    vector_store:
        Index to search.
    index_name:
        Name of the index to query.
    namespace:
        Namespace to query; must match the one bootstrap writes to.
    top_k:
        Number of results returned after MMR selection (default 20).
    fetch_k:
        Size of the candidate pool fetched for MMR (default 40).
    mmr_lambda:
        Relevance/diversity trade-off, 1.0 = pure relevance (default 0.5).
    """

    def __init__(
        self,
        embedding_provider: IEmbeddingProvider,
        vector_store: IVectorStoreProvider,
        index_name: str,
        namespace: str = "",
        top_k: int = 20,
        fetch_k: int = 40,
        mmr_lambda: float = 0.5,
    ) -> None:
        if top_k < 1:
            raise ValueError(f"top_k must be >= 1, got {top_k}")
        if not 0.0 <= mmr_lambda <= 1.0:
            raise ValueError(f"mmr_lambda must be in [0, 1], got {mmr_lambda}")
        self._embedding_provider = embedding_provider
        self._vector_store = vector_store
        self._index_name = index_name
        self._namespace = namespace
        self._top_k = top_k
        self._fetch_k = max(fetch_k, top_k)
        self._mmr_lambda = mmr_lambda

    async def search(self, query: str) -> list[SearchHit]:
        """Return up to ``top_k`` diverse, de-duplicated hits for *query*.

        Raises
        ------
        ValueError
            If *query* is empty or whitespace-only.  Checked before any
            external call is made.
        """
        if not isinstance(query, str) or not query.strip():
            raise ValueError("Query is required")

        query_vector = await self._embedding_provider.embed_query(query)
        candidates = await self._vector_store.query(
            self._index_name,
            query_vector,
            top_k=self._fetch_k,
            namespace=self._namespace,
            include_values=True,
        )

        selected = self._select_mmr(query_vector, candidates)
        unique = deduplicate_results(selected)

        logger.info(
            "search_complete",
            index=self._index_name,
            candidates=len(candidates),
            selected=len(selected),
            returned=len(unique),
        )
        return [self._to_hit(record) for record in unique]

    def _select_mmr(
        self,
        query_vector: list[float],
        candidates: list[ScoredRecord],
    ) -> list[ScoredRecord]:
        # Without stored vectors MMR cannot run; keep the index ranking.
        if not candidates or any(not c.values for c in candidates):
            return candidates[: self._top_k]
        order = maximal_marginal_relevance(
            query_vector,
            [c.values for c in candidates],
            k=self._top_k,
            lambda_mult=self._mmr_lambda,
        )
        return [candidates[i] for i in order]

    @staticmethod
    def _to_hit(record: ScoredRecord) -> SearchHit:
        return SearchHit(
            id=str(record.metadata.get("id") or record.id),
            page_content=str(record.metadata.get("pageContent", "")),
            metadata=record.metadata,
            score=record.score,
        )
