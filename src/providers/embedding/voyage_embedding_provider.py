"""Voyage AI embedding provider adapter.

Wraps the ``voyageai`` async client to implement :class:`IEmbeddingProvider`.
``voyage-law-2`` is tuned for legal text and is asymmetric: passages are
embedded with ``input_type="document"`` and queries with
``input_type="query"``.
"""

from __future__ import annotations

import voyageai
import voyageai.error

from src.config.settings import Settings
from src.interfaces.embedding_provider import IEmbeddingProvider
from src.utils.errors import ConnectionTimeoutError, EmbeddingError, RateLimitError
from src.utils.logging import get_logger

logger = get_logger(__name__)

# Per-request input limit of the Voyage embeddings endpoint.
_VOYAGE_BATCH_LIMIT = 128

_MODEL_DIMENSIONS: dict[str, int] = {
    "voyage-law-2": 1024,
    "voyage-3": 1024,
    "voyage-3-large": 1024,
    "voyage-3-lite": 512,
    "voyage-finance-2": 1024,
    "voyage-code-2": 1536,
}


class VoyageEmbeddingProvider(IEmbeddingProvider):
    """Embedding provider backed by the Voyage embeddings API.

    The SDK client is created on first use so the app can start (and report
    itself unhealthy) without a key.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._api_key = settings.voyage_api_key
        self._model = settings.voyage_model or "voyage-law-2"
        self._dimension = _MODEL_DIMENSIONS.get(self._model, 1024)
        self._client: voyageai.AsyncClient | None = None

    def _get_client(self) -> voyageai.AsyncClient:
        """Lazily initialize and return the Voyage async client."""
        if self._client is None:
            self._client = voyageai.AsyncClient(api_key=self._api_key)
        return self._client

    # ------------------------------------------------------------------
    # IEmbeddingProvider implementation
    # ------------------------------------------------------------------

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        """Embed passages for storage, splitting into 128-text requests."""
        return await self._embed(texts, input_type="document")

    async def embed_query(self, text: str) -> list[float]:
        result = await self._embed([text], input_type="query")
        if not result:
            raise EmbeddingError(
                message="Voyage returned no embedding for the query",
                provider_name=self.get_provider_name(),
            )
        return result[0]

    def get_dimension(self) -> int:
        return self._dimension

    def get_provider_name(self) -> str:
        return self._model

    def is_available(self) -> bool:
        """Return ``True`` if an API key is configured."""
        return bool(self._api_key)

    # ------------------------------------------------------------------

    async def _embed(self, texts: list[str], input_type: str) -> list[list[float]]:
        if not texts:
            return []

        client = self._get_client()
        all_embeddings: list[list[float]] = []
        try:
            for start in range(0, len(texts), _VOYAGE_BATCH_LIMIT):
                batch = texts[start : start + _VOYAGE_BATCH_LIMIT]
                response = await client.embed(batch, model=self._model, input_type=input_type)
                all_embeddings.extend(list(vector) for vector in response.embeddings)
                logger.info(
                    "voyage_embedding_batch",
                    model=self._model,
                    input_type=input_type,
                    batch_size=len(batch),
                    tokens=getattr(response, "total_tokens", None),
                )
        except (voyageai.error.Timeout, voyageai.error.APIConnectionError) as exc:
            raise ConnectionTimeoutError(
                message=f"Voyage API unreachable: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except voyageai.error.RateLimitError as exc:
            raise RateLimitError(
                message=f"Voyage rate limit exceeded: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except voyageai.error.VoyageError as exc:
            raise EmbeddingError(
                message=f"Voyage API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        return all_embeddings
