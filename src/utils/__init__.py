"""Utility modules for lexsearch.

- **errors** -- Exception hierarchy rooted at LexSearchError; each layer
  raises its own subclass so callers can handle failures granularly.
- **logging** -- structlog setup with console output in development and
  structured JSON in production.
- **vector_math** -- Cosine similarity and maximal-marginal-relevance
  selection used by the search service.
"""

from src.utils.errors import (
    ConfigurationError,
    ConnectionTimeoutError,
    EmbeddingError,
    IngestionError,
    LexSearchError,
    ProviderUnavailableError,
    RateLimitError,
    VectorStoreError,
)
from src.utils.logging import configure_logging, get_logger
from src.utils.vector_math import cosine_similarity_matrix, maximal_marginal_relevance

__all__ = [
    "ConfigurationError",
    "ConnectionTimeoutError",
    "EmbeddingError",
    "IngestionError",
    "LexSearchError",
    "ProviderUnavailableError",
    "RateLimitError",
    "VectorStoreError",
    "configure_logging",
    "cosine_similarity_matrix",
    "get_logger",
    "maximal_marginal_relevance",
]
