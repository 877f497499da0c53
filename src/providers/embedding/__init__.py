"""Embedding provider implementations.

Embeddings turn text into vectors; chunks are stored in the vector index
with their document-mode vectors and searched with query-mode vectors.
"""

from src.providers.embedding.voyage_embedding_provider import VoyageEmbeddingProvider

__all__ = ["VoyageEmbeddingProvider"]
