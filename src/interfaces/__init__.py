"""Public interface definitions for the external services lexsearch uses.

Every external API is accessed through the abstract base classes defined
here.  Concrete adapters live in ``src/providers/`` and are wired up in
``src/main.py``; tests inject in-memory fakes instead.

    Interface               ->  Concrete implementation (in src/providers/)
    ---------------------------------------------------------------------
    IEmbeddingProvider      ->  VoyageEmbeddingProvider
    IVectorStoreProvider    ->  PineconeProvider
"""

from src.interfaces.embedding_provider import IEmbeddingProvider
from src.interfaces.vector_store_provider import IVectorStoreProvider

__all__ = [
    "IEmbeddingProvider",
    "IVectorStoreProvider",
]
