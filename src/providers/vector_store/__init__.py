"""Vector store provider implementations.

Pinecone is the only backend.  To use another managed index, implement
IVectorStoreProvider and register it in main.py.
"""

from src.providers.vector_store.pinecone_provider import PineconeProvider

__all__ = ["PineconeProvider"]
