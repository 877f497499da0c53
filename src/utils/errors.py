"""Custom exception hierarchy for lexsearch.

All application exceptions inherit from :class:`LexSearchError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "pinecone", "voyage") caused the failure.

    LexSearchError  (base -- catch-all for any lexsearch error)
    +-- ConfigurationError       (startup / missing config)
    +-- ProviderUnavailableError (external service down / unreachable)
    |   +-- ConnectionTimeoutError (connect timeout to an external service)
    +-- RateLimitError           (provider rate-limit exceeded)
    +-- EmbeddingError           (embedding API failure)
    +-- VectorStoreError         (vector index failure)
    +-- IngestionError           (document loading / bootstrap failure)

Callers handle errors at the level they care about: the ingest route
maps :class:`ConnectionTimeoutError` to a user-facing 500, while the
bootstrap batch loop swallows anything per batch and keeps going.
"""


class LexSearchError(Exception):
    """Base exception for all lexsearch errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  ``__str__`` prefixes the provider name in brackets, e.g.
    ``[pinecone] Index not found``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------

class ConfigurationError(LexSearchError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# External service / provider errors
# ---------------------------------------------------------------------------

class ProviderUnavailableError(LexSearchError):
    """Raised when an external service or provider is unreachable."""

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConnectionTimeoutError(ProviderUnavailableError):
    """Raised when connecting to an external service times out.

    The ``/api/ingest`` route turns this into a 500 with a retry hint;
    every other caller can treat it as a plain
    :class:`ProviderUnavailableError`.
    """

    def __init__(
        self,
        message: str = "Connection timed out",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class RateLimitError(LexSearchError):
    """Raised when an API rate limit is exceeded."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Retrieval pipeline errors
# ---------------------------------------------------------------------------

class EmbeddingError(LexSearchError):
    """Raised when an embedding API call fails or returns malformed data."""

    def __init__(
        self,
        message: str = "Embedding request failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class VectorStoreError(LexSearchError):
    """Raised when a vector index operation fails."""

    def __init__(
        self,
        message: str = "Vector store operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class IngestionError(LexSearchError):
    """Raised when loading or bootstrapping documents fails."""

    def __init__(
        self,
        message: str = "Document ingestion failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
