"""Retrieval error taxonomy."""


class RetrievalError(Exception):
    """Base class for errors that abort a retrieve call."""


class EmbeddingError(RetrievalError):
    """Query embedding could not be generated."""


class SearchIndexError(RetrievalError):
    """Search index query failed."""


class ChunkStoreError(RetrievalError):
    """Chunks of a referenced document could not be fetched."""


class RerankError(RetrievalError):
    """Reranker was triggered and failed."""


class RetrievalCancelled(RetrievalError):
    """Caller signalled cancellation before the request completed."""
