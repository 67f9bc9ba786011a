"""Protocol interfaces for dependency injection."""
from .embedder import EmbedderProtocol
from .vector_store import (
    ChunkStoreProtocol,
    DocumentLookupProtocol,
    SearchIndexProtocol,
)
from .reranker import RerankerProtocol
from .llm import LLMProtocol

__all__ = [
    "EmbedderProtocol",
    "SearchIndexProtocol",
    "DocumentLookupProtocol",
    "ChunkStoreProtocol",
    "RerankerProtocol",
    "LLMProtocol",
]
