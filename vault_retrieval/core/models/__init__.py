"""Domain models."""
from .document import (
    Chunk,
    ChunkSource,
    RetrievalRequest,
    ScoredChunk,
    TimeRange,
    dedupe_by_key,
)
from .index import (
    FieldFilter,
    FilterGroup,
    IndexHit,
    IndexQuery,
    RerankHit,
    SearchWeights,
)

__all__ = [
    "Chunk",
    "ChunkSource",
    "ScoredChunk",
    "TimeRange",
    "RetrievalRequest",
    "dedupe_by_key",
    "FieldFilter",
    "FilterGroup",
    "IndexHit",
    "IndexQuery",
    "RerankHit",
    "SearchWeights",
]
