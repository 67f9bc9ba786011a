"""Search index query models."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal, Optional

from .document import Chunk

SearchMode = Literal["vector", "hybrid"]


@dataclass(frozen=True)
class FieldFilter:
    """Range or equality condition on a single chunk field.

    Range bounds are inclusive. `one_of` matches when the field equals any
    of the listed values.
    """
    field: str
    gte: Optional[datetime] = None
    lte: Optional[datetime] = None
    one_of: Optional[tuple[str, ...]] = None


@dataclass(frozen=True)
class FilterGroup:
    """AND-combined filters."""
    all_of: tuple[FieldFilter, ...]


@dataclass(frozen=True)
class SearchWeights:
    text: float
    vector: float


@dataclass(frozen=True)
class IndexQuery:
    """Query parameters for the search index.

    `filters` is a list of groups combined with OR. Indexes without OR
    support accept at most one group.
    """
    mode: SearchMode
    limit: int
    vector: Optional[list[float]] = field(default=None, repr=False)
    term: Optional[str] = None
    weights: Optional[SearchWeights] = None
    similarity_threshold: Optional[float] = None
    filters: tuple[FilterGroup, ...] = ()


@dataclass
class IndexHit:
    """Index search result."""
    chunk: Chunk
    score: float


@dataclass(frozen=True)
class RerankHit:
    """Reranker result referencing a position in the submitted contents."""
    index: int
    relevance_score: float
