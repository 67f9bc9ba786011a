"""Document domain models."""
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Iterable, Optional


@dataclass(frozen=True)
class Chunk:
    """Indexed passage. Read-only to the retrieval engine."""
    content: str
    path: str
    title: str
    embedding: list[float] = field(default_factory=list, compare=False, repr=False)
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    tags: frozenset[str] = frozenset()
    extension: str = "md"
    char_count: int = 0
    embedding_model: str = ""
    chunk_index: int = 0

    @property
    def key(self) -> tuple[str, str]:
        """Identity of the chunk: two chunks with equal keys are duplicates."""
        return (self.path, self.content)


class ChunkSource(Enum):
    """Why a chunk is among the candidates."""
    EXPLICIT = "explicit"      # [[Title]] referenced in the query
    DAILY_NOTE = "daily_note"  # date-titled note inside the time range
    SEARCH = "search"          # vector / hybrid index hit


@dataclass
class ScoredChunk:
    """Per-request candidate wrapping an indexed chunk."""
    chunk: Chunk
    score: Optional[float] = None
    rerank_score: Optional[float] = None
    include_in_context: bool = False
    source: ChunkSource = ChunkSource.SEARCH

    @property
    def key(self) -> tuple[str, str]:
        return self.chunk.key

    @property
    def pinned(self) -> bool:
        """Pinned chunks bypass the similarity threshold."""
        return self.source is not ChunkSource.SEARCH

    @property
    def effective_score(self) -> Optional[float]:
        """Authoritative score (rerank if available, else hybrid)."""
        return self.rerank_score if self.rerank_score is not None else self.score


def dedupe_by_key(chunks: Iterable[ScoredChunk]) -> list[ScoredChunk]:
    """Drop duplicate chunks, keeping the first occurrence and the order."""
    seen: set[tuple[str, str]] = set()
    unique = []
    for c in chunks:
        if c.key not in seen:
            seen.add(c.key)
            unique.append(c)
    return unique


@dataclass(frozen=True)
class TimeRange:
    """Inclusive calendar date range."""
    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"Time range end {self.end} is before start {self.start}")

    @classmethod
    def from_strings(cls, start: str, end: str) -> "TimeRange":
        return cls(start=date.fromisoformat(start), end=date.fromisoformat(end))

    @property
    def start_datetime(self) -> datetime:
        return datetime.combine(self.start, datetime.min.time())

    @property
    def end_datetime(self) -> datetime:
        return datetime.combine(self.end, datetime.max.time())


@dataclass
class RetrievalRequest:
    """Single retrieve call parameters."""
    raw_query: str
    salient_terms: tuple[str, ...] = ()
    time_range: Optional[TimeRange] = None
    text_weight: float = 0.5
    max_results: int = 10
    min_similarity_score: float = 0.1
    rerank_threshold: Optional[float] = None
    return_all: bool = False
    skip_rewrite: bool = False

    def __post_init__(self) -> None:
        self.salient_terms = tuple(self.salient_terms)
        if not 0.0 <= self.text_weight <= 1.0:
            raise ValueError(f"text_weight must be within [0, 1], got {self.text_weight}")
        if self.max_results < 1:
            raise ValueError(f"max_results must be positive, got {self.max_results}")
