"""In-memory fakes for the external collaborators of the retrieval engine."""

import asyncio
from datetime import datetime
from typing import Optional

import pytest

from vault_retrieval.core.models.document import Chunk
from vault_retrieval.core.models.index import FieldFilter, IndexHit, IndexQuery, RerankHit


def make_chunk(
    path: str,
    content: str,
    title: Optional[str] = None,
    index: int = 0,
    created_at: Optional[datetime] = None,
    modified_at: Optional[datetime] = None,
    tags: tuple[str, ...] = (),
) -> Chunk:
    return Chunk(
        content=content,
        path=path,
        title=title if title is not None else path.rsplit("/", 1)[-1].removesuffix(".md"),
        embedding=[0.1, 0.2, 0.3],
        created_at=created_at,
        modified_at=modified_at,
        tags=frozenset(tags),
        char_count=len(content),
        embedding_model="test-model",
        chunk_index=index,
    )


def _matches(chunk: Chunk, f: FieldFilter) -> bool:
    value = getattr(chunk, f.field)
    if f.one_of is not None and value not in f.one_of:
        return False
    if f.gte is not None and (value is None or value < f.gte):
        return False
    if f.lte is not None and (value is None or value > f.lte):
        return False
    return True


class FakeEmbedder:
    def __init__(self, vector=(0.1, 0.2, 0.3), error: Optional[Exception] = None, delay: float = 0):
        self.vector = list(vector)
        self.error = error
        self.delay = delay
        self.calls: list[str] = []
        self.cancelled = False

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.delay:
            try:
                await asyncio.sleep(self.delay)
            except asyncio.CancelledError:
                self.cancelled = True
                raise
        if self.error:
            raise self.error
        return self.vector


class FakeSearchIndex:
    def __init__(
        self,
        hits: Optional[list[IndexHit]] = None,
        supports_or_filters: bool = False,
        error: Optional[Exception] = None,
    ):
        self.hits = hits or []
        self.supports_or_filters = supports_or_filters
        self.error = error
        self.queries: list[IndexQuery] = []

    async def query(self, params: IndexQuery) -> list[IndexHit]:
        self.queries.append(params)
        if self.error:
            raise self.error
        if len(params.filters) > 1 and not self.supports_or_filters:
            raise AssertionError("OR filters sent to an AND-only index")

        hits = self.hits
        if params.filters:
            hits = [
                h
                for h in hits
                if any(all(_matches(h.chunk, f) for f in g.all_of) for g in params.filters)
            ]
        return hits[: params.limit]


class FakeDocumentLookup:
    def __init__(self, titles: Optional[dict[str, str]] = None, failing: tuple[str, ...] = ()):
        self.titles = titles or {}
        self.failing = set(failing)
        self.calls: list[str] = []

    async def find_by_title(self, title: str) -> Optional[str]:
        self.calls.append(title)
        if title in self.failing:
            raise RuntimeError(f"lookup failed for {title}")
        return self.titles.get(title)


class FakeChunkStore:
    def __init__(self, documents: Optional[dict[str, list[Chunk]]] = None, error: Optional[Exception] = None):
        self.documents = documents or {}
        self.error = error
        self.calls: list[str] = []

    async def get_by_path(self, path: str) -> list[Chunk]:
        self.calls.append(path)
        if self.error:
            raise self.error
        return list(self.documents.get(path, []))


class FakeLLM:
    def __init__(self, response="A hypothetical passage.", error: Optional[Exception] = None, delay: float = 0):
        self.response = response
        self.error = error
        self.delay = delay
        self.prompts: list[str] = []

    async def generate(self, prompt: str):
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.response


class FakeReranker:
    def __init__(self, order: Optional[list[tuple[int, float]]] = None, error: Optional[Exception] = None):
        self.order = order
        self.error = error
        self.calls: list[tuple[str, list[str]]] = []

    async def rerank(self, query: str, contents: list[str]) -> list[RerankHit]:
        self.calls.append((query, contents))
        if self.error:
            raise self.error
        if self.order is None:
            return [RerankHit(index=i, relevance_score=1.0 - i * 0.1) for i in range(len(contents))]
        return [RerankHit(index=i, relevance_score=s) for i, s in self.order]


@pytest.fixture
def alpha_chunks() -> list[Chunk]:
    return [
        make_chunk("projects/Project Alpha.md", "Alpha kickoff notes", index=0),
        make_chunk("projects/Project Alpha.md", "Alpha budget is 10k", index=1),
    ]


@pytest.fixture
def daily_chunks() -> dict[str, list[Chunk]]:
    return {
        f"daily/2024-01-0{d}.md": [
            make_chunk(
                f"daily/2024-01-0{d}.md",
                f"Daily log {d}",
                created_at=datetime(2024, 1, d, 9),
                modified_at=datetime(2024, 1, d, 18),
            )
        ]
        for d in (1, 2, 3)
    }
