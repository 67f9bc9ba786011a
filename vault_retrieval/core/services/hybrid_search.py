"""Hybrid search engine - weighting policy, tag-only detection, time ranges."""

import logging
from typing import Optional, Sequence

from ..errors import EmbeddingError
from ..models.document import ScoredChunk, TimeRange
from ..models.index import IndexQuery, SearchWeights
from ..policies import ExternalCall, call_external
from ..protocols.embedder import EmbedderProtocol
from ..protocols.vector_store import SearchIndexProtocol
from ..strategies.time_range import TimeRangeStrategy, select_time_range_strategy
from .reference_resolver import ExplicitReferenceResolver

logger = logging.getLogger(__name__)

RETURN_ALL_LIMIT = 100


def is_tag_only(salient_terms: Sequence[str], tag_marker: str = "#") -> bool:
    """True iff there are terms and every one of them is a tag."""
    return bool(salient_terms) and all(t.startswith(tag_marker) for t in salient_terms)


def resolve_weights(
    salient_terms: Sequence[str], text_weight: float, tag_marker: str = "#"
) -> SearchWeights:
    """Text/vector weight split. Tag-only queries are purely lexical."""
    if is_tag_only(salient_terms, tag_marker):
        return SearchWeights(text=1.0, vector=0.0)
    return SearchWeights(text=text_weight, vector=1.0 - text_weight)


class HybridSearchEngine:
    """Issues vector / hybrid queries against the search index."""

    def __init__(
        self,
        embedder: EmbedderProtocol,
        index: SearchIndexProtocol,
        resolver: ExplicitReferenceResolver,
        fetch_k: int = 30,
        tag_marker: str = "#",
        max_date_range_days: int = 365,
        time_range_strategy: Optional[TimeRangeStrategy] = None,
    ):
        """Initialize search engine.

        Args:
            embedder: Embedding service.
            index: Search index.
            resolver: Title resolver for date-titled notes.
            fetch_k: Minimum number of candidates to fetch.
            tag_marker: Prefix identifying tag terms.
            max_date_range_days: Cap on expanded daily note titles.
            time_range_strategy: Override strategy selection.
        """
        self._embedder = embedder
        self._index = index
        self._fetch_k = fetch_k
        self._tag_marker = tag_marker
        self._time_range_strategy = time_range_strategy or select_time_range_strategy(
            index, resolver, max_date_range_days
        )

    def candidate_limit(self, max_results: int, return_all: bool = False) -> int:
        """Number of candidates to fetch, leaving the combiner room to filter."""
        if return_all:
            return RETURN_ALL_LIMIT
        return min(max(self._fetch_k, max_results * 2), RETURN_ALL_LIMIT)

    def build_query(
        self,
        vector: list[float],
        salient_terms: Sequence[str],
        text_weight: float,
        limit: int,
    ) -> IndexQuery:
        """Build vector query, or hybrid query when there are salient terms."""
        if not salient_terms:
            return IndexQuery(
                mode="vector",
                limit=limit,
                vector=vector,
                weights=SearchWeights(text=0.0, vector=1.0),
            )

        return IndexQuery(
            mode="hybrid",
            limit=limit,
            vector=vector,
            term=" ".join(salient_terms),
            weights=resolve_weights(salient_terms, text_weight, self._tag_marker),
        )

    async def search(
        self,
        query_text: str,
        salient_terms: Sequence[str] = (),
        text_weight: float = 0.5,
        time_range: Optional[TimeRange] = None,
        max_results: int = 10,
        return_all: bool = False,
    ) -> list[ScoredChunk]:
        """Search the index.

        Args:
            query_text: Query (possibly rewritten) to embed.
            salient_terms: Keywords and tags for the lexical part.
            text_weight: Lexical weight in [0, 1].
            time_range: Restrict to this inclusive date range.
            max_results: Number of results the caller wants.
            return_all: Fetch up to RETURN_ALL_LIMIT candidates.

        Returns:
            Candidates in index order (descending score).

        Raises:
            EmbeddingError: Query could not be embedded.
            SearchIndexError: Index query failed.
        """
        vector = await call_external(ExternalCall.EMBED, self._embedder.embed(query_text))
        if vector is None or len(vector) == 0:
            raise EmbeddingError("Embedding service returned an empty vector")

        index_query = self.build_query(
            list(vector),
            salient_terms,
            text_weight,
            self.candidate_limit(max_results, return_all),
        )

        if time_range is None:
            results = await self._run_query(index_query)
        else:
            results = await self._time_range_strategy.search(
                index_query, time_range, self._run_query
            )

        weights = index_query.weights
        logger.info(
            f"Search ({index_query.mode}, text={weights.text:.2f}, vector={weights.vector:.2f}): "
            f"{len(results)} candidates"
        )
        return results

    async def _run_query(self, params: IndexQuery) -> list[ScoredChunk]:
        hits = await call_external(ExternalCall.INDEX_QUERY, self._index.query(params))
        return [ScoredChunk(chunk=h.chunk, score=h.score) for h in hits]
