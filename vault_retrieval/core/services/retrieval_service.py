"""Retrieval service - entry point of the hybrid retrieval engine."""

import asyncio
import logging
from typing import Optional, Sequence

from ..cancellation import gather_or_cancel, run_cancellable
from ..models.document import RetrievalRequest, ScoredChunk, TimeRange
from .hybrid_search import HybridSearchEngine
from .query_rewriter import QueryRewriter
from .reference_resolver import ExplicitReferenceResolver
from .reranking import ConfidenceGatedReranker
from .result_combiner import ResultCombiner

logger = logging.getLogger(__name__)


class RetrievalService:
    """Turns a query into a ranked, deduplicated list of chunks."""

    def __init__(
        self,
        resolver: ExplicitReferenceResolver,
        rewriter: QueryRewriter,
        search_engine: HybridSearchEngine,
        reranker: ConfidenceGatedReranker,
        combiner: Optional[ResultCombiner] = None,
        max_results: int = 10,
        min_similarity_score: float = 0.1,
        text_weight: float = 0.5,
        rerank_threshold: Optional[float] = None,
    ):
        """Initialize retrieval service.

        Args:
            resolver: Explicit reference resolver.
            rewriter: Query rewriter.
            search_engine: Hybrid search engine.
            reranker: Confidence-gated reranker.
            combiner: Result combiner.
            max_results: Default number of search results.
            min_similarity_score: Default inclusion threshold.
            text_weight: Default lexical weight.
            rerank_threshold: Default rerank confidence threshold.
        """
        self._resolver = resolver
        self._rewriter = rewriter
        self._search_engine = search_engine
        self._reranker = reranker
        self._combiner = combiner or ResultCombiner()
        self._max_results = max_results
        self._min_similarity_score = min_similarity_score
        self._text_weight = text_weight
        self._rerank_threshold = rerank_threshold

    def build_request(
        self,
        raw_query: str,
        salient_terms: Sequence[str] = (),
        time_range: Optional[TimeRange] = None,
        return_all: bool = False,
        **overrides,
    ) -> RetrievalRequest:
        """Build a request filled with the configured defaults."""
        params = {
            "max_results": self._max_results,
            "min_similarity_score": self._min_similarity_score,
            "text_weight": self._text_weight,
            "rerank_threshold": self._rerank_threshold,
        }
        params.update(overrides)
        return RetrievalRequest(
            raw_query=raw_query,
            salient_terms=tuple(salient_terms),
            time_range=time_range,
            return_all=return_all,
            **params,
        )

    async def retrieve(
        self,
        request: RetrievalRequest,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> list[ScoredChunk]:
        """Retrieve chunks for request.

        Args:
            request: Retrieval parameters.
            cancel_event: Set by the caller to abort the call.

        Returns:
            Ranked chunks.

        Raises:
            RetrievalError: Hard failure of an external call.
            RetrievalCancelled: cancel_event was set.
        """
        if cancel_event is None:
            return await self._retrieve(request)
        return await run_cancellable(self._retrieve(request), cancel_event)

    async def _retrieve(self, request: RetrievalRequest) -> list[ScoredChunk]:
        explicit, searched = await gather_or_cancel(
            self._resolver.resolve(request.raw_query),
            self._search(request),
        )

        combined = self._combiner.combine(
            explicit,
            searched,
            min_similarity_score=request.min_similarity_score,
            return_all=request.return_all,
            max_results=request.max_results,
        )

        results = await self._reranker.maybe_rerank(
            request.raw_query, combined, request.rerank_threshold
        )

        logger.info(
            f"Retrieve: returned {len(results)} chunks for '{request.raw_query[:50]}...'"
        )
        return results

    async def _search(self, request: RetrievalRequest) -> list[ScoredChunk]:
        query_text = await self._rewriter.rewrite(request.raw_query, skip=request.skip_rewrite)
        return await self._search_engine.search(
            query_text,
            salient_terms=request.salient_terms,
            text_weight=request.text_weight,
            time_range=request.time_range,
            max_results=request.max_results,
            return_all=request.return_all,
        )
