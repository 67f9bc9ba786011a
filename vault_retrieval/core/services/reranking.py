"""Confidence-gated reranking."""

import logging
from typing import Optional

from ..models.document import ScoredChunk
from ..policies import ExternalCall, call_external
from ..protocols.reranker import RerankerProtocol

logger = logging.getLogger(__name__)


def max_score(candidates: list[ScoredChunk]) -> float:
    """Best search score among candidates, 0 when none has one."""
    return max((c.score for c in candidates if c.score is not None), default=0.0)


class ConfidenceGatedReranker:
    """Reranks only when the best search score is weak."""

    def __init__(
        self,
        reranker: RerankerProtocol,
        max_chars: int = 2000,
        min_relevance: Optional[float] = None,
    ):
        """Initialize reranker gate.

        Args:
            reranker: Reranking service.
            max_chars: Content truncation before sending.
            min_relevance: Reranked chunks below this are excluded from context.
        """
        self._reranker = reranker
        self._max_chars = max_chars
        self._min_relevance = min_relevance

    def should_rerank(self, candidates: list[ScoredChunk], threshold: Optional[float]) -> bool:
        if threshold is None:
            return False
        top = max_score(candidates)
        return 0 < top < threshold

    async def maybe_rerank(
        self,
        query: str,
        candidates: list[ScoredChunk],
        threshold: Optional[float],
    ) -> list[ScoredChunk]:
        """Rerank candidates if confidence is low, else return them unchanged."""
        if not self.should_rerank(candidates, threshold):
            return candidates

        logger.info(
            f"Low confidence (max_score={max_score(candidates):.2f} < {threshold}), reranking"
        )
        return await self.rerank(query, candidates)

    async def rerank(self, query: str, candidates: list[ScoredChunk]) -> list[ScoredChunk]:
        """Reorder candidates by reranker relevance.

        Candidates missing from the reranker response are dropped.

        Raises:
            RerankError: Reranker call failed.
        """
        contents = [c.chunk.content[: self._max_chars] for c in candidates]
        hits = await call_external(ExternalCall.RERANK, self._reranker.rerank(query, contents))

        reranked: list[ScoredChunk] = []
        used: set[int] = set()
        for hit in hits:
            if not 0 <= hit.index < len(candidates):
                logger.warning(f"Reranker returned out-of-range index {hit.index}, ignoring")
                continue
            if hit.index in used:
                continue
            used.add(hit.index)

            chunk = candidates[hit.index]
            chunk.rerank_score = hit.relevance_score
            chunk.include_in_context = (
                self._min_relevance is None or hit.relevance_score >= self._min_relevance
            )
            reranked.append(chunk)

        if logger.isEnabledFor(logging.DEBUG):
            top_scores = ", ".join(f"{c.rerank_score:.2f}" for c in reranked[:3])
            logger.debug(f"Reranker top-3 scores: [{top_scores}]")

        logger.info(f"Reranked: {len(candidates)} → {len(reranked)} chunks")
        return reranked
