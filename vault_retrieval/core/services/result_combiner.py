"""Result combiner - merges explicit and search chunks."""

import logging
from typing import Optional

from ..models.document import ScoredChunk
from ..strategies.scoring import (
    PassThroughStrategy,
    ScoreThresholdStrategy,
    ScoringStrategy,
)
from .hybrid_search import RETURN_ALL_LIMIT

logger = logging.getLogger(__name__)


class ResultCombiner:
    """Explicit chunks first, then thresholded search chunks, deduplicated."""

    def __init__(self, return_all_limit: int = RETURN_ALL_LIMIT):
        self._return_all_limit = return_all_limit

    def combine(
        self,
        explicit: list[ScoredChunk],
        hybrid: list[ScoredChunk],
        min_similarity_score: float,
        return_all: bool = False,
        max_results: Optional[int] = None,
    ) -> list[ScoredChunk]:
        """Combine candidate lists.

        Args:
            explicit: Explicitly referenced chunks, always included.
            hybrid: Search engine output in index order.
            min_similarity_score: Inclusive minimum score for search hits.
            return_all: Disable threshold filtering.
            max_results: Cap on search hits; pinned chunks do not count.

        Returns:
            Combined chunks with include_in_context set.
        """
        strategy: ScoringStrategy = (
            PassThroughStrategy() if return_all else ScoreThresholdStrategy(min_similarity_score)
        )
        filtered = strategy.apply(hybrid)
        limit = self._return_all_limit if return_all else max_results

        combined: list[ScoredChunk] = []
        seen: set[tuple[str, str]] = set()

        for chunk in explicit:
            if chunk.key in seen:
                continue
            seen.add(chunk.key)
            chunk.include_in_context = True
            combined.append(chunk)

        search_count = 0
        for chunk in filtered:
            if chunk.key in seen:
                continue
            if not chunk.pinned:
                if limit is not None and search_count >= limit:
                    continue
                search_count += 1
            seen.add(chunk.key)
            chunk.include_in_context = True
            combined.append(chunk)

        logger.info(
            f"Combined: {len(explicit)} explicit + {len(hybrid)} searched "
            f"→ {len(combined)} chunks (return_all={return_all})"
        )
        return combined
