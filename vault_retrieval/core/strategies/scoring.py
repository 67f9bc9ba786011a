import logging
from abc import ABC, abstractmethod

from ..models.document import ScoredChunk

logger = logging.getLogger(__name__)


class ScoringStrategy(ABC):
    """Base class for scoring strategies."""

    @abstractmethod
    def apply(self, results: list[ScoredChunk]) -> list[ScoredChunk]:
        """Apply strategy to results."""
        ...


class ScoreThresholdStrategy(ScoringStrategy):
    """Drop search hits scoring below a fixed minimum. Pinned chunks pass."""

    def __init__(self, min_score: float = 0.1):
        """Initialize strategy.

        Args:
            min_score: Minimum similarity score (inclusive).
        """
        self._min_score = min_score

    def apply(self, results: list[ScoredChunk]) -> list[ScoredChunk]:
        """Filter results below threshold."""
        filtered = [
            r
            for r in results
            if r.pinned or (r.score is not None and r.score >= self._min_score)
        ]

        if len(filtered) < len(results):
            logger.debug(
                f"Score threshold: {len(results)} → {len(filtered)} "
                f"(min_allowed={self._min_score:.2f})"
            )

        return filtered


class PassThroughStrategy(ScoringStrategy):
    """Keep every candidate (return-all mode)."""

    def apply(self, results: list[ScoredChunk]) -> list[ScoredChunk]:
        return results
