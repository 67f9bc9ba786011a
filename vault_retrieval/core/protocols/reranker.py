"""Reranker protocol for dependency injection."""
from typing import Protocol, runtime_checkable

from ..models.index import RerankHit


@runtime_checkable
class RerankerProtocol(Protocol):
    """Protocol for reranking service."""

    async def rerank(self, query: str, contents: list[str]) -> list[RerankHit]:
        """Rerank passages by relevance.

        Args:
            query: User query.
            contents: Passages to score.

        Returns:
            Hits sorted by relevance, each referencing a position in contents.
        """
        ...
