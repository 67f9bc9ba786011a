import asyncio
import logging
from typing import Optional

from sentence_transformers import CrossEncoder

from vault_retrieval.core.models.index import RerankHit

logger = logging.getLogger(__name__)


class CrossEncoderReranker:
    """Reranker using CrossEncoder models."""

    def __init__(self, model_name: str = "BAAI/bge-reranker-v2-m3", top_n: Optional[int] = None):
        """Initialize reranker.

        Args:
            model_name: HuggingFace model name.
            top_n: Keep only the top_n passages (None keeps all).
        """
        logger.info(f"Loading reranker: {model_name}")
        self._model = CrossEncoder(model_name)
        self._top_n = top_n
        logger.info("Reranker loaded")

    async def rerank(self, query: str, contents: list[str]) -> list[RerankHit]:
        """Score passages against query.

        Args:
            query: User query.
            contents: Passages.

        Returns:
            Hits sorted by relevance (descending).
        """
        if not contents:
            return []

        pairs = [[query, content] for content in contents]
        scores = await asyncio.to_thread(self._model.predict, pairs)

        hits = [RerankHit(index=i, relevance_score=float(s)) for i, s in enumerate(scores)]
        hits.sort(key=lambda h: h.relevance_score, reverse=True)

        if self._top_n is not None:
            hits = hits[: self._top_n]

        return hits
