"""Query rewriter - hypothetical answer passage (HyDE) for vector recall."""

import asyncio
import logging

from ..policies import ExternalCall, call_external
from ..protocols.llm import LLMProtocol

logger = logging.getLogger(__name__)

HYDE_PROMPT = """Write a brief, informative passage that directly answers the question below, \
as if it were an excerpt from the user's own notes. Do not mention the question itself.

Question: {query}

Passage:"""


class QueryRewriter:
    """Rewrites a short query into a fuller passage before embedding."""

    def __init__(self, llm: LLMProtocol, enabled: bool = True, timeout: float = 4.0):
        """Initialize rewriter.

        Args:
            llm: Text generation service.
            enabled: Global switch for rewriting.
            timeout: Seconds to wait for the generation service.
        """
        self._llm = llm
        self._enabled = enabled
        self._timeout = timeout

    async def rewrite(self, query: str, skip: bool = False) -> str:
        """Rewrite query, falling back to it on any failure.

        Args:
            query: Raw user query.
            skip: Skip rewriting for this call.

        Returns:
            Generated passage or the original query.
        """
        if skip or not self._enabled or not query.strip():
            return query

        generated = await call_external(
            ExternalCall.QUERY_REWRITE,
            asyncio.wait_for(
                self._llm.generate(HYDE_PROMPT.format(query=query)), self._timeout
            ),
            fallback=None,
        )

        if generated is None:
            return query

        if not isinstance(generated, str) or not generated.strip():
            logger.warning(
                f"[rewrite] Unexpected response ({type(generated).__name__}), using original query"
            )
            return query

        passage = generated.strip()
        logger.debug(f"[rewrite] '{query[:50]}' → '{passage[:80]}...'")
        return passage
