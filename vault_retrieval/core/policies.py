"""Failure policy per external call.

Soft calls degrade to a fallback value; hard calls abort the retrieve call
with a typed error.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Optional, TypeVar

from .errors import (
    ChunkStoreError,
    EmbeddingError,
    RerankError,
    RetrievalError,
    SearchIndexError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FailurePolicy(Enum):
    SOFT = "soft"
    HARD = "hard"


class ExternalCall(Enum):
    EMBED = "embed"
    INDEX_QUERY = "index_query"
    CHUNK_FETCH = "chunk_fetch"
    TITLE_LOOKUP = "title_lookup"
    QUERY_REWRITE = "query_rewrite"
    RERANK = "rerank"


@dataclass(frozen=True)
class CallPolicy:
    failure: FailurePolicy
    error: Optional[type[RetrievalError]] = None


CALL_POLICIES: dict[ExternalCall, CallPolicy] = {
    ExternalCall.EMBED: CallPolicy(FailurePolicy.HARD, EmbeddingError),
    ExternalCall.INDEX_QUERY: CallPolicy(FailurePolicy.HARD, SearchIndexError),
    ExternalCall.CHUNK_FETCH: CallPolicy(FailurePolicy.HARD, ChunkStoreError),
    ExternalCall.TITLE_LOOKUP: CallPolicy(FailurePolicy.SOFT),
    ExternalCall.QUERY_REWRITE: CallPolicy(FailurePolicy.SOFT),
    ExternalCall.RERANK: CallPolicy(FailurePolicy.HARD, RerankError),
}


async def call_external(
    call: ExternalCall,
    awaitable: Awaitable[T],
    fallback: Optional[T] = None,
) -> Optional[T]:
    """Await an external call and apply its failure policy.

    Args:
        call: Which external call this is.
        awaitable: The pending call.
        fallback: Value returned when a soft call fails.

    Returns:
        Call result, or fallback for a failed soft call.

    Raises:
        RetrievalError: Mapped error for a failed hard call.
    """
    policy = CALL_POLICIES[call]
    try:
        return await awaitable
    except Exception as e:
        if policy.failure is FailurePolicy.SOFT:
            logger.warning(f"[{call.value}] failed, using fallback: {e!r}")
            return fallback

        logger.error(f"[{call.value}] failed: {e!r}")
        if isinstance(e, policy.error):
            raise
        raise policy.error(f"{call.value} failed: {e}") from e
