"""Search index, document lookup and chunk store protocols."""
from typing import Optional, Protocol, runtime_checkable

from ..models.document import Chunk
from ..models.index import IndexHit, IndexQuery


@runtime_checkable
class SearchIndexProtocol(Protocol):
    """Protocol for the combined lexical + vector index."""

    supports_or_filters: bool

    async def query(self, params: IndexQuery) -> list[IndexHit]:
        """Search the index.

        Args:
            params: Query parameters.

        Returns:
            Hits in descending score order.
        """
        ...


@runtime_checkable
class DocumentLookupProtocol(Protocol):
    """Protocol for resolving document titles."""

    async def find_by_title(self, title: str) -> Optional[str]:
        """Resolve an exact document title.

        Args:
            title: Document title.

        Returns:
            Document path, or None when the title is missing or ambiguous.
        """
        ...


@runtime_checkable
class ChunkStoreProtocol(Protocol):
    """Protocol for reading indexed chunks by document."""

    async def get_by_path(self, path: str) -> list[Chunk]:
        """Get all chunks of a document in index-assigned order."""
        ...
