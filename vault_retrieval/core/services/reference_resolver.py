"""Explicit reference resolver - [[Title]] mentions to indexed chunks."""

import logging
import re
from typing import Optional

from ..cancellation import gather_or_cancel
from ..models.document import ChunkSource, ScoredChunk
from ..policies import ExternalCall, call_external
from ..protocols.vector_store import ChunkStoreProtocol, DocumentLookupProtocol

logger = logging.getLogger(__name__)

WIKI_LINK_PATTERN = re.compile(r"\[\[([^\[\]]+?)\]\]")


def extract_references(query: str) -> list[str]:
    """Extract referenced titles in order of first appearance.

    `[[Title|alias]]` and `[[Title#Heading]]` both reference `Title`.
    """
    titles: list[str] = []
    for match in WIKI_LINK_PATTERN.finditer(query):
        title = match.group(1).split("|", 1)[0].split("#", 1)[0].strip()
        if title and title not in titles:
            titles.append(title)
    return titles


class ExplicitReferenceResolver:
    """Fetches every chunk of documents named literally in the query."""

    def __init__(
        self,
        document_lookup: DocumentLookupProtocol,
        chunk_store: ChunkStoreProtocol,
    ):
        """Initialize resolver.

        Args:
            document_lookup: Title to path lookup.
            chunk_store: Chunk storage.
        """
        self._lookup = document_lookup
        self._chunk_store = chunk_store

    async def resolve(self, query: str) -> list[ScoredChunk]:
        """Resolve [[Title]] references in query.

        Unresolved or ambiguous titles are skipped.

        Args:
            query: Raw user query.

        Returns:
            Chunks of the referenced documents, in reference order.
        """
        titles = extract_references(query)
        if not titles:
            return []

        chunks = await self.resolve_titles(titles, source=ChunkSource.EXPLICIT)
        logger.info(f"Explicit references: {len(titles)} titles → {len(chunks)} chunks")
        return chunks

    async def resolve_titles(
        self,
        titles: list[str],
        source: ChunkSource = ChunkSource.EXPLICIT,
    ) -> list[ScoredChunk]:
        """Resolve exact titles to chunks, always included in context.

        Args:
            titles: Document titles in the order results should follow.
            source: Source recorded on the returned chunks.

        Returns:
            Chunks grouped by document, documents in title order.
        """
        paths = await gather_or_cancel(*(self._find_path(t) for t in titles))

        unique_paths: list[str] = []
        for title, path in zip(titles, paths):
            if path is None:
                logger.debug(f"Unresolved reference skipped: [[{title}]]")
            elif path not in unique_paths:
                unique_paths.append(path)

        return await self.resolve_paths(unique_paths, source=source)

    async def resolve_paths(
        self,
        paths: list[str],
        source: ChunkSource = ChunkSource.EXPLICIT,
    ) -> list[ScoredChunk]:
        """Fetch every chunk of the given documents, in path order."""
        documents = await gather_or_cancel(
            *(
                call_external(ExternalCall.CHUNK_FETCH, self._chunk_store.get_by_path(p))
                for p in paths
            )
        )

        return [
            ScoredChunk(chunk=chunk, include_in_context=True, source=source)
            for chunks in documents
            for chunk in chunks
        ]

    async def _find_path(self, title: str) -> Optional[str]:
        return await call_external(
            ExternalCall.TITLE_LOOKUP, self._lookup.find_by_title(title), fallback=None
        )
