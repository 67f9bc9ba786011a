import logging
from datetime import datetime
from typing import Optional

import httpx

from vault_retrieval.core.errors import SearchIndexError
from vault_retrieval.core.models.document import Chunk
from vault_retrieval.core.models.index import (
    FieldFilter,
    FilterGroup,
    IndexHit,
    IndexQuery,
    SearchWeights,
)

logger = logging.getLogger(__name__)


def _to_millis(value: datetime) -> int:
    return int(value.timestamp() * 1000)


def _from_millis(value) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.fromtimestamp(value / 1000)


def _combine(clauses: list[dict], operator: str) -> Optional[dict]:
    # Chroma rejects $and / $or with fewer than two operands
    if not clauses:
        return None
    if len(clauses) == 1:
        return clauses[0]
    return {operator: clauses}


def _field_clauses(f: FieldFilter) -> list[dict]:
    clauses = []
    if f.gte is not None:
        clauses.append({f.field: {"$gte": _to_millis(f.gte)}})
    if f.lte is not None:
        clauses.append({f.field: {"$lte": _to_millis(f.lte)}})
    if f.one_of is not None:
        clauses.append({f.field: {"$in": list(f.one_of)}})
    return clauses


def build_where(filters: tuple[FilterGroup, ...]) -> Optional[dict]:
    """Translate OR-combined filter groups into a Chroma `where` clause."""
    groups = [
        _combine([c for f in group.all_of for c in _field_clauses(f)], "$and")
        for group in filters
    ]
    return _combine([g for g in groups if g], "$or")


def _normalize_tag(tag: str, marker: str) -> str:
    tag = tag.strip().lower()
    return tag if tag.startswith(marker) else f"{marker}{tag}"


def lexical_score(term: str, chunk: Chunk, tag_marker: str = "#") -> float:
    """Fraction of term tokens found in the chunk.

    Tag tokens match the chunk's tags, including nested tags
    (#project matches #project/alpha), or the content.
    """
    tokens = term.split()
    if not tokens:
        return 0.0

    content = chunk.content.lower()
    title = chunk.title.lower()
    tags = {_normalize_tag(t, tag_marker) for t in chunk.tags}

    matched = 0
    for token in tokens:
        token = token.lower()
        if token.startswith(tag_marker):
            if token in content or any(
                tag == token or tag.startswith(f"{token}/") for tag in tags
            ):
                matched += 1
        elif token in content or token in title:
            matched += 1

    return matched / len(tokens)


class ChromaSearchIndex:
    """Search index, title lookup and chunk store over ChromaDB HTTP API.

    Hybrid queries rescore an oversampled vector candidate set with
    keyword/tag overlap.
    """

    supports_or_filters = True

    def __init__(
        self,
        host: str = "localhost",
        port: int = 8001,
        collection_name: str = "vault_chunks",
        tenant: str = "default_tenant",
        database: str = "default_database",
        timeout: float = 10.0,
        oversample: int = 3,
        lexical_oversample: int = 10,
        tag_marker: str = "#",
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize ChromaDB client.

        Args:
            host: ChromaDB host.
            port: ChromaDB port.
            collection_name: Collection name.
            tenant: Tenant name.
            database: Database name.
            timeout: Request timeout in seconds.
            oversample: Candidate multiplier for hybrid rescoring.
            lexical_oversample: Candidate multiplier for lexical-only queries.
            tag_marker: Prefix identifying tag terms.
            client: Preconfigured HTTP client.
        """
        self._base_url = f"http://{host}:{port}/api/v2"
        self._tenant = tenant
        self._database = database
        self._collection_name = collection_name
        self._collection_id: Optional[str] = None
        self._oversample = max(1, oversample)
        self._lexical_oversample = max(1, lexical_oversample)
        self._tag_marker = tag_marker
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def _collections_url(self) -> str:
        return f"{self._base_url}/tenants/{self._tenant}/databases/{self._database}/collections"

    async def _ensure_collection(self) -> str:
        """Look up collection ID."""
        if self._collection_id:
            return self._collection_id

        resp = await self._client.get(self._collections_url)
        resp.raise_for_status()
        for col in resp.json():
            if col["name"] == self._collection_name:
                self._collection_id = col["id"]
                return self._collection_id

        raise SearchIndexError(f"Collection not found: {self._collection_name}")

    async def _post(self, action: str, body: dict) -> dict:
        col_id = await self._ensure_collection()
        resp = await self._client.post(f"{self._collections_url}/{col_id}/{action}", json=body)
        resp.raise_for_status()
        return resp.json()

    def _to_chunk(self, document: str, meta: Optional[dict], embedding=None) -> Chunk:
        meta = meta or {}
        tags = meta.get("tags") or ""
        return Chunk(
            content=document or "",
            path=meta.get("path", "Unknown"),
            title=meta.get("title", ""),
            embedding=list(embedding) if embedding is not None else [],
            created_at=_from_millis(meta.get("created_at")),
            modified_at=_from_millis(meta.get("modified_at")),
            tags=frozenset(t for t in tags.split(",") if t),
            extension=meta.get("extension", "md"),
            char_count=meta.get("char_count", len(document or "")),
            embedding_model=meta.get("embedding_model", ""),
            chunk_index=meta.get("chunk_index", 0),
        )

    async def query(self, params: IndexQuery) -> list[IndexHit]:
        """Vector search, rescored with lexical overlap in hybrid mode."""
        hybrid = params.mode == "hybrid" and bool(params.term)
        weights = params.weights or SearchWeights(text=0.5, vector=0.5)
        lexical_only = hybrid and weights.vector == 0

        n_results = params.limit
        if lexical_only:
            n_results = params.limit * self._lexical_oversample
        elif hybrid:
            n_results = params.limit * self._oversample

        body: dict = {
            "query_embeddings": [params.vector],
            "n_results": n_results,
            "include": ["documents", "metadatas", "distances"],
        }
        # Lexical matching covers content, title and metadata tags, so it runs
        # client-side over the candidates
        where = build_where(params.filters)
        if where:
            body["where"] = where

        data = await self._post("query", body)

        hits = []
        if data.get("ids") and data["ids"][0]:
            for i in range(len(data["ids"][0])):
                similarity = 1.0 - data["distances"][0][i]
                chunk = self._to_chunk(data["documents"][0][i], data["metadatas"][0][i])

                score = similarity
                if hybrid:
                    lexical = lexical_score(params.term, chunk, self._tag_marker)
                    if lexical_only and lexical == 0:
                        continue
                    score = weights.text * lexical + weights.vector * similarity
                hits.append(IndexHit(chunk=chunk, score=score))

        hits.sort(key=lambda h: h.score, reverse=True)
        if params.similarity_threshold is not None:
            hits = [h for h in hits if h.score >= params.similarity_threshold]

        return hits[: params.limit]

    async def find_by_title(self, title: str) -> Optional[str]:
        """Exact title lookup; None if missing or ambiguous."""
        data = await self._post("get", {"where": {"title": title}, "include": ["metadatas"]})
        paths = {m.get("path") for m in data.get("metadatas") or [] if m and m.get("path")}

        if len(paths) == 1:
            return paths.pop()
        if len(paths) > 1:
            logger.debug(f"Ambiguous title '{title}': {len(paths)} documents")
        return None

    async def get_by_path(self, path: str) -> list[Chunk]:
        """All chunks of a document, ordered by chunk index."""
        data = await self._post(
            "get",
            {"where": {"path": path}, "include": ["documents", "metadatas", "embeddings"]},
        )

        documents = data.get("documents") or []
        metadatas = data.get("metadatas") or [None] * len(documents)
        embeddings = data.get("embeddings") or [None] * len(documents)

        chunks = [
            self._to_chunk(doc, meta, emb)
            for doc, meta, emb in zip(documents, metadatas, embeddings)
        ]
        chunks.sort(key=lambda c: c.chunk_index)
        return chunks

    async def aclose(self) -> None:
        await self._client.aclose()
