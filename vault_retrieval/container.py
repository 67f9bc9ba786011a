import logging
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from .config.settings import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Container:
    _factories: dict[type, Callable[[], Any]] = field(default_factory=dict)
    _singletons: dict[type, Any] = field(default_factory=dict)
    _singleton_flags: set[type] = field(default_factory=set)

    def register(
        self, interface: type[T], factory: Callable[[], T], singleton: bool = False
    ) -> None:
        """Register factory for interface.

        Args:
            interface: Interface type.
            factory: Factory function.
            singleton: Whether to cache instance.
        """
        self._factories[interface] = factory
        if singleton:
            self._singleton_flags.add(interface)

    def alias(self, interface: type, target: type) -> None:
        """Resolve interface to the same instance as target."""
        self.register(interface, lambda: self.resolve(target))

    def resolve(self, interface: type[T]) -> T:
        if interface in self._singletons:
            return self._singletons[interface]

        if interface not in self._factories:
            raise KeyError(f"No factory registered for {interface}")

        instance = self._factories[interface]()

        if interface in self._singleton_flags:
            self._singletons[interface] = instance

        return instance


container = Container()


def configure_container(settings: Settings) -> Container:
    """Configure container with all dependencies.

    Args:
        settings: Application settings.

    Returns:
        Configured container.
    """
    from .core.protocols.embedder import EmbedderProtocol
    from .core.protocols.llm import LLMProtocol
    from .core.protocols.reranker import RerankerProtocol
    from .core.protocols.vector_store import (
        ChunkStoreProtocol,
        DocumentLookupProtocol,
        SearchIndexProtocol,
    )
    from .core.services.hybrid_search import HybridSearchEngine
    from .core.services.query_rewriter import QueryRewriter
    from .core.services.reference_resolver import ExplicitReferenceResolver
    from .core.services.reranking import ConfidenceGatedReranker
    from .core.services.retrieval_service import RetrievalService
    from .infrastructure.embeddings.sentence_transformer import (
        SentenceTransformerEmbedder,
    )
    from .infrastructure.llm.ollama_client import OllamaClient
    from .infrastructure.rerankers.cross_encoder import CrossEncoderReranker
    from .infrastructure.vector_stores.chroma_store import ChromaSearchIndex

    container.register(
        EmbedderProtocol,
        lambda: SentenceTransformerEmbedder(
            settings.embedding_model, query_prefix=settings.embedding_query_prefix
        ),
        singleton=True,
    )

    container.register(
        ChromaSearchIndex,
        lambda: ChromaSearchIndex(
            host=settings.chroma_host,
            port=settings.chroma_port,
            collection_name=settings.chroma_collection,
            timeout=settings.chroma_timeout,
            oversample=settings.hybrid_oversample,
            lexical_oversample=settings.lexical_oversample,
            tag_marker=settings.tag_marker,
        ),
        singleton=True,
    )
    container.alias(SearchIndexProtocol, ChromaSearchIndex)
    container.alias(DocumentLookupProtocol, ChromaSearchIndex)
    container.alias(ChunkStoreProtocol, ChromaSearchIndex)

    container.register(
        RerankerProtocol,
        lambda: CrossEncoderReranker(settings.reranker_model),
        singleton=True,
    )

    container.register(
        LLMProtocol,
        lambda: OllamaClient(
            base_url=settings.llm_base_url,
            model=settings.llm_model,
            max_tokens=settings.llm_max_tokens,
            temperature=settings.llm_temperature,
        ),
        singleton=True,
    )

    container.register(
        ExplicitReferenceResolver,
        lambda: ExplicitReferenceResolver(
            document_lookup=container.resolve(DocumentLookupProtocol),
            chunk_store=container.resolve(ChunkStoreProtocol),
        ),
        singleton=True,
    )

    container.register(
        QueryRewriter,
        lambda: QueryRewriter(
            llm=container.resolve(LLMProtocol),
            enabled=settings.rewrite_enabled,
            timeout=settings.rewrite_timeout,
        ),
        singleton=True,
    )

    container.register(
        HybridSearchEngine,
        lambda: HybridSearchEngine(
            embedder=container.resolve(EmbedderProtocol),
            index=container.resolve(SearchIndexProtocol),
            resolver=container.resolve(ExplicitReferenceResolver),
            fetch_k=settings.retrieval_fetch_k,
            tag_marker=settings.tag_marker,
            max_date_range_days=settings.max_date_range_days,
        ),
        singleton=True,
    )

    container.register(
        ConfidenceGatedReranker,
        lambda: ConfidenceGatedReranker(
            reranker=container.resolve(RerankerProtocol),
            max_chars=settings.rerank_max_chars,
            min_relevance=settings.rerank_min_relevance,
        ),
        singleton=True,
    )

    container.register(
        RetrievalService,
        lambda: RetrievalService(
            resolver=container.resolve(ExplicitReferenceResolver),
            rewriter=container.resolve(QueryRewriter),
            search_engine=container.resolve(HybridSearchEngine),
            reranker=container.resolve(ConfidenceGatedReranker),
            max_results=settings.retrieval_max_results,
            min_similarity_score=settings.retrieval_min_similarity,
            text_weight=settings.retrieval_text_weight,
            rerank_threshold=settings.retrieval_rerank_threshold,
        ),
        singleton=True,
    )

    logger.info("Container configured")
    return container
