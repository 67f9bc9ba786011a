"""Core retrieval services."""
from .reference_resolver import ExplicitReferenceResolver
from .query_rewriter import QueryRewriter
from .hybrid_search import HybridSearchEngine
from .result_combiner import ResultCombiner
from .reranking import ConfidenceGatedReranker
from .retrieval_service import RetrievalService

__all__ = [
    "ExplicitReferenceResolver",
    "QueryRewriter",
    "HybridSearchEngine",
    "ResultCombiner",
    "ConfidenceGatedReranker",
    "RetrievalService",
]
