from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):

    chroma_host: str = "localhost"
    chroma_port: int = 8001
    chroma_collection: str = "vault_chunks"
    chroma_timeout: float = 10.0

    llm_base_url: str = "http://localhost:11434/v1"
    llm_model: str = "qwen2.5:7b"
    llm_max_tokens: int = 512
    llm_temperature: float = 0.1

    embedding_model: str = "intfloat/multilingual-e5-base"
    embedding_query_prefix: str = "query: "

    reranker_model: str = "BAAI/bge-reranker-v2-m3"

    # Retrieval defaults
    retrieval_max_results: int = 10
    retrieval_fetch_k: int = 30
    retrieval_min_similarity: float = 0.1
    retrieval_text_weight: float = 0.5
    retrieval_rerank_threshold: Optional[float] = 0.5
    rerank_max_chars: int = 2000
    rerank_min_relevance: Optional[float] = None

    rewrite_enabled: bool = True
    rewrite_timeout: float = 4.0

    tag_marker: str = "#"
    max_date_range_days: int = 365
    hybrid_oversample: int = 3
    lexical_oversample: int = 10

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
