import asyncio
import logging
from functools import cached_property

from sentence_transformers import SentenceTransformer

logger = logging.getLogger(__name__)


class SentenceTransformerEmbedder:
    def __init__(
        self,
        model_name: str = "intfloat/multilingual-e5-base",
        query_prefix: str = "query: ",
    ):
        self._model_name = model_name
        self._query_prefix = query_prefix

    @cached_property
    def model(self) -> SentenceTransformer:
        logger.info(f"Loading embedding model: {self._model_name}")
        return SentenceTransformer(self._model_name)

    @property
    def model_name(self) -> str:
        return self._model_name

    def warmup(self) -> None:
        _ = self.model
        logger.info("Embedding model warmed up")

    async def embed(self, text: str) -> list[float]:
        vector = await asyncio.to_thread(
            self.model.encode, f"{self._query_prefix}{text}", convert_to_numpy=True
        )
        return vector.tolist()
