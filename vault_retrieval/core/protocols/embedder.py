"""Embedder protocol for dependency injection."""
from typing import Protocol, runtime_checkable


@runtime_checkable
class EmbedderProtocol(Protocol):
    """Protocol for embedding service."""

    async def embed(self, text: str) -> list[float]:
        """Embed query text.

        Deterministic for identical input and model version.

        Args:
            text: Text to embed.

        Returns:
            Embedding vector.
        """
        ...
