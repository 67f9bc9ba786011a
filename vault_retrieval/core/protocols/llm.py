"""LLM protocol for dependency injection."""
from typing import Protocol, runtime_checkable


@runtime_checkable
class LLMProtocol(Protocol):
    """Protocol for text generation service."""

    async def generate(self, prompt: str) -> str:
        """Generate a completion for the prompt.

        Args:
            prompt: Prompt text.

        Returns:
            Generated text.
        """
        ...
