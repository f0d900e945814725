"""Embedder protocol for dependency injection."""
from typing import Protocol, runtime_checkable


@runtime_checkable
class EmbedderProtocol(Protocol):
    """Protocol for embedding service."""

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Encode texts to embedding vectors.

        Batching is internal to the implementation.

        Args:
            texts: Texts to encode.

        Returns:
            One vector per input text.

        Raises:
            ConfigurationError: If the embedding provider is misconfigured.
            UpstreamError: If the provider is unreachable.
        """
        ...
