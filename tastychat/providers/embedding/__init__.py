"""Embedding provider layer."""

from tastychat.config.models.providers import EmbeddingConfig
from tastychat.providers.embedding.base import (
    EmbeddingError,
    EmbeddingProvider,
    EmbeddingResponse,
)
from tastychat.providers.embedding.mock import MockEmbeddingProvider
from tastychat.providers.embedding.openai import OpenAIEmbeddingProvider


def create_embedding_provider(config: EmbeddingConfig) -> EmbeddingProvider:
    """Build the provider selected by the `providers.embedding` section."""
    if config.provider == "mock":
        return MockEmbeddingProvider(dimensions=config.dimensions)
    return OpenAIEmbeddingProvider(
        model=config.model,
        dimensions=config.dimensions,
        timeout=config.timeout,
    )


__all__ = [
    "EmbeddingError",
    "EmbeddingProvider",
    "EmbeddingResponse",
    "MockEmbeddingProvider",
    "OpenAIEmbeddingProvider",
    "create_embedding_provider",
]
