"""Embedding provider interface and response model."""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field


class EmbeddingResponse(BaseModel):
    """Vectors returned for a batch of texts, in input order."""

    embeddings: list[list[float]] = Field(..., description="One vector per input text")
    model: str = Field(..., description="Model used")
    dimensions: int = Field(..., description="Vector length")
    usage: dict[str, int] | None = Field(default=None, description="Token usage")
    metadata: dict[str, Any] = Field(default_factory=dict)


class EmbeddingProvider(ABC):
    """Abstract interface for embedding services."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Return embedding dimensions."""

    @abstractmethod
    async def embed(
        self,
        texts: list[str],
        *,
        model: str | None = None,
        **kwargs: Any,
    ) -> EmbeddingResponse:
        """Embed a batch of texts."""

    async def embed_single(self, text: str, **kwargs: Any) -> list[float]:
        """Embed one text and return its vector."""
        response = await self.embed([text], **kwargs)
        return response.embeddings[0]


class EmbeddingError(Exception):
    """Embedding service unavailable or returned an error."""
