"""OpenAI embedding provider."""

import os
from typing import Any

from openai import AsyncOpenAI, OpenAIError

from tastychat.observability.logging import get_logger
from tastychat.providers.embedding.base import (
    EmbeddingError,
    EmbeddingProvider,
    EmbeddingResponse,
)

logger = get_logger(__name__)

_DEFAULT_DIMENSIONS = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}


class OpenAIEmbeddingProvider(EmbeddingProvider):
    """Embeddings from the OpenAI API.

    The `text-embedding-3-*` family accepts a reduced `dimensions` argument;
    older models always return their native size.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "text-embedding-3-small",
        dimensions: int | None = None,
        timeout: float = 15.0,
    ):
        api_key = api_key or os.environ.get("OPENAI_API_KEY")
        if not api_key:
            raise ValueError("OPENAI_API_KEY environment variable not set")

        self._model = model
        self._dimensions = dimensions or _DEFAULT_DIMENSIONS.get(model, 1536)
        self._client = AsyncOpenAI(api_key=api_key, timeout=timeout)

    @property
    def provider_name(self) -> str:
        return "openai"

    @property
    def dimensions(self) -> int:
        return self._dimensions

    async def embed(
        self,
        texts: list[str],
        *,
        model: str | None = None,
        **kwargs: Any,
    ) -> EmbeddingResponse:
        """Embed texts in one API request.

        Raises:
            EmbeddingError: On any API or transport failure
        """
        use_model = model or self._model
        request: dict[str, Any] = {"input": texts, "model": use_model, **kwargs}
        if use_model.startswith("text-embedding-3-"):
            request["dimensions"] = self._dimensions

        try:
            response = await self._client.embeddings.create(**request)
        except OpenAIError as e:
            logger.error("openai_embed_error", model=use_model, error=str(e))
            raise EmbeddingError(f"OpenAI embedding request failed: {e}") from e

        embeddings = [item.embedding for item in response.data]
        usage = None
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "total_tokens": response.usage.total_tokens,
            }

        logger.debug("openai_embed_success", model=use_model, count=len(embeddings))

        return EmbeddingResponse(
            embeddings=embeddings,
            model=use_model,
            dimensions=len(embeddings[0]) if embeddings else self._dimensions,
            usage=usage,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.close()
