"""Deterministic embedding provider for tests and offline development."""

import hashlib
from typing import Any

from tastychat.providers.embedding.base import EmbeddingError, EmbeddingProvider, EmbeddingResponse


class MockEmbeddingProvider(EmbeddingProvider):
    """Hash-seeded unit vectors; identical text always maps to the same vector.

    Similar texts are NOT similar vectors. Tests that need controlled
    similarity should pass `fixed` vectors keyed by exact text.
    """

    def __init__(
        self,
        dimensions: int = 384,
        fixed: dict[str, list[float]] | None = None,
        fail: bool = False,
    ):
        self._dimensions = dimensions
        self._fixed = fixed or {}
        self._fail = fail
        self._call_history: list[list[str]] = []

    @property
    def provider_name(self) -> str:
        return "mock"

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def call_history(self) -> list[list[str]]:
        return self._call_history

    def _vector_for(self, text: str) -> list[float]:
        if text in self._fixed:
            return self._fixed[text]

        # Chain digests so every dimension gets fresh bytes
        values: list[float] = []
        seed = text.encode()
        while len(values) < self._dimensions:
            seed = hashlib.sha256(seed).digest()
            values.extend((b / 127.5) - 1.0 for b in seed)
        values = values[: self._dimensions]

        magnitude = sum(v * v for v in values) ** 0.5
        return [v / magnitude for v in values] if magnitude > 0 else values

    async def embed(
        self,
        texts: list[str],
        *,
        model: str | None = None,
        **kwargs: Any,  # noqa: ARG002
    ) -> EmbeddingResponse:
        self._call_history.append(list(texts))
        if self._fail:
            raise EmbeddingError("mock embedding service unavailable")

        return EmbeddingResponse(
            embeddings=[self._vector_for(t) for t in texts],
            model=model or "mock-embedding",
            dimensions=self._dimensions,
            usage={"total_tokens": sum(len(t) // 4 for t in texts)},
        )
