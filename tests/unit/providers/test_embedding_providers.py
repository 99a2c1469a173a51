"""Tests for embedding providers."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import openai
import pytest

from tastychat.config.models.providers import EmbeddingConfig
from tastychat.providers.embedding import (
    EmbeddingError,
    MockEmbeddingProvider,
    OpenAIEmbeddingProvider,
    create_embedding_provider,
)


class TestMockEmbeddingProvider:
    """Tests for MockEmbeddingProvider."""

    @pytest.mark.asyncio
    async def test_deterministic_unit_vectors(self):
        """Same text should always map to the same unit vector."""
        provider = MockEmbeddingProvider(dimensions=64)

        first = await provider.embed_single("halal")
        second = await provider.embed_single("halal")

        assert first == second
        assert len(first) == 64
        assert sum(v * v for v in first) == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_fixed_vectors(self):
        """Should return configured vectors for exact texts."""
        provider = MockEmbeddingProvider(dimensions=2, fixed={"menu": [1.0, 0.0]})

        response = await provider.embed(["menu", "other"])

        assert response.embeddings[0] == [1.0, 0.0]
        assert response.dimensions == 2
        assert provider.call_history == [["menu", "other"]]

    @pytest.mark.asyncio
    async def test_failure_mode(self):
        """Should raise EmbeddingError when configured to fail."""
        with pytest.raises(EmbeddingError):
            await MockEmbeddingProvider(fail=True).embed(["x"])


class TestCreateEmbeddingProvider:
    def test_mock(self):
        provider = create_embedding_provider(EmbeddingConfig(provider="mock", dimensions=8))

        assert provider.provider_name == "mock"
        assert provider.dimensions == 8

    def test_openai(self):
        with patch.dict("os.environ", {"OPENAI_API_KEY": "test-key"}):
            provider = create_embedding_provider(EmbeddingConfig(dimensions=512))

        assert isinstance(provider, OpenAIEmbeddingProvider)
        assert provider.dimensions == 512


class TestOpenAIEmbeddingProvider:
    """Tests for OpenAIEmbeddingProvider."""

    @pytest.fixture
    def provider(self):
        """Create a provider with a fake API key."""
        with patch.dict("os.environ", {"OPENAI_API_KEY": "test-key"}):
            return OpenAIEmbeddingProvider(model="text-embedding-3-small", dimensions=4)

    @pytest.fixture
    def api_response(self):
        """Embeddings API response double."""
        response = MagicMock()
        response.data = [MagicMock(embedding=[0.1, 0.2, 0.3, 0.4])]
        response.usage = MagicMock(prompt_tokens=3, total_tokens=3)
        return response

    def test_requires_api_key(self, monkeypatch):
        """Should fail fast without OPENAI_API_KEY."""
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)

        with pytest.raises(ValueError, match="OPENAI_API_KEY"):
            OpenAIEmbeddingProvider()

    @pytest.mark.asyncio
    async def test_embed_sends_reduced_dimensions(self, provider, api_response):
        """Should pass dimensions for text-embedding-3 models."""
        provider._client.embeddings.create = AsyncMock(return_value=api_response)

        response = await provider.embed(["Bonjour"])

        kwargs = provider._client.embeddings.create.call_args.kwargs
        assert kwargs["dimensions"] == 4
        assert kwargs["input"] == ["Bonjour"]
        assert response.usage == {"prompt_tokens": 3, "total_tokens": 3}

    @pytest.mark.asyncio
    async def test_legacy_model_has_no_dimensions(self, provider, api_response):
        """Should not send dimensions to older models."""
        provider._client.embeddings.create = AsyncMock(return_value=api_response)

        await provider.embed(["Bonjour"], model="text-embedding-ada-002")

        assert "dimensions" not in provider._client.embeddings.create.call_args.kwargs

    @pytest.mark.asyncio
    async def test_api_error_wrapped(self, provider):
        """Should convert SDK errors to EmbeddingError."""
        request = httpx.Request("POST", "https://api.openai.com/v1/embeddings")
        provider._client.embeddings.create = AsyncMock(
            side_effect=openai.APIConnectionError(request=request)
        )

        with pytest.raises(EmbeddingError, match="OpenAI embedding request failed"):
            await provider.embed(["Bonjour"])
