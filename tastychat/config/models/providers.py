"""Model provider configuration."""

from typing import Literal

from pydantic import BaseModel, Field

EmbeddingProviderType = Literal["openai", "mock"]


class LLMConfig(BaseModel):
    """Language-model settings.

    Model strings are prefix-routed: `openai/gpt-4o-mini`,
    `anthropic/claude-3-5-haiku-latest`, `openrouter/<vendor>/<model>`,
    `groq/<model>`, `mock/<anything>`.
    """

    model: str = Field(default="openai/gpt-4o-mini", description="Primary model")
    fallback_models: list[str] = Field(
        default_factory=list, description="Models tried in order when the primary fails"
    )
    max_tokens: int = Field(default=300, gt=0, description="Max tokens for replies")
    temperature: float = Field(default=0.5, ge=0.0, le=2.0, description="Sampling temperature")
    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    stop_sequences: list[str] = Field(
        default_factory=lambda: ["User:", "Customer:", "---"],
        description="Sequences that end generation",
    )


class EmbeddingConfig(BaseModel):
    """Embedding service settings."""

    provider: EmbeddingProviderType = Field(default="openai", description="Provider type")
    model: str = Field(default="text-embedding-3-small", description="Model identifier")
    dimensions: int = Field(default=1536, gt=0, description="Embedding dimensions")
    timeout: float = Field(default=15.0, gt=0, description="Request timeout in seconds")


class ProvidersConfig(BaseModel):
    """All external model providers."""

    llm: LLMConfig = Field(default_factory=LLMConfig)
    embedding: EmbeddingConfig = Field(default_factory=EmbeddingConfig)
