"""LLM data models and error types.

The transcript sent to a model is an explicit, append-only list of
`LLMMessage`. Tool use is modelled in that list as an assistant message
carrying `tool_calls`, followed by one `role="tool"` message per call with
the matching `tool_call_id`.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field

StopReason = Literal["end_turn", "tool_use", "max_tokens", "stop_sequence"]


class ToolCall(BaseModel):
    """A tool invocation requested by the model."""

    id: str = Field(..., description="Provider-assigned call id")
    name: str = Field(..., description="Tool name")
    arguments: dict[str, Any] = Field(default_factory=dict, description="Decoded arguments")


class ToolSchema(BaseModel):
    """Tool description advertised to the model."""

    name: str
    description: str
    input_schema: dict[str, Any] = Field(default_factory=dict)


class LLMMessage(BaseModel):
    """A message in a model transcript."""

    role: Literal["system", "user", "assistant", "tool"] = Field(
        ..., description="Role: system, user, assistant or tool"
    )
    content: str = Field(default="", description="Message content")
    tool_calls: list[ToolCall] = Field(
        default_factory=list, description="Calls requested by an assistant message"
    )
    tool_call_id: str | None = Field(
        default=None, description="Call this tool message answers"
    )


class TokenUsage(BaseModel):
    """Token usage statistics."""

    prompt_tokens: int = Field(..., description="Tokens in prompt")
    completion_tokens: int = Field(..., description="Tokens in completion")
    total_tokens: int = Field(..., description="Total tokens used")


class LLMResponse(BaseModel):
    """Response from an LLM call."""

    content: str = Field(default="", description="Generated text")
    model: str = Field(..., description="Model used")
    stop_reason: StopReason = Field(default="end_turn", description="Why generation stopped")
    tool_calls: list[ToolCall] = Field(default_factory=list, description="Requested tool calls")
    usage: TokenUsage | None = Field(default=None, description="Token usage stats")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Execution metadata")

    @property
    def wants_tool(self) -> bool:
        return self.stop_reason == "tool_use" and bool(self.tool_calls)


# ============================================================================
# Error Types
# ============================================================================


class ProviderError(Exception):
    """Base exception for LLM provider errors."""


class AuthenticationError(ProviderError):
    """Invalid or missing API key."""


class RateLimitError(ProviderError):
    """Rate limit exceeded."""


class ModelError(ProviderError):
    """Model not found, unavailable, or lacking a required capability."""


class ContentFilterError(ProviderError):
    """Content blocked by safety filter."""
