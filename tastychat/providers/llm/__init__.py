"""Language-model provider layer."""

from tastychat.providers.llm.base import (
    AuthenticationError,
    ContentFilterError,
    LLMMessage,
    LLMResponse,
    ModelError,
    ProviderError,
    RateLimitError,
    StopReason,
    TokenUsage,
    ToolCall,
    ToolSchema,
)
from tastychat.providers.llm.executor import (
    ExecutionContext,
    LLMExecutor,
    clear_execution_context,
    create_executor_from_config,
    get_execution_context,
    set_execution_context,
)
from tastychat.providers.llm.mock import MockLLMExecutor

__all__ = [
    "AuthenticationError",
    "ContentFilterError",
    "ExecutionContext",
    "LLMExecutor",
    "LLMMessage",
    "LLMResponse",
    "MockLLMExecutor",
    "ModelError",
    "ProviderError",
    "RateLimitError",
    "StopReason",
    "TokenUsage",
    "ToolCall",
    "ToolSchema",
    "clear_execution_context",
    "create_executor_from_config",
    "get_execution_context",
    "set_execution_context",
]
