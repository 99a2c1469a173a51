"""LLM Executor - routes model calls by model-string prefix.

Plain generation goes through Agno model classes:
- OpenRouter for openrouter/* models
- Claude for anthropic/* models
- OpenAIChat for openai/* models
- Groq for groq/* models

Tool-augmented generation goes through the OpenAI-compatible chat
completions API of the same provider (the `openai` SDK pointed at the
provider's base URL), because the tool loop owns the transcript and needs
the raw tool-call messages back rather than Agno's internal tool runner.

Both paths share the fallback chain and the `mock/` prefix.
"""

from __future__ import annotations

import json
import os
import time
from contextvars import ContextVar
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from tastychat.observability.logging import get_logger
from tastychat.providers.llm.base import (
    AuthenticationError,
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

if TYPE_CHECKING:
    from agno.agent import Agent
    from openai import AsyncOpenAI

    from tastychat.config.models.providers import LLMConfig

logger = get_logger(__name__)

# provider prefix -> (base_url, api key env var) for the OpenAI-compatible path
_COMPATIBLE_ENDPOINTS: dict[str, tuple[str | None, str]] = {
    "openai": (None, "OPENAI_API_KEY"),
    "openrouter": ("https://openrouter.ai/api/v1", "OPENROUTER_API_KEY"),
    "groq": ("https://api.groq.com/openai/v1", "GROQ_API_KEY"),
    "anthropic": ("https://api.anthropic.com/v1/", "ANTHROPIC_API_KEY"),
}

_FINISH_REASONS: dict[str, StopReason] = {
    "tool_calls": "tool_use",
    "function_call": "tool_use",
    "length": "max_tokens",
    "stop": "end_turn",
}

# (max_tokens, temperature, stop sequences)
_Sampling = tuple[int, float, tuple[str, ...]]


# ============================================================================
# Execution Context (avoids parameter threading)
# ============================================================================


@dataclass
class ExecutionContext:
    """Session and turn identifiers attached to every model call."""

    session_id: str
    turn_id: str | None = None
    purpose: str | None = None  # "reply", "rag", "tools"


_execution_context: ContextVar[ExecutionContext | None] = ContextVar(
    "execution_context", default=None
)


def set_execution_context(ctx: ExecutionContext) -> None:
    """Set execution context for current async task."""
    _execution_context.set(ctx)


def get_execution_context() -> ExecutionContext | None:
    """Get execution context for current async task."""
    return _execution_context.get()


def clear_execution_context() -> None:
    """Clear execution context."""
    _execution_context.set(None)


# ============================================================================
# LLM Executor
# ============================================================================


class LLMExecutor:
    """Executes language-model calls with a fallback chain.

    Model string format:
        openrouter/anthropic/claude-3.5-haiku -> OpenRouter(id="anthropic/claude-3.5-haiku")
        anthropic/claude-3-5-haiku-latest -> Claude(id="claude-3-5-haiku-latest")
        openai/gpt-4o-mini -> OpenAIChat(id="gpt-4o-mini")
        groq/llama-3.1-70b -> Groq(id="llama-3.1-70b")
        mock/test -> canned response (for testing)

    Example:
        executor = LLMExecutor(
            model="openai/gpt-4o-mini",
            fallback_models=["openrouter/anthropic/claude-3.5-haiku"],
        )
        response = await executor.generate(
            [LLMMessage(role="user", content="Bonjour")],
        )
    """

    def __init__(
        self,
        model: str,
        fallback_models: list[str] | None = None,
        timeout: float = 60.0,
        step_name: str | None = None,
    ) -> None:
        self._model = model
        self._fallback_models = fallback_models or []
        self._timeout = timeout
        self._step_name = step_name

        self._models: dict[tuple[Any, ...], Any] = {}
        self._clients: dict[str, AsyncOpenAI] = {}

    @property
    def model(self) -> str:
        """Primary model for this executor."""
        return self._model

    @property
    def step_name(self) -> str | None:
        return self._step_name

    async def generate(
        self,
        messages: list[LLMMessage],
        *,
        tools: list[ToolSchema] | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.7,
        stop_sequences: list[str] | None = None,
    ) -> LLMResponse:
        """Generate a reply, optionally allowing the model to request tools.

        Uses the primary model, then each fallback model in order.

        Args:
            messages: Full transcript, system message first if any
            tools: Tool schemas the model may call; enables the tool-use path
            max_tokens: Maximum tokens to generate
            temperature: Sampling temperature
            stop_sequences: Strings that end generation

        Returns:
            LLMResponse with text or tool calls and a normalized stop reason

        Raises:
            ProviderError: When every model in the chain failed
        """
        models_to_try = [self._model] + self._fallback_models
        last_error: Exception | None = None
        ctx = get_execution_context()
        session_id = ctx.session_id if ctx else None
        sampling: _Sampling = (max_tokens, temperature, tuple(stop_sequences or ()))

        for model in models_to_try:
            try:
                if tools:
                    response = await self._generate_with_tools(
                        model, messages, tools, max_tokens, temperature, stop_sequences
                    )
                else:
                    response = await self._generate_with_model(model, messages, sampling)

                if ctx:
                    response.metadata["session_id"] = ctx.session_id
                    response.metadata["turn_id"] = ctx.turn_id
                    response.metadata["purpose"] = self._step_name or ctx.purpose
                return response

            except RateLimitError as e:
                logger.warning(
                    "executor_rate_limited",
                    model=model,
                    step=self._step_name,
                    session_id=session_id,
                    error=str(e),
                )
                last_error = e
            except ProviderError as e:
                logger.warning(
                    "executor_provider_error",
                    model=model,
                    step=self._step_name,
                    session_id=session_id,
                    error=str(e),
                )
                last_error = e
            except Exception as e:
                logger.warning(
                    "executor_unexpected_error",
                    model=model,
                    step=self._step_name,
                    session_id=session_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                last_error = e

        raise ProviderError(
            f"All models failed for step {self._step_name}. "
            f"Tried: {models_to_try}. Last error: {last_error}"
        )

    # ========================================================================
    # Internal: Agno-based plain generation
    # ========================================================================

    def _create_agent(
        self,
        model: str,
        system_prompt: str | None,
        sampling: _Sampling,
    ) -> Agent:
        """Build a per-call Agent; only the configured model object is shared."""
        from agno.agent import Agent

        return Agent(
            model=self._get_or_create_model(model, sampling),
            instructions=[system_prompt] if system_prompt else None,
            num_history_messages=0,  # history is in the transcript
            markdown=False,
        )

    def _get_or_create_model(self, model: str, sampling: _Sampling) -> Any:
        key = (model, *sampling)
        if key not in self._models:
            self._models[key] = self._create_agno_model(model, sampling)
        return self._models[key]

    def _create_agno_model(self, model: str, sampling: _Sampling) -> Any:
        provider_type, api_model = self._parse_model(model)
        options = self._sampling_options(provider_type, sampling)

        if provider_type == "openrouter":
            from agno.models.openrouter import OpenRouter

            return OpenRouter(id=api_model, **options)

        elif provider_type == "anthropic":
            from agno.models.anthropic import Claude

            return Claude(id=api_model, **options)

        elif provider_type == "openai":
            from agno.models.openai import OpenAIChat

            return OpenAIChat(id=api_model, **options)

        elif provider_type == "groq":
            from agno.models.groq import Groq

            return Groq(id=api_model, **options)

        from agno.models.openrouter import OpenRouter

        logger.warning(
            "unknown_provider_defaulting_to_openrouter",
            model=model,
            provider_type=provider_type,
        )
        return OpenRouter(id=model, **self._sampling_options("openrouter", sampling))

    @staticmethod
    def _sampling_options(provider_type: str, sampling: _Sampling) -> dict[str, Any]:
        """Keyword arguments of the Agno model class for this provider."""
        max_tokens, temperature, stop = sampling
        options: dict[str, Any] = {"max_tokens": max_tokens, "temperature": temperature}
        if stop:
            # Claude names it after the Messages API field
            options["stop_sequences" if provider_type == "anthropic" else "stop"] = list(stop)
        return options

    def _format_messages_for_agno(self, messages: list[LLMMessage]) -> str:
        """Flatten the non-system transcript into Agno's single string input."""
        dialogue = [m for m in messages if m.role in ("user", "assistant")]

        if len(dialogue) == 1:
            return dialogue[0].content

        parts = []
        for msg in dialogue:
            speaker = "User" if msg.role == "user" else "Assistant"
            parts.append(f"{speaker}: {msg.content}")
        return "\n\n".join(parts)

    def _get_system_prompt(self, messages: list[LLMMessage]) -> str | None:
        for msg in messages:
            if msg.role == "system":
                return msg.content
        return None

    async def _generate_with_model(
        self,
        model: str,
        messages: list[LLMMessage],
        sampling: _Sampling,
    ) -> LLMResponse:
        provider_type, _ = self._parse_model(model)

        if provider_type == "mock":
            return self._mock_response(model)

        agent = self._create_agent(model, self._get_system_prompt(messages), sampling)

        start_time = time.perf_counter()
        try:
            run_response = await agent.arun(self._format_messages_for_agno(messages))
            content = run_response.content if run_response.content else ""
        except Exception as e:
            error_msg = str(e).lower()
            if "rate" in error_msg and "limit" in error_msg:
                raise RateLimitError(f"Rate limited: {e}") from e
            raise ProviderError(f"Agno execution failed: {e}") from e

        latency_ms = (time.perf_counter() - start_time) * 1000

        logger.debug(
            "executor_generate_complete",
            model=model,
            step=self._step_name,
            latency_ms=round(latency_ms, 2),
            content_length=len(content),
        )

        return LLMResponse(
            content=str(content),
            model=model,
            stop_reason="end_turn",
            metadata={"latency_ms": latency_ms, "provider": provider_type},
        )

    # ========================================================================
    # Internal: OpenAI-compatible tool-augmented generation
    # ========================================================================

    def _get_client(self, provider_type: str) -> AsyncOpenAI:
        if provider_type in self._clients:
            return self._clients[provider_type]

        if provider_type not in _COMPATIBLE_ENDPOINTS:
            raise ModelError(f"Tool use not supported for provider '{provider_type}'")

        from openai import AsyncOpenAI

        base_url, key_env = _COMPATIBLE_ENDPOINTS[provider_type]
        api_key = os.environ.get(key_env)
        if not api_key:
            raise AuthenticationError(f"{key_env} environment variable not set")

        client = AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=self._timeout)
        self._clients[provider_type] = client
        return client

    async def _generate_with_tools(
        self,
        model: str,
        messages: list[LLMMessage],
        tools: list[ToolSchema],
        max_tokens: int,
        temperature: float,
        stop_sequences: list[str] | None,
    ) -> LLMResponse:
        provider_type, api_model = self._parse_model(model)

        if provider_type == "mock":
            return self._mock_response(model)

        import openai

        client = self._get_client(provider_type)
        request: dict[str, Any] = {
            "model": api_model,
            "messages": [self._to_openai_message(m) for m in messages],
            "tools": [
                {
                    "type": "function",
                    "function": {
                        "name": t.name,
                        "description": t.description,
                        "parameters": t.input_schema,
                    },
                }
                for t in tools
            ],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if stop_sequences:
            request["stop"] = stop_sequences

        start_time = time.perf_counter()
        try:
            completion = await client.chat.completions.create(**request)
        except openai.RateLimitError as e:
            raise RateLimitError(f"Rate limited: {e}") from e
        except openai.AuthenticationError as e:
            raise AuthenticationError(str(e)) from e
        except openai.NotFoundError as e:
            raise ModelError(f"Model not found: {api_model}") from e
        except openai.APIError as e:
            raise ProviderError(f"Chat completion failed: {e}") from e

        latency_ms = (time.perf_counter() - start_time) * 1000
        choice = completion.choices[0]
        tool_calls = [
            ToolCall(
                id=call.id,
                name=call.function.name,
                arguments=self._decode_arguments(call.function.arguments),
            )
            for call in (choice.message.tool_calls or [])
        ]

        usage = None
        if completion.usage:
            usage = TokenUsage(
                prompt_tokens=completion.usage.prompt_tokens,
                completion_tokens=completion.usage.completion_tokens,
                total_tokens=completion.usage.total_tokens,
            )

        stop_reason = _FINISH_REASONS.get(choice.finish_reason or "stop", "end_turn")
        if tool_calls:
            stop_reason = "tool_use"

        logger.debug(
            "executor_tool_generate_complete",
            model=model,
            step=self._step_name,
            latency_ms=round(latency_ms, 2),
            stop_reason=stop_reason,
            tool_calls=[c.name for c in tool_calls],
        )

        return LLMResponse(
            content=choice.message.content or "",
            model=model,
            stop_reason=stop_reason,
            tool_calls=tool_calls,
            usage=usage,
            metadata={"latency_ms": latency_ms, "provider": provider_type},
        )

    def _to_openai_message(self, message: LLMMessage) -> dict[str, Any]:
        if message.role == "tool":
            return {
                "role": "tool",
                "tool_call_id": message.tool_call_id,
                "content": message.content,
            }
        if message.role == "assistant" and message.tool_calls:
            return {
                "role": "assistant",
                "content": message.content or None,
                "tool_calls": [
                    {
                        "id": call.id,
                        "type": "function",
                        "function": {
                            "name": call.name,
                            "arguments": json.dumps(call.arguments),
                        },
                    }
                    for call in message.tool_calls
                ],
            }
        return {"role": message.role, "content": message.content}

    def _decode_arguments(self, raw: str | None) -> dict[str, Any]:
        if not raw:
            return {}
        try:
            decoded = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("tool_arguments_not_json", preview=raw[:200])
            return {}
        return decoded if isinstance(decoded, dict) else {}

    def _mock_response(self, model: str) -> LLMResponse:
        return LLMResponse(
            content=f"Mock response for {model}",
            model=model,
            stop_reason="end_turn",
            usage=TokenUsage(prompt_tokens=10, completion_tokens=5, total_tokens=15),
        )

    def _parse_model(self, model: str) -> tuple[str, str]:
        """Parse a model string into (provider_type, api_model).

        Examples:
            "openrouter/anthropic/claude-3.5-haiku" -> ("openrouter", "anthropic/claude-3.5-haiku")
            "openai/gpt-4o-mini" -> ("openai", "gpt-4o-mini")
            "mock/test" -> ("mock", "test")
        """
        parts = model.split("/")

        if len(parts) >= 3 and parts[0] == "openrouter":
            return "openrouter", "/".join(parts[1:])
        elif len(parts) >= 2:
            return parts[0], "/".join(parts[1:])
        return "mock", model


def create_executor_from_config(config: LLMConfig, step_name: str | None = None) -> LLMExecutor:
    """Build an executor from the `providers.llm` settings section."""
    return LLMExecutor(
        model=config.model,
        fallback_models=config.fallback_models,
        timeout=config.timeout,
        step_name=step_name,
    )
