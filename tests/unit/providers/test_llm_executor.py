"""Tests for the prefix-routed LLM executor and its mock."""

import asyncio
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from tastychat.providers.llm import (
    AuthenticationError,
    ExecutionContext,
    LLMExecutor,
    LLMMessage,
    MockLLMExecutor,
    ModelError,
    ProviderError,
    RateLimitError,
    ToolCall,
    ToolSchema,
    clear_execution_context,
    set_execution_context,
)
from tastychat.providers.llm.mock import text_response

MESSAGES = [
    LLMMessage(role="system", content="Tu es l'assistant de Tasty Food."),
    LLMMessage(role="user", content="Bonjour"),
]
ORDER_TOOL = ToolSchema(
    name="get_order_status",
    description="Order status",
    input_schema={"type": "object", "properties": {"order_number": {"type": "string"}}},
)


def _completion(content=None, tool_calls=None, finish_reason="stop"):
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(
        choices=[SimpleNamespace(message=message, finish_reason=finish_reason)],
        usage=SimpleNamespace(prompt_tokens=20, completion_tokens=5, total_tokens=25),
    )


def _openai_call(call_id: str, name: str, arguments: str):
    return SimpleNamespace(id=call_id, function=SimpleNamespace(name=name, arguments=arguments))


@pytest.fixture(autouse=True)
def reset_execution_context():
    """Leave no execution context behind."""
    yield
    clear_execution_context()


class TestMockLLMExecutor:
    """Tests for MockLLMExecutor."""

    @pytest.mark.asyncio
    async def test_replays_script_then_default(self):
        """Should pop scripted responses, then return the default forever."""
        executor = MockLLMExecutor([text_response("first")], default_response="later")

        assert (await executor.generate(MESSAGES)).content == "first"
        assert (await executor.generate(MESSAGES)).content == "later"
        assert (await executor.generate(MESSAGES)).content == "later"
        assert executor.call_count == 3

    @pytest.mark.asyncio
    async def test_scripted_exception_raised(self):
        """Should raise exception items instead of returning them."""
        executor = MockLLMExecutor([RateLimitError("slow down")])

        with pytest.raises(RateLimitError):
            await executor.generate(MESSAGES)

    @pytest.mark.asyncio
    async def test_records_call_arguments(self):
        """Should record messages, tool names and sampling arguments."""
        executor = MockLLMExecutor()
        executor.queue(text_response("ok"))

        await executor.generate(MESSAGES, tools=[ORDER_TOOL], max_tokens=50, temperature=0.1)

        call = executor.call_history[0]
        assert call["tools"] == ["get_order_status"]
        assert call["max_tokens"] == 50
        assert call["temperature"] == 0.1
        assert call["messages"][1].content == "Bonjour"


class TestLLMExecutorRouting:
    """Tests for model-string routing and the fallback chain."""

    @pytest.mark.parametrize(
        ("model", "expected"),
        [
            ("openrouter/anthropic/claude-3.5-haiku", ("openrouter", "anthropic/claude-3.5-haiku")),
            ("openai/gpt-4o-mini", ("openai", "gpt-4o-mini")),
            ("anthropic/claude-3-5-haiku-latest", ("anthropic", "claude-3-5-haiku-latest")),
            ("mock/test", ("mock", "test")),
            ("bare-model", ("mock", "bare-model")),
        ],
    )
    def test_parse_model(self, model, expected):
        """Should split provider prefix from the API model id."""
        assert LLMExecutor(model=model)._parse_model(model) == expected

    @pytest.mark.asyncio
    async def test_mock_prefix(self):
        """Should answer mock/ models without any provider."""
        response = await LLMExecutor(model="mock/test").generate(MESSAGES)

        assert response.content == "Mock response for mock/test"
        assert response.usage.total_tokens == 15

    @pytest.mark.asyncio
    async def test_falls_back_after_rate_limit(self):
        """Should try the next model when the primary is rate limited."""
        executor = LLMExecutor(model="openai/gpt-4o-mini", fallback_models=["mock/backup"])
        agent = MagicMock()
        agent.arun = AsyncMock(side_effect=Exception("rate limit exceeded"))

        with patch.object(executor, "_create_agent", return_value=agent) as create_agent:
            response = await executor.generate(MESSAGES)

        assert response.content == "Mock response for mock/backup"
        model, system_prompt, _ = create_agent.call_args.args
        assert model == "openai/gpt-4o-mini"
        assert system_prompt == "Tu es l'assistant de Tasty Food."

    @pytest.mark.asyncio
    async def test_all_models_fail(self):
        """Should raise ProviderError naming every model tried."""
        executor = LLMExecutor(model="openai/gpt-4o-mini", step_name="reply")
        agent = MagicMock()
        agent.arun = AsyncMock(side_effect=Exception("connection reset"))

        with patch.object(executor, "_create_agent", return_value=agent):
            with pytest.raises(ProviderError, match="All models failed for step reply"):
                await executor.generate(MESSAGES)

    @pytest.mark.asyncio
    async def test_execution_context_attached(self):
        """Should copy the execution context into response metadata."""
        set_execution_context(ExecutionContext(session_id="s1", turn_id="t1", purpose="rag"))

        response = await LLMExecutor(model="mock/test").generate(MESSAGES)

        assert response.metadata["session_id"] == "s1"
        assert response.metadata["turn_id"] == "t1"
        assert response.metadata["purpose"] == "rag"

    def test_flattens_dialogue_for_agno(self):
        """Should join multi-turn dialogue with speaker labels."""
        executor = LLMExecutor(model="mock/test")
        messages = [*MESSAGES, LLMMessage(role="assistant", content="Salut"), LLMMessage(role="user", content="Horaires ?")]

        assert executor._format_messages_for_agno(messages) == (
            "User: Bonjour\n\nAssistant: Salut\n\nUser: Horaires ?"
        )
        assert executor._format_messages_for_agno(MESSAGES) == "Bonjour"


class _RecordingAgent:
    """Agent double that answers with the instructions it was built with."""

    def __init__(self, model, instructions=None, **kwargs):
        self.model = model
        self.instructions = instructions

    async def arun(self, message):
        await asyncio.sleep(0)
        return SimpleNamespace(content=self.instructions[0])


class TestAgnoPath:
    """Tests for plain generation through Agno."""

    @pytest.mark.asyncio
    async def test_concurrent_calls_keep_their_system_prompt(self):
        """Should never let one session's prompt leak into another's call."""
        executor = LLMExecutor(model="openai/gpt-4o-mini")

        def transcript(prompt: str) -> list[LLMMessage]:
            return [LLMMessage(role="system", content=prompt), LLMMessage(role="user", content="Bonjour")]

        with (
            patch("agno.agent.Agent", _RecordingAgent),
            patch.object(executor, "_get_or_create_model", return_value="model"),
        ):
            first, second = await asyncio.gather(
                executor.generate(transcript("PROMPT-A")),
                executor.generate(transcript("PROMPT-B")),
            )

        assert first.content == "PROMPT-A"
        assert second.content == "PROMPT-B"

    @pytest.mark.asyncio
    async def test_sampling_forwarded(self):
        """Should hand max_tokens, temperature and stop sequences to the model."""
        executor = LLMExecutor(model="openai/gpt-4o-mini")
        agent = MagicMock()
        agent.arun = AsyncMock(return_value=SimpleNamespace(content="Bonjour !"))

        with patch.object(executor, "_create_agent", return_value=agent) as create_agent:
            await executor.generate(MESSAGES, max_tokens=50, temperature=0.1, stop_sequences=["FIN"])

        assert create_agent.call_args.args[2] == (50, 0.1, ("FIN",))

    def test_models_cached_per_sampling(self):
        """Should reuse a configured model only for identical sampling."""
        executor = LLMExecutor(model="openai/gpt-4o-mini")

        with patch.object(executor, "_create_agno_model", side_effect=lambda *_: object()):
            a = executor._get_or_create_model("openai/gpt-4o-mini", (100, 0.3, ()))
            b = executor._get_or_create_model("openai/gpt-4o-mini", (100, 0.3, ()))
            c = executor._get_or_create_model("openai/gpt-4o-mini", (100, 0.9, ()))

        assert a is b
        assert a is not c

    @pytest.mark.parametrize(
        ("provider", "stop_key"),
        [("anthropic", "stop_sequences"), ("openai", "stop"), ("groq", "stop"), ("openrouter", "stop")],
    )
    def test_sampling_options(self, provider, stop_key):
        """Should name the stop option the way each Agno model class does."""
        assert LLMExecutor._sampling_options(provider, (200, 0.2, ("FIN",))) == {
            "max_tokens": 200,
            "temperature": 0.2,
            stop_key: ["FIN"],
        }

    def test_no_stop_option_without_sequences(self):
        assert LLMExecutor._sampling_options("openai", (200, 0.2, ())) == {
            "max_tokens": 200,
            "temperature": 0.2,
        }


class TestToolCallingPath:
    """Tests for OpenAI-compatible tool-augmented generation."""

    @pytest.fixture
    def client(self):
        """Chat completions client double."""
        client = MagicMock()
        client.chat.completions.create = AsyncMock()
        return client

    @pytest.fixture
    def executor(self, client):
        """Executor whose OpenAI-compatible client is the double."""
        executor = LLMExecutor(model="openai/gpt-4o-mini")
        executor._clients["openai"] = client
        return executor

    @pytest.mark.asyncio
    async def test_tool_call_decoded(self, executor, client):
        """Should normalize tool calls and the stop reason."""
        client.chat.completions.create.return_value = _completion(
            tool_calls=[_openai_call("c1", "get_order_status", '{"order_number": "12345"}')],
            finish_reason="tool_calls",
        )

        response = await executor.generate(MESSAGES, tools=[ORDER_TOOL])

        assert response.wants_tool
        assert response.tool_calls == [
            ToolCall(id="c1", name="get_order_status", arguments={"order_number": "12345"})
        ]
        assert response.usage.total_tokens == 25
        request = client.chat.completions.create.call_args.kwargs
        assert request["model"] == "gpt-4o-mini"
        assert request["tools"][0]["function"]["parameters"] == ORDER_TOOL.input_schema

    @pytest.mark.asyncio
    async def test_transcript_serialized(self, executor, client):
        """Should send assistant tool calls and tool results in OpenAI format."""
        client.chat.completions.create.return_value = _completion(content="En route !")
        call = ToolCall(id="c1", name="get_order_status", arguments={"order_number": "12345"})
        transcript = [
            *MESSAGES,
            LLMMessage(role="assistant", tool_calls=[call]),
            LLMMessage(role="tool", content='{"status": "preparing"}', tool_call_id="c1"),
        ]

        response = await executor.generate(transcript, tools=[ORDER_TOOL])

        sent = client.chat.completions.create.call_args.kwargs["messages"]
        assert sent[2]["content"] is None
        assert json.loads(sent[2]["tool_calls"][0]["function"]["arguments"]) == {"order_number": "12345"}
        assert sent[3] == {"role": "tool", "tool_call_id": "c1", "content": '{"status": "preparing"}'}
        assert response.content == "En route !"
        assert response.stop_reason == "end_turn"

    @pytest.mark.asyncio
    async def test_length_stop_reason(self, executor, client):
        """Should map a length finish to max_tokens."""
        client.chat.completions.create.return_value = _completion(content="Trop", finish_reason="length")

        response = await executor.generate(MESSAGES, tools=[ORDER_TOOL])

        assert response.stop_reason == "max_tokens"

    def test_malformed_arguments_become_empty(self, executor):
        """Should treat non-JSON or non-object arguments as no arguments."""
        assert executor._decode_arguments("{not json") == {}
        assert executor._decode_arguments("[1, 2]") == {}
        assert executor._decode_arguments(None) == {}

    def test_missing_api_key(self, monkeypatch):
        """Should refuse to build a client without credentials."""
        monkeypatch.delenv("GROQ_API_KEY", raising=False)

        with pytest.raises(AuthenticationError, match="GROQ_API_KEY"):
            LLMExecutor(model="groq/llama")._get_client("groq")

    def test_unsupported_provider(self):
        """Should reject tool use for providers without a compatible endpoint."""
        with pytest.raises(ModelError):
            LLMExecutor(model="bedrock/titan")._get_client("bedrock")
