"""Mock LLM executor for testing."""

from typing import Any

from tastychat.providers.llm.base import LLMMessage, LLMResponse, ToolCall, ToolSchema
from tastychat.providers.llm.executor import LLMExecutor


class MockLLMExecutor(LLMExecutor):
    """Executor that replays scripted responses without network access.

    Each `generate` call pops the next scripted item; an item that is an
    exception instance is raised instead of returned. Once the script is
    exhausted the default response is returned forever.
    """

    def __init__(
        self,
        script: list[LLMResponse | Exception] | None = None,
        default_response: str = "Mock response",
        model: str = "mock/test",
    ):
        super().__init__(model=model)
        self._script = list(script or [])
        self._default_response = default_response
        self._call_history: list[dict[str, Any]] = []

    @property
    def call_history(self) -> list[dict[str, Any]]:
        """Recorded calls for test assertions."""
        return self._call_history

    @property
    def call_count(self) -> int:
        return len(self._call_history)

    def queue(self, *items: LLMResponse | Exception) -> None:
        """Append scripted responses."""
        self._script.extend(items)

    async def generate(
        self,
        messages: list[LLMMessage],
        *,
        tools: list[ToolSchema] | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.7,
        stop_sequences: list[str] | None = None,
    ) -> LLMResponse:
        self._call_history.append({
            "messages": [m.model_copy(deep=True) for m in messages],
            "tools": [t.name for t in tools or []],
            "max_tokens": max_tokens,
            "temperature": temperature,
            "stop_sequences": stop_sequences,
        })

        if self._script:
            item = self._script.pop(0)
            if isinstance(item, Exception):
                raise item
            return item

        return LLMResponse(content=self._default_response, model=self.model)


def tool_use_response(name: str, arguments: dict[str, Any], call_id: str = "call_1") -> LLMResponse:
    """Build a response in which the model asks for one tool call."""
    return LLMResponse(
        content="",
        model="mock/test",
        stop_reason="tool_use",
        tool_calls=[ToolCall(id=call_id, name=name, arguments=arguments)],
    )


def text_response(content: str) -> LLMResponse:
    """Build a final text response."""
    return LLMResponse(content=content, model="mock/test", stop_reason="end_turn")
