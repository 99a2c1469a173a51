"""Bounded function-calling loop.

The transcript is an explicit, append-only list of LLMMessage: the
assistant message carrying a tool call is followed by the tool's result
message, then the model is called again. Exactly one tool runs per round,
and the loop stops after `max_iterations` rounds even if the model keeps
asking for tools.

When a budget callback is given, every model call is charged to it first.
A refused charge ends the loop with `stop_reason="budget_exhausted"`.
"""

import json
import time
from collections.abc import Callable
from typing import Any

from tastychat.observability.logging import get_logger
from tastychat.observability.metrics import LLM_CALLS, TOOL_EXECUTIONS
from tastychat.providers.llm.base import LLMMessage, LLMResponse, ToolCall, ToolSchema
from tastychat.providers.llm.executor import LLMExecutor
from tastychat.tools.models import (
    OrchestrationResult,
    OrchestrationStopReason,
    ToolContext,
    ToolExecutionError,
    ToolInputError,
    ToolNotFoundError,
    ToolResult,
)
from tastychat.tools.registry import ToolRegistry

logger = get_logger(__name__)

EMPTY_RESPONSE = "No response generated."

BudgetCheck = Callable[[], bool]


class ToolOrchestrator:
    """Drives tool-augmented generation against an LLMExecutor."""

    def __init__(
        self,
        executor: LLMExecutor,
        registry: ToolRegistry,
        max_iterations: int = 10,
        max_tokens: int = 1024,
        temperature: float = 0.3,
    ) -> None:
        self._executor = executor
        self._registry = registry
        self._max_iterations = max_iterations
        self._max_tokens = max_tokens
        self._temperature = temperature

    async def execute_with_tools(
        self,
        query: str,
        system_prompt: str,
        allowed_tools: list[str],
        context: ToolContext,
        history: list[LLMMessage] | None = None,
        acquire_budget: BudgetCheck | None = None,
    ) -> OrchestrationResult:
        """Answer `query`, letting the model call any of `allowed_tools`.

        Tool failures are fed back to the model as tool messages. Provider
        errors propagate to the caller.
        """
        tools = self._registry.definitions(allowed_tools)
        messages: list[LLMMessage] = [
            LLMMessage(role="system", content=system_prompt),
            *(history or []),
            LLMMessage(role="user", content=query),
        ]
        tools_used: list[ToolResult] = []
        iterations = 0

        if acquire_budget is not None and not acquire_budget():
            return OrchestrationResult(final_response=EMPTY_RESPONSE, stop_reason="budget_exhausted")
        response = await self._call(messages, tools)

        while response.wants_tool:
            if iterations >= self._max_iterations:
                logger.warning(
                    "tool_loop_truncated",
                    session_id=context.session_id,
                    iterations=iterations,
                )
                return self._result(response, tools_used, iterations, "max_iterations")

            call = response.tool_calls[0]
            result = await self._run_tool(call, allowed_tools, context)
            tools_used.append(result)

            messages.append(LLMMessage(role="assistant", content=response.content, tool_calls=[call]))
            messages.append(
                LLMMessage(
                    role="tool",
                    content=self._tool_message(result),
                    tool_call_id=call.id,
                )
            )
            iterations += 1

            if acquire_budget is not None and not acquire_budget():
                logger.warning(
                    "tool_loop_budget_exhausted",
                    session_id=context.session_id,
                    iterations=iterations,
                )
                return OrchestrationResult(
                    final_response=EMPTY_RESPONSE,
                    tools_used=tools_used,
                    stop_reason="budget_exhausted",
                    iterations=iterations,
                )
            response = await self._call(messages, tools)

        return self._result(response, tools_used, iterations, response.stop_reason)

    @staticmethod
    def _result(
        response: LLMResponse,
        tools_used: list[ToolResult],
        iterations: int,
        stop_reason: OrchestrationStopReason,
    ) -> OrchestrationResult:
        return OrchestrationResult(
            final_response=response.content.strip() or EMPTY_RESPONSE,
            tools_used=tools_used,
            stop_reason=stop_reason,
            iterations=iterations,
        )

    async def _call(self, messages: list[LLMMessage], tools: list[ToolSchema]) -> LLMResponse:
        try:
            response = await self._executor.generate(
                messages,
                tools=tools or None,
                max_tokens=self._max_tokens,
                temperature=self._temperature,
            )
        except Exception:
            LLM_CALLS.labels(purpose="tools", outcome="error").inc()
            raise
        LLM_CALLS.labels(purpose="tools", outcome="success").inc()
        return response

    async def _run_tool(
        self,
        call: ToolCall,
        allowed_tools: list[str],
        context: ToolContext,
    ) -> ToolResult:
        start = time.perf_counter()
        output: Any = None
        error: str | None = None

        try:
            if call.name not in allowed_tools:
                raise ToolNotFoundError(call.name)
            output = await self._registry.execute(call.name, call.arguments, context)
        except (ToolNotFoundError, ToolInputError, ToolExecutionError) as e:
            error = str(e)

        elapsed_ms = (time.perf_counter() - start) * 1000
        success = error is None
        TOOL_EXECUTIONS.labels(tool=call.name, success=str(success).lower()).inc()
        logger.info(
            "tool_executed",
            session_id=context.session_id,
            tool=call.name,
            success=success,
            error=error,
            execution_time_ms=round(elapsed_ms, 2),
        )
        return ToolResult(
            tool_name=call.name,
            input=call.arguments,
            output=output,
            error=error,
            success=success,
            execution_time_ms=elapsed_ms,
            call_id=call.id,
        )

    @staticmethod
    def _tool_message(result: ToolResult) -> str:
        if result.success:
            return json.dumps(result.output, default=str, ensure_ascii=False)
        return f"Error: {result.error}"
