"""Tests for the bounded tool-calling loop."""

import json

import pytest

from tastychat.providers.llm import MockLLMExecutor, ProviderError
from tastychat.providers.llm.mock import text_response, tool_use_response
from tastychat.support.models import Order, OrderStatus
from tastychat.support.stores import InMemoryOrderRepository
from tastychat.tools import ToolOrchestrator, ToolRegistry
from tastychat.tools.builtin import register_builtin_tools
from tastychat.tools.models import ToolContext
from tastychat.tools.orchestrator import EMPTY_RESPONSE

ALLOWED = ["get_order_status", "get_branch_contact"]


@pytest.fixture
def registry() -> ToolRegistry:
    """Registry with the built-in tools."""
    return register_builtin_tools(ToolRegistry())


@pytest.fixture
def tool_context() -> ToolContext:
    """Context with one order out for delivery."""
    orders = InMemoryOrderRepository(
        [Order(order_number="12345", email="a@b.be", status=OrderStatus.OUT_FOR_DELIVERY)]
    )
    return ToolContext(session_id="s", orders=orders)


class TestExecuteWithTools:
    """Tests for ToolOrchestrator.execute_with_tools."""

    @pytest.mark.asyncio
    async def test_direct_answer(self, registry: ToolRegistry, tool_context: ToolContext) -> None:
        executor = MockLLMExecutor([text_response("Bonjour !")])
        orchestrator = ToolOrchestrator(executor, registry)

        result = await orchestrator.execute_with_tools("Bonjour", "system", ALLOWED, tool_context)

        assert result.final_response == "Bonjour !"
        assert result.tools_used == []
        assert result.stop_reason == "end_turn"
        assert result.iterations == 0
        assert executor.call_history[0]["tools"] == ALLOWED

    @pytest.mark.asyncio
    async def test_tool_round_trip(self, registry: ToolRegistry, tool_context: ToolContext) -> None:
        executor = MockLLMExecutor([
            tool_use_response("get_order_status", {"order_number": "12345"}),
            text_response("Votre commande est en route."),
        ])
        orchestrator = ToolOrchestrator(executor, registry)

        result = await orchestrator.execute_with_tools(
            "Où est ma commande 12345 ?", "system", ALLOWED, tool_context
        )

        assert result.final_response == "Votre commande est en route."
        assert result.iterations == 1
        assert result.tools_used[0].success
        assert result.tools_used[0].output["status"] == "out_for_delivery"

        second_call = executor.call_history[1]["messages"]
        assert [m.role for m in second_call] == ["system", "user", "assistant", "tool"]
        assert second_call[2].tool_calls[0].name == "get_order_status"
        assert second_call[3].tool_call_id == "call_1"
        assert json.loads(second_call[3].content)["order_number"] == "12345"

    @pytest.mark.asyncio
    async def test_disallowed_tool_reported_to_model(
        self, registry: ToolRegistry, tool_context: ToolContext
    ) -> None:
        executor = MockLLMExecutor([
            tool_use_response("cancel_order", {"order_number": "12345"}),
            text_response("Je ne peux pas annuler."),
        ])
        orchestrator = ToolOrchestrator(executor, registry)

        result = await orchestrator.execute_with_tools("Annule", "system", ALLOWED, tool_context)

        assert not result.tools_used[0].success
        assert result.tools_used[0].error == "Tool not found: cancel_order"
        assert executor.call_history[1]["messages"][-1].content == "Error: Tool not found: cancel_order"

    @pytest.mark.asyncio
    async def test_invalid_input_is_a_failed_result(
        self, registry: ToolRegistry, tool_context: ToolContext
    ) -> None:
        executor = MockLLMExecutor([
            tool_use_response("get_order_status", {}),
            text_response("Quel est votre numéro de commande ?"),
        ])

        result = await ToolOrchestrator(executor, registry).execute_with_tools(
            "Où est ma commande ?", "system", ALLOWED, tool_context
        )

        assert result.tools_used[0].error == "Missing required field: order_number"
        assert result.final_response == "Quel est votre numéro de commande ?"

    @pytest.mark.asyncio
    async def test_loop_capped(self, registry: ToolRegistry, tool_context: ToolContext) -> None:
        call = tool_use_response("get_order_status", {"order_number": "12345"})
        executor = MockLLMExecutor([call, call, call, call])
        orchestrator = ToolOrchestrator(executor, registry, max_iterations=2)

        result = await orchestrator.execute_with_tools("?", "system", ALLOWED, tool_context)

        assert result.truncated
        assert result.stop_reason == "max_iterations"
        assert result.iterations == 2
        assert len(result.tools_used) == 2
        assert result.final_response == EMPTY_RESPONSE
        assert executor.call_count == 3

    @pytest.mark.asyncio
    async def test_history_is_sent_before_query(
        self, registry: ToolRegistry, tool_context: ToolContext
    ) -> None:
        from tastychat.providers.llm.base import LLMMessage

        executor = MockLLMExecutor([text_response("ok")])
        history = [LLMMessage(role="user", content="avant"), LLMMessage(role="assistant", content="oui")]

        await ToolOrchestrator(executor, registry).execute_with_tools(
            "maintenant", "system", ALLOWED, tool_context, history=history
        )

        contents = [m.content for m in executor.call_history[0]["messages"]]
        assert contents == ["system", "avant", "oui", "maintenant"]

    @pytest.mark.asyncio
    async def test_provider_error_propagates(
        self, registry: ToolRegistry, tool_context: ToolContext
    ) -> None:
        executor = MockLLMExecutor([ProviderError("down")])

        with pytest.raises(ProviderError):
            await ToolOrchestrator(executor, registry).execute_with_tools(
                "?", "system", ALLOWED, tool_context
            )


class TestModelCallBudget:
    """Tests for charging each model call of the loop to a budget."""

    @staticmethod
    def _budget(units: int):
        charges: list[bool] = []

        def acquire() -> bool:
            allowed = len([c for c in charges if c]) < units
            charges.append(allowed)
            return allowed

        return acquire, charges

    @pytest.mark.asyncio
    async def test_every_call_is_charged(self, registry: ToolRegistry, tool_context: ToolContext) -> None:
        call = tool_use_response("get_order_status", {"order_number": "12345"})
        executor = MockLLMExecutor([call, call, text_response("En route.")])
        acquire, charges = self._budget(10)

        result = await ToolOrchestrator(executor, registry).execute_with_tools(
            "Où est ma commande 12345 ?", "system", ALLOWED, tool_context, acquire_budget=acquire
        )

        assert result.final_response == "En route."
        assert charges == [True, True, True]
        assert executor.call_count == 3

    @pytest.mark.asyncio
    async def test_budget_spent_mid_loop(self, registry: ToolRegistry, tool_context: ToolContext) -> None:
        call = tool_use_response("get_order_status", {"order_number": "12345"})
        executor = MockLLMExecutor([call, call, call, call, text_response("En route.")])
        acquire, _ = self._budget(1)

        result = await ToolOrchestrator(executor, registry).execute_with_tools(
            "Où est ma commande 12345 ?", "system", ALLOWED, tool_context, acquire_budget=acquire
        )

        assert result.stop_reason == "budget_exhausted"
        assert result.final_response == EMPTY_RESPONSE
        assert result.iterations == 1
        assert len(result.tools_used) == 1
        assert executor.call_count == 1

    @pytest.mark.asyncio
    async def test_no_budget_no_call(self, registry: ToolRegistry, tool_context: ToolContext) -> None:
        executor = MockLLMExecutor([text_response("jamais")])

        result = await ToolOrchestrator(executor, registry).execute_with_tools(
            "?", "system", ALLOWED, tool_context, acquire_budget=lambda: False
        )

        assert result.stop_reason == "budget_exhausted"
        assert result.tools_used == []
        assert executor.call_count == 0
