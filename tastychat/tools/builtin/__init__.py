"""Built-in tools and the per-intent allow list."""

from tastychat.nlp.models import IntentType
from tastychat.tools.builtin.branches import BRANCHES, is_open, register_branch_tools
from tastychat.tools.builtin.orders import register_order_tools
from tastychat.tools.builtin.tickets import register_ticket_tools
from tastychat.tools.registry import ToolRegistry

_ORDER_TOOLS = ["get_order_status", "get_branch_contact"]
_ISSUE_TOOLS = ["create_support_ticket", "get_order_status"]

TOOLS_BY_INTENT: dict[IntentType, list[str]] = {
    IntentType.TRACK_ORDER: _ORDER_TOOLS,
    IntentType.ORDER_STATUS: _ORDER_TOOLS,
    IntentType.DELIVERY_TIME: _ORDER_TOOLS,
    IntentType.COMPLAINT: _ISSUE_TOOLS,
    IntentType.REFUND: _ISSUE_TOOLS,
    IntentType.MISSING_ITEM: _ISSUE_TOOLS,
    IntentType.WRONG_ORDER: _ISSUE_TOOLS,
    IntentType.FAQ_HOURS: ["get_branch_hours", "get_branch_contact"],
    IntentType.CONTACT_SUPPORT: ["create_support_ticket", "get_ticket_status"],
    IntentType.SPEAK_AGENT: ["create_support_ticket", "get_ticket_status"],
}


def allowed_tools_for(intent: IntentType) -> list[str]:
    return list(TOOLS_BY_INTENT.get(intent, []))


def register_builtin_tools(registry: ToolRegistry) -> ToolRegistry:
    register_order_tools(registry)
    register_branch_tools(registry)
    register_ticket_tools(registry)
    return registry


__all__ = [
    "BRANCHES",
    "TOOLS_BY_INTENT",
    "allowed_tools_for",
    "is_open",
    "register_builtin_tools",
]
