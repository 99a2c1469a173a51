"""Support ticket tools."""

from typing import Any

from tastychat.providers.llm.base import ToolSchema
from tastychat.support.repository import TicketRepository
from tastychat.tools.models import ToolCategory, ToolContext, ToolExecutionError
from tastychat.tools.registry import ToolRegistry

CREATE_SUPPORT_TICKET = ToolSchema(
    name="create_support_ticket",
    description="Create a new support ticket",
    input_schema={
        "type": "object",
        "properties": {
            "email": {"type": "string", "description": "Customer email"},
            "subject": {"type": "string", "description": "Issue subject"},
            "description": {"type": "string", "description": "Detailed description"},
            "category": {
                "type": "string",
                "description": "Category: complaint, refund, missing_item, wrong_order",
            },
            "priority": {"type": "string", "description": "Priority: low, normal, high, urgent"},
            "order_number": {"type": "string", "description": "Related order number"},
        },
        "required": ["email", "subject", "description"],
    },
)

GET_TICKET_STATUS = ToolSchema(
    name="get_ticket_status",
    description="Get the status of a support ticket",
    input_schema={
        "type": "object",
        "properties": {"ticket_id": {"type": "string", "description": "Ticket id"}},
        "required": ["ticket_id"],
    },
)

_PRIORITIES = {"low", "normal", "high", "urgent"}


def _tickets(context: ToolContext) -> TicketRepository:
    if context.tickets is None:
        raise ToolExecutionError("Ticketing is not available")
    return context.tickets


async def create_support_ticket(data: dict[str, Any], context: ToolContext) -> dict[str, Any]:
    priority = data.get("priority") or "normal"
    ticket = await _tickets(context).create_ticket(
        data["email"],
        f"{data['subject']}\n\n{data['description']}",
        priority=priority if priority in _PRIORITIES else "normal",
        category=data.get("category") or "general",
        order_number=data.get("order_number"),
        session_id=context.session_id,
    )
    return {
        "ticket_id": ticket.id,
        "status": ticket.status.value,
        "created_at": ticket.created_at.isoformat(),
    }


async def get_ticket_status(data: dict[str, Any], context: ToolContext) -> dict[str, Any]:
    ticket = await _tickets(context).get_ticket(data["ticket_id"])
    if ticket is None:
        raise ToolExecutionError("Ticket not found")
    return {
        "id": ticket.id,
        "status": ticket.status.value,
        "category": ticket.category,
        "priority": ticket.priority,
        "created_at": ticket.created_at.isoformat(),
        "updated_at": ticket.updated_at.isoformat(),
        "assigned_agent": ticket.assigned_agent,
    }


def register_ticket_tools(registry: ToolRegistry) -> None:
    registry.register(CREATE_SUPPORT_TICKET, create_support_ticket, ToolCategory.TICKET)
    registry.register(GET_TICKET_STATUS, get_ticket_status, ToolCategory.TICKET)
