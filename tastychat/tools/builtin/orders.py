"""Order lookup and cancellation tools."""

from typing import Any

from tastychat.providers.llm.base import ToolSchema
from tastychat.support.models import CANCELLABLE_STATUSES, OrderStatus
from tastychat.support.repository import OrderRepository
from tastychat.tools.models import ToolCategory, ToolContext, ToolExecutionError
from tastychat.tools.registry import ToolRegistry

GET_ORDER_STATUS = ToolSchema(
    name="get_order_status",
    description="Get the status of an order (tracking, ETA, items, branch)",
    input_schema={
        "type": "object",
        "properties": {
            "order_number": {"type": "string", "description": "Order number"},
            "platform": {
                "type": "string",
                "description": "Platform: ubereats, deliveroo, takeaway, website",
            },
        },
        "required": ["order_number"],
    },
)

LIST_USER_ORDERS = ToolSchema(
    name="list_user_orders",
    description="List the most recent orders of a customer",
    input_schema={
        "type": "object",
        "properties": {
            "email": {"type": "string", "description": "Customer email"},
            "limit": {"type": "integer", "description": "Maximum orders to return (default 5)"},
        },
        "required": ["email"],
    },
)

CANCEL_ORDER = ToolSchema(
    name="cancel_order",
    description="Cancel an order if it has not started preparation",
    input_schema={
        "type": "object",
        "properties": {
            "order_number": {"type": "string", "description": "Order number"},
            "reason": {"type": "string", "description": "Reason for cancellation"},
        },
        "required": ["order_number"],
    },
)


def _orders(context: ToolContext) -> OrderRepository:
    if context.orders is None:
        raise ToolExecutionError("Order lookup is not available")
    return context.orders


async def get_order_status(data: dict[str, Any], context: ToolContext) -> dict[str, Any]:
    order = await _orders(context).get_order(data["order_number"])
    if order is None:
        raise ToolExecutionError(f"Order not found: {data['order_number']}")
    return {
        "order_number": order.order_number,
        "status": order.status.value,
        "estimated_arrival": order.estimated_arrival.isoformat() if order.estimated_arrival else None,
        "items": order.items,
        "total": order.total,
        "branch": order.branch,
        "platform": order.platform,
        "created_at": order.created_at.isoformat(),
    }


async def list_user_orders(data: dict[str, Any], context: ToolContext) -> list[dict[str, Any]]:
    orders = await _orders(context).list_orders_by_email(data["email"], limit=data.get("limit") or 5)
    return [
        {
            "order_number": o.order_number,
            "status": o.status.value,
            "total": o.total,
            "created_at": o.created_at.isoformat(),
        }
        for o in orders
    ]


async def cancel_order(data: dict[str, Any], context: ToolContext) -> dict[str, Any]:
    repo = _orders(context)
    order = await repo.get_order(data["order_number"])
    if order is None:
        raise ToolExecutionError(f"Order not found: {data['order_number']}")
    if order.status not in CANCELLABLE_STATUSES:
        raise ToolExecutionError(f"Cannot cancel order with status: {order.status.value}")

    await repo.update_order_status(order.order_number, OrderStatus.CANCELLED, reason=data.get("reason"))
    return {"success": True, "order_number": order.order_number, "new_status": "cancelled"}


def register_order_tools(registry: ToolRegistry) -> None:
    registry.register(GET_ORDER_STATUS, get_order_status, ToolCategory.ORDER)
    registry.register(LIST_USER_ORDERS, list_user_orders, ToolCategory.ORDER)
    registry.register(CANCEL_ORDER, cancel_order, ToolCategory.ORDER)
