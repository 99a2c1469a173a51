"""Support domain models: tickets, ticket messages, orders, agent queue items."""

from datetime import UTC, datetime
from enum import Enum
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, Field

from tastychat.nlp.models import Priority

AuthorType = Literal["customer", "agent", "bot"]


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


def new_id() -> str:
    return str(uuid4())


class TicketStatus(str, Enum):
    """Lifecycle of a support ticket."""

    OPEN = "open"
    ASSIGNED = "assigned"
    ANSWERED = "answered"
    CLOSED = "closed"
    TIMEOUT = "timeout"


class Ticket(BaseModel):
    """A customer support request."""

    id: str = Field(default_factory=new_id, description="Ticket identifier")
    email: str = Field(..., description="Customer email")
    message: str = Field(..., description="Initial request text")
    status: TicketStatus = Field(default=TicketStatus.OPEN)
    priority: Priority = Field(default="normal")
    category: str = Field(default="general", description="complaint, refund, missing_item...")
    order_number: str | None = Field(default=None, description="Related order")
    session_id: str | None = Field(default=None, description="Originating chat session")
    assigned_agent: str | None = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    last_agent_reply_at: datetime | None = Field(default=None)


class TicketMessage(BaseModel):
    """One message on a ticket thread."""

    id: str = Field(default_factory=new_id)
    ticket_id: str = Field(...)
    body: str = Field(...)
    author_type: AuthorType = Field(...)
    created_at: datetime = Field(default_factory=utc_now)


class OrderStatus(str, Enum):
    """Order fulfilment status."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


CANCELLABLE_STATUSES: frozenset[OrderStatus] = frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED})


class Order(BaseModel):
    """A customer order as seen by support."""

    order_number: str = Field(..., description="Platform order number")
    email: str = Field(..., description="Customer email")
    status: OrderStatus = Field(default=OrderStatus.PENDING)
    branch: str | None = Field(default=None)
    platform: str | None = Field(default=None)
    items: list[str] = Field(default_factory=list)
    total: float = Field(default=0.0, ge=0.0, description="Total in EUR")
    estimated_arrival: datetime | None = Field(default=None)
    cancellation_reason: str | None = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)


class AgentQueueItem(BaseModel):
    """A conversation waiting for a human agent."""

    session_id: str = Field(...)
    priority: Priority = Field(default="normal")
    summary: str = Field(..., description="Why the conversation needs a human")
    intent: str | None = Field(default=None)
    enqueued_at: datetime = Field(default_factory=utc_now)
