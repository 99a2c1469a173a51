"""Support collaborators: tickets, orders, notifications and the agent queue."""

from tastychat.support.agent_queue import AgentQueue, InMemoryAgentQueue
from tastychat.support.handoff import HandoffCoordinator
from tastychat.support.models import (
    AgentQueueItem,
    Order,
    OrderStatus,
    Ticket,
    TicketMessage,
    TicketStatus,
)
from tastychat.support.notifications import (
    LoggingNotifier,
    NotificationDispatcher,
    NotificationError,
    NotificationEvent,
    Notifier,
    WebhookNotifier,
)
from tastychat.support.repository import OrderRepository, TicketNotFoundError, TicketRepository
from tastychat.support.stores import InMemoryOrderRepository, InMemoryTicketRepository

__all__ = [
    "AgentQueue",
    "AgentQueueItem",
    "HandoffCoordinator",
    "InMemoryAgentQueue",
    "InMemoryOrderRepository",
    "InMemoryTicketRepository",
    "LoggingNotifier",
    "NotificationDispatcher",
    "NotificationError",
    "NotificationEvent",
    "Notifier",
    "Order",
    "OrderRepository",
    "OrderStatus",
    "Ticket",
    "TicketMessage",
    "TicketNotFoundError",
    "TicketRepository",
    "TicketStatus",
    "WebhookNotifier",
]
