"""In-memory implementations of the support repositories."""

from collections import defaultdict
from collections.abc import Callable
from datetime import datetime, timedelta

from tastychat.observability.logging import get_logger
from tastychat.support.models import (
    AuthorType,
    Order,
    OrderStatus,
    Ticket,
    TicketMessage,
    TicketStatus,
    utc_now,
)
from tastychat.support.repository import (
    MessageCallback,
    OrderRepository,
    TicketNotFoundError,
    TicketRepository,
    Unsubscribe,
)

logger = get_logger(__name__)


class InMemoryTicketRepository(TicketRepository):
    """In-memory TicketRepository for testing and development.

    Subscribers are called synchronously from `append_message`.
    Not suitable for production use.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._clock = clock
        self._tickets: dict[str, Ticket] = {}
        self._messages: dict[str, list[TicketMessage]] = defaultdict(list)
        self._subscribers: dict[str, list[MessageCallback]] = defaultdict(list)

    async def create_ticket(
        self,
        email: str,
        message: str,
        *,
        priority: str = "normal",
        category: str = "general",
        order_number: str | None = None,
        session_id: str | None = None,
    ) -> Ticket:
        now = self._clock()
        ticket = Ticket(
            email=email,
            message=message,
            priority=priority,
            category=category,
            order_number=order_number,
            session_id=session_id,
            created_at=now,
            updated_at=now,
        )
        self._tickets[ticket.id] = ticket
        return ticket

    async def get_ticket(self, ticket_id: str) -> Ticket | None:
        return self._tickets.get(ticket_id)

    async def append_message(
        self,
        ticket_id: str,
        body: str,
        author_type: AuthorType,
    ) -> TicketMessage:
        ticket = self._require(ticket_id)
        message = TicketMessage(
            ticket_id=ticket_id,
            body=body,
            author_type=author_type,
            created_at=self._clock(),
        )
        self._messages[ticket_id].append(message)

        if author_type == "agent":
            ticket.last_agent_reply_at = message.created_at
            ticket.status = TicketStatus.ANSWERED
        ticket.updated_at = message.created_at

        for callback in list(self._subscribers[ticket_id]):
            try:
                callback(message)
            except Exception as e:
                logger.error(
                    "ticket_subscriber_failed",
                    ticket_id=ticket_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
        return message

    async def list_messages(self, ticket_id: str) -> list[TicketMessage]:
        return list(self._messages.get(ticket_id, []))

    def subscribe_to_messages(self, ticket_id: str, callback: MessageCallback) -> Unsubscribe:
        self._subscribers[ticket_id].append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers[ticket_id]:
                self._subscribers[ticket_id].remove(callback)

        return unsubscribe

    async def is_timed_out(self, ticket_id: str, hours: float = 24) -> bool:
        ticket = self._tickets.get(ticket_id)
        if ticket is None or ticket.last_agent_reply_at is not None:
            return False
        if ticket.status in (TicketStatus.CLOSED, TicketStatus.TIMEOUT):
            return False
        return self._clock() - ticket.created_at > timedelta(hours=hours)

    async def update_status(self, ticket_id: str, status: TicketStatus) -> Ticket:
        ticket = self._require(ticket_id)
        ticket.status = status
        ticket.updated_at = self._clock()
        return ticket

    async def assign_ticket(self, ticket_id: str, agent: str) -> Ticket:
        ticket = self._require(ticket_id)
        ticket.assigned_agent = agent
        ticket.status = TicketStatus.ASSIGNED
        ticket.updated_at = self._clock()
        return ticket

    async def list_tickets(
        self,
        *,
        email: str | None = None,
        status: TicketStatus | None = None,
        limit: int = 100,
    ) -> list[Ticket]:
        results = [
            t
            for t in self._tickets.values()
            if (email is None or t.email == email) and (status is None or t.status == status)
        ]
        results.sort(key=lambda t: t.created_at, reverse=True)
        return results[:limit]

    def _require(self, ticket_id: str) -> Ticket:
        ticket = self._tickets.get(ticket_id)
        if ticket is None:
            raise TicketNotFoundError(ticket_id)
        return ticket


class InMemoryOrderRepository(OrderRepository):
    """In-memory OrderRepository seeded with a list of orders."""

    def __init__(self, orders: list[Order] | None = None) -> None:
        self._orders: dict[str, Order] = {o.order_number: o for o in orders or []}

    def add(self, order: Order) -> None:
        self._orders[order.order_number] = order

    async def get_order(self, order_number: str) -> Order | None:
        return self._orders.get(order_number)

    async def list_orders_by_email(self, email: str, *, limit: int = 5) -> list[Order]:
        orders = [o for o in self._orders.values() if o.email.lower() == email.lower()]
        orders.sort(key=lambda o: o.created_at, reverse=True)
        return orders[:limit]

    async def update_order_status(
        self,
        order_number: str,
        status: OrderStatus,
        *,
        reason: str | None = None,
    ) -> Order | None:
        order = self._orders.get(order_number)
        if order is None:
            return None
        updated = order.model_copy(update={"status": status, "cancellation_reason": reason})
        self._orders[order_number] = updated
        return updated
