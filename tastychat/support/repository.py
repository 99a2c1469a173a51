"""Repository interfaces for ticket and order persistence."""

from abc import ABC, abstractmethod
from collections.abc import Callable

from tastychat.support.models import (
    AuthorType,
    Order,
    OrderStatus,
    Ticket,
    TicketMessage,
    TicketStatus,
)

MessageCallback = Callable[[TicketMessage], None]
Unsubscribe = Callable[[], None]


class TicketNotFoundError(Exception):
    """Raised when a ticket id does not exist."""

    def __init__(self, ticket_id: str):
        super().__init__(f"Ticket not found: {ticket_id}")
        self.ticket_id = ticket_id


class TicketRepository(ABC):
    """Abstract interface for support ticket storage.

    Tickets and messages are append-only from the engine's point of view;
    agent replies arrive through `subscribe_to_messages`.
    """

    @abstractmethod
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
        """Open a new ticket."""
        pass

    @abstractmethod
    async def get_ticket(self, ticket_id: str) -> Ticket | None:
        """Get a ticket by id."""
        pass

    @abstractmethod
    async def append_message(
        self,
        ticket_id: str,
        body: str,
        author_type: AuthorType,
    ) -> TicketMessage:
        """Append a message to a ticket, notifying subscribers."""
        pass

    @abstractmethod
    async def list_messages(self, ticket_id: str) -> list[TicketMessage]:
        """Messages of a ticket, oldest first."""
        pass

    @abstractmethod
    def subscribe_to_messages(self, ticket_id: str, callback: MessageCallback) -> Unsubscribe:
        """Call `callback` for every message appended to the ticket."""
        pass

    @abstractmethod
    async def is_timed_out(self, ticket_id: str, hours: float = 24) -> bool:
        """Whether an open ticket has gone `hours` without an agent reply."""
        pass

    @abstractmethod
    async def update_status(self, ticket_id: str, status: TicketStatus) -> Ticket:
        """Change a ticket's status."""
        pass

    @abstractmethod
    async def assign_ticket(self, ticket_id: str, agent: str) -> Ticket:
        """Assign a ticket to an agent."""
        pass

    @abstractmethod
    async def list_tickets(
        self,
        *,
        email: str | None = None,
        status: TicketStatus | None = None,
        limit: int = 100,
    ) -> list[Ticket]:
        """List tickets, newest first."""
        pass


class OrderRepository(ABC):
    """Abstract interface for order lookups."""

    @abstractmethod
    async def get_order(self, order_number: str) -> Order | None:
        """Get an order by number."""
        pass

    @abstractmethod
    async def list_orders_by_email(self, email: str, *, limit: int = 5) -> list[Order]:
        """Recent orders of a customer, newest first."""
        pass

    @abstractmethod
    async def update_order_status(
        self,
        order_number: str,
        status: OrderStatus,
        *,
        reason: str | None = None,
    ) -> Order | None:
        """Change an order's status, returning the updated order."""
        pass
