"""Ticket intake and agent-reply relay for escalated conversations."""

from collections import defaultdict

from tastychat.conversation.models import ConversationContext
from tastychat.nlp.models import IntentResult
from tastychat.observability.logging import get_logger
from tastychat.support.models import Ticket, TicketMessage, TicketStatus
from tastychat.support.notifications import NotificationDispatcher, NotificationEvent
from tastychat.support.repository import TicketRepository, Unsubscribe

logger = get_logger(__name__)


class HandoffCoordinator:
    """Opens tickets for sessions and buffers agent replies until the next turn.

    Replies arrive through repository subscriptions at any time; they are
    held per session and handed to the engine by `take_agent_replies`.
    """

    def __init__(
        self,
        tickets: TicketRepository,
        dispatcher: NotificationDispatcher,
        timeout_hours: float = 24,
    ) -> None:
        self._tickets = tickets
        self._dispatcher = dispatcher
        self._timeout_hours = timeout_hours
        self._pending: dict[str, list[TicketMessage]] = defaultdict(list)
        self._subscriptions: dict[str, list[Unsubscribe]] = defaultdict(list)

    async def open_ticket(
        self,
        context: ConversationContext,
        intent: IntentResult,
        email: str,
    ) -> Ticket:
        last_user = context.last_user_turn
        message = last_user.content if last_user else intent.intent.value
        ticket = await self._tickets.create_ticket(
            email,
            message,
            priority=intent.entities.priority,
            category=intent.intent.value,
            order_number=intent.entities.order_number,
            session_id=context.session_id,
        )

        session_id = context.session_id

        def on_message(msg: TicketMessage) -> None:
            if msg.author_type != "agent":
                return
            self._pending[session_id].append(msg)
            self._dispatcher.dispatch(
                NotificationEvent(
                    event_type="agent_reply",
                    ticket_id=msg.ticket_id,
                    session_id=session_id,
                    email=email,
                )
            )

        self._subscriptions[session_id].append(
            self._tickets.subscribe_to_messages(ticket.id, on_message)
        )
        self._dispatcher.dispatch(
            NotificationEvent(
                event_type="ticket_created",
                ticket_id=ticket.id,
                session_id=session_id,
                email=email,
                data={"category": ticket.category, "priority": ticket.priority},
            )
        )
        logger.info(
            "ticket_opened",
            session_id=session_id,
            ticket_id=ticket.id,
            category=ticket.category,
            priority=ticket.priority,
        )
        return ticket

    async def relay_customer_message(self, context: ConversationContext, body: str) -> TicketMessage | None:
        """Append a customer message to the session's latest ticket, if any."""
        if not context.metadata.tickets:
            return None
        ticket_id = context.metadata.tickets[-1]
        return await self._tickets.append_message(ticket_id, body, "customer")

    def take_agent_replies(self, session_id: str) -> list[TicketMessage]:
        """Return and clear agent replies received since the last call."""
        return self._pending.pop(session_id, [])

    async def timed_out_ticket(self, context: ConversationContext) -> str | None:
        """Id of the first linked ticket past the reply timeout, marking it timed out."""
        for ticket_id in context.metadata.tickets:
            if await self._tickets.is_timed_out(ticket_id, self._timeout_hours):
                await self._tickets.update_status(ticket_id, TicketStatus.TIMEOUT)
                self._dispatcher.dispatch(
                    NotificationEvent(
                        event_type="ticket_timeout",
                        ticket_id=ticket_id,
                        session_id=context.session_id,
                        email=context.user_email,
                    )
                )
                logger.warning(
                    "ticket_timed_out", session_id=context.session_id, ticket_id=ticket_id
                )
                return ticket_id
        return None

    def release(self, session_id: str) -> None:
        """Drop subscriptions and buffered replies of a closed session."""
        for unsubscribe in self._subscriptions.pop(session_id, []):
            unsubscribe()
        self._pending.pop(session_id, None)
