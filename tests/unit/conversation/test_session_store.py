"""Tests for chat sessions, the in-memory session store and fixed state replies."""

import pytest

from tastychat.conversation.models import ConversationContext, ConversationState
from tastychat.conversation.responder import (
    CLOSED,
    STATE_MESSAGE_STATES,
    TICKET_INTAKE,
    WAITING_FOR_AGENT,
    state_message,
)
from tastychat.conversation.session import ChatSession
from tastychat.conversation.state_machine import ConversationStateMachine
from tastychat.conversation.stores import InMemorySessionStore


@pytest.fixture
def session() -> ChatSession:
    """Fresh session in IDLE."""
    return ChatSession(
        context=ConversationContext(session_id="s-1"),
        state_machine=ConversationStateMachine(),
    )


class TestChatSession:
    def test_exposes_id_and_state(self, session: ChatSession) -> None:
        assert session.session_id == "s-1"
        assert session.state == ConversationState.IDLE

    def test_each_session_gets_its_own_tracker(self) -> None:
        a = ChatSession(ConversationContext(session_id="a"), ConversationStateMachine())
        b = ChatSession(ConversationContext(session_id="b"), ConversationStateMachine())
        assert a.proactive is not b.proactive


class TestInMemorySessionStore:
    """Tests for InMemorySessionStore."""

    @pytest.mark.asyncio
    async def test_save_and_get(self, session: ChatSession) -> None:
        store = InMemorySessionStore()

        assert await store.save(session) == "s-1"
        assert await store.get("s-1") is session

    @pytest.mark.asyncio
    async def test_get_missing(self) -> None:
        assert await InMemorySessionStore().get("nope") is None

    @pytest.mark.asyncio
    async def test_delete(self, session: ChatSession) -> None:
        store = InMemorySessionStore()
        await store.save(session)

        assert await store.delete("s-1") is True
        assert await store.delete("s-1") is False
        assert await store.list_ids() == []

    @pytest.mark.asyncio
    async def test_list_ids(self, session: ChatSession) -> None:
        store = InMemorySessionStore()
        await store.save(session)

        assert await store.list_ids() == ["s-1"]


class TestStateMessage:
    def test_ticket_intake_without_ticket(self) -> None:
        assert state_message(ConversationState.SUPPORT_TICKET_MODE) == TICKET_INTAKE

    def test_ticket_created_mentions_id(self) -> None:
        text = state_message(ConversationState.SUPPORT_TICKET_MODE, ticket_id="TKT-9")
        assert text is not None
        assert "TKT-9" in text

    def test_waiting_and_closed(self) -> None:
        assert state_message(ConversationState.WAITING_FOR_AGENT) == WAITING_FOR_AGENT
        assert state_message(ConversationState.CLOSED) == CLOSED

    def test_generated_states_have_no_fixed_reply(self) -> None:
        assert state_message(ConversationState.FAQ_MODE) is None
        assert state_message(ConversationState.ACTIVE_CONVERSATION) is None

    def test_escalation_pending_has_reply_but_is_not_forced(self) -> None:
        assert state_message(ConversationState.ESCALATION_PENDING) is not None
        assert ConversationState.ESCALATION_PENDING not in STATE_MESSAGE_STATES
