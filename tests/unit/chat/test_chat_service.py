"""Tests for ChatService session handling and the settings factory."""

import asyncio
from datetime import timedelta

import pytest

from tastychat.chat import ChatService, create_chat_service
from tastychat.chat.factory import create_dispatcher
from tastychat.config import Settings
from tastychat.conversation.models import ConversationState, utc_now
from tastychat.conversation.stores import InMemorySessionStore
from tastychat.providers.embedding import MockEmbeddingProvider
from tastychat.providers.llm import MockLLMExecutor
from tastychat.support import InMemoryAgentQueue, LoggingNotifier, WebhookNotifier


@pytest.fixture
def settings() -> Settings:
    """Defaults without embedding-based classification."""
    return Settings(classifier={"use_embeddings": False})


@pytest.fixture
def store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def service(settings: Settings, store: InMemorySessionStore) -> ChatService:
    """Service wired from settings with mock providers."""
    return create_chat_service(
        settings,
        executor=MockLLMExecutor(default_response="Réponse du modèle de test."),
        embedding_provider=MockEmbeddingProvider(dimensions=8),
        store=store,
    )


class TestHandle:
    """Tests for ChatService.handle."""

    @pytest.mark.asyncio
    async def test_creates_and_saves_session(self, service, store):
        session, result = await service.handle("Bonjour", session_id="abc", user_email="a@b.be")

        assert session.session_id == "abc"
        assert session.context.user_email == "a@b.be"
        assert result.state == ConversationState.ACTIVE_CONVERSATION
        assert await store.get("abc") is session

    @pytest.mark.asyncio
    async def test_generates_session_id(self, service):
        session, _ = await service.handle("Bonjour")

        assert session.session_id
        assert await service.list_session_ids() == [session.session_id]

    @pytest.mark.asyncio
    async def test_reuses_session(self, service):
        await service.handle("Bonjour", session_id="abc")
        session, _ = await service.handle("Est-ce que la viande est halal ?", session_id="abc")

        assert len(session.context.turns) == 4
        assert session.state == ConversationState.FAQ_MODE

    @pytest.mark.asyncio
    async def test_email_added_later(self, service):
        await service.handle("Bonjour", session_id="abc")
        session, _ = await service.handle("Bonjour", session_id="abc", user_email="late@b.be")

        assert session.context.user_email == "late@b.be"

    @pytest.mark.asyncio
    async def test_concurrent_turns_are_serialized(self, service):
        """Should record every turn of one session even when sent together."""
        await asyncio.gather(*(service.handle(f"Bonjour {i}", session_id="abc") for i in range(5)))

        session = await service.get_session("abc")
        assert session is not None
        user_turns = [t.content for t in session.context.turns if t.role == "user"]
        assert sorted(user_turns) == [f"Bonjour {i}" for i in range(5)]
        assert len(session.context.turns) == 10
        assert service._locks == {}


class TestSessionLock:
    """Tests for the per-session lock table."""

    @pytest.mark.asyncio
    async def test_released_locks_are_dropped(self, service):
        await asyncio.gather(
            service.handle("Bonjour", session_id="a"),
            service.handle("Bonjour", session_id="b"),
        )

        assert service._locks == {}
        assert service._holders == {}

    @pytest.mark.asyncio
    async def test_close_and_waiting_turn_share_one_lock(self, service):
        """A turn queued behind a close runs after it on the same lock."""
        await service.handle("Bonjour", session_id="abc")

        async with service._session_lock("abc"):
            close = asyncio.create_task(service.close_session("abc"))
            turn = asyncio.create_task(service.handle("Bonjour", session_id="abc"))
            await asyncio.sleep(0)
            assert service._holders["abc"] == 3
            assert len(service._locks) == 1

        assert await close is True
        session, result = await turn

        assert result.state == ConversationState.ACTIVE_CONVERSATION
        assert len(session.context.turns) == 2
        assert await service.get_session("abc") is session
        assert service._locks == {}


class TestClose:
    """Tests for closing sessions."""

    @pytest.mark.asyncio
    async def test_close_session(self, service):
        session, _ = await service.handle("Bonjour", session_id="abc")

        assert await service.close_session("abc") is True
        assert session.state == ConversationState.CLOSED
        assert await service.get_session("abc") is None

    @pytest.mark.asyncio
    async def test_close_unknown_session(self, service):
        assert await service.close_session("missing") is False

    @pytest.mark.asyncio
    async def test_close_idle_sessions(self, service):
        await service.handle("Bonjour", session_id="old")
        await service.handle("Bonjour", session_id="new")
        old = await service.get_session("old")
        old.context.metadata.last_activity_at = utc_now() - timedelta(minutes=45)

        closed = await service.close_idle_sessions()

        assert closed == ["old"]
        assert await service.list_session_ids() == ["new"]


class TestFactory:
    """Tests for create_chat_service and create_dispatcher."""

    def test_explicit_collaborators_win(self, settings):
        queue = InMemoryAgentQueue()
        service = create_chat_service(
            settings,
            executor=MockLLMExecutor(),
            embedding_provider=MockEmbeddingProvider(dimensions=8),
            agent_queue=queue,
        )

        assert service.engine._agent_queue is queue

    def test_retrieval_can_be_disabled(self):
        settings = Settings(classifier={"use_embeddings": False}, retrieval={"enabled": False})

        service = create_chat_service(
            settings,
            executor=MockLLMExecutor(),
            embedding_provider=MockEmbeddingProvider(dimensions=8),
        )

        assert service.engine._retriever is None

    def test_dispatcher_logs_by_default(self, settings):
        dispatcher = create_dispatcher(settings)

        assert [type(n) for n in dispatcher._notifiers] == [LoggingNotifier]

    def test_dispatcher_adds_webhook(self):
        settings = Settings(support={"webhook_url": "https://hooks.example.com/tasty"})

        dispatcher = create_dispatcher(settings)

        assert [type(n) for n in dispatcher._notifiers] == [LoggingNotifier, WebhookNotifier]
