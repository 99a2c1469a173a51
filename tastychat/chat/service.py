"""Session-serialized front door to the chat engine."""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime
from uuid import uuid4

from tastychat.chat.engine import ChatEngine
from tastychat.chat.models import ChatResult
from tastychat.conversation.session import ChatSession
from tastychat.conversation.store import SessionStore
from tastychat.observability.logging import get_logger

logger = get_logger(__name__)


class ChatService:
    """Loads or creates a session, runs one turn under its lock, saves it.

    Turns of the same session never overlap; turns of different sessions
    run concurrently.
    """

    def __init__(self, engine: ChatEngine, store: SessionStore) -> None:
        self._engine = engine
        self._store = store
        self._locks: dict[str, asyncio.Lock] = {}
        self._holders: dict[str, int] = {}

    @property
    def engine(self) -> ChatEngine:
        return self._engine

    @asynccontextmanager
    async def _session_lock(self, session_id: str) -> AsyncGenerator[None, None]:
        """Exclusive access to one session.

        The lock entry lives as long as someone holds or awaits it, so every
        caller for the same id queues on the same lock.
        """
        lock = self._locks.setdefault(session_id, asyncio.Lock())
        self._holders[session_id] = self._holders.get(session_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[session_id] -= 1
            if self._holders[session_id] == 0:
                del self._holders[session_id]
                del self._locks[session_id]

    async def handle(
        self,
        message: str,
        session_id: str | None = None,
        user_email: str | None = None,
    ) -> tuple[ChatSession, ChatResult]:
        session_id = session_id or str(uuid4())
        async with self._session_lock(session_id):
            session = await self._store.get(session_id)
            if session is None:
                session = self._engine.create_session(session_id, user_email=user_email)
                logger.info("session_created", session_id=session_id)
            elif user_email and not session.context.user_email:
                session.context = session.context.model_copy(update={"user_email": user_email})

            result = await self._engine.process_user_message(message, session)
            await self._store.save(session)
            return session, result

    async def get_session(self, session_id: str) -> ChatSession | None:
        return await self._store.get(session_id)

    async def list_session_ids(self) -> list[str]:
        return await self._store.list_ids()

    async def close_session(self, session_id: str) -> bool:
        """Mark a session closed and drop it from the store."""
        async with self._session_lock(session_id):
            session = await self._store.get(session_id)
            if session is None:
                return False
            self._engine.close_session(session)
            await self._store.delete(session_id)
        logger.info("session_closed", session_id=session_id)
        return True

    async def close_idle_sessions(self, now: datetime | None = None) -> list[str]:
        """Close every session the context window manager reports as idle."""
        closed: list[str] = []
        for session_id in await self.list_session_ids():
            session = await self._store.get(session_id)
            if session is None:
                continue
            if self._engine.window.should_close_conversation(session.context, now):
                await self.close_session(session_id)
                closed.append(session_id)
        return closed
