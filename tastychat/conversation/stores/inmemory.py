"""In-memory implementation of SessionStore."""

from tastychat.conversation.session import ChatSession
from tastychat.conversation.store import SessionStore


class InMemorySessionStore(SessionStore):
    """Dict-backed session storage for tests and single-process deployments."""

    def __init__(self) -> None:
        self._sessions: dict[str, ChatSession] = {}

    async def get(self, session_id: str) -> ChatSession | None:
        return self._sessions.get(session_id)

    async def save(self, session: ChatSession) -> str:
        self._sessions[session.session_id] = session
        return session.session_id

    async def delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    async def list_ids(self) -> list[str]:
        return list(self._sessions)
