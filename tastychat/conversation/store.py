"""SessionStore abstract interface."""

from abc import ABC, abstractmethod

from tastychat.conversation.session import ChatSession


class SessionStore(ABC):
    """Abstract interface for chat session storage."""

    @abstractmethod
    async def get(self, session_id: str) -> ChatSession | None:
        """Get a session by id."""
        pass

    @abstractmethod
    async def save(self, session: ChatSession) -> str:
        """Save a session, returning its id."""
        pass

    @abstractmethod
    async def delete(self, session_id: str) -> bool:
        """Delete a session."""
        pass

    @abstractmethod
    async def list_ids(self) -> list[str]:
        """Ids of all stored sessions."""
        pass
