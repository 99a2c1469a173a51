"""Queue of conversations waiting for a human agent."""

from abc import ABC, abstractmethod

from tastychat.observability.logging import get_logger
from tastychat.support.models import AgentQueueItem

logger = get_logger(__name__)

_PRIORITY_RANK = {"urgent": 0, "high": 1, "normal": 2, "low": 3}


class AgentQueue(ABC):
    """Abstract hand-off queue consumed by the support team."""

    @abstractmethod
    async def enqueue(self, item: AgentQueueItem) -> None:
        """Add a conversation to the queue."""
        pass

    @abstractmethod
    async def pending(self) -> list[AgentQueueItem]:
        """Waiting items, most urgent first."""
        pass

    @abstractmethod
    async def claim(self, session_id: str) -> AgentQueueItem | None:
        """Remove and return the item for a session, if queued."""
        pass


class InMemoryAgentQueue(AgentQueue):
    """In-memory AgentQueue for testing and development."""

    def __init__(self) -> None:
        self._items: list[AgentQueueItem] = []

    async def enqueue(self, item: AgentQueueItem) -> None:
        self._items.append(item)
        logger.info(
            "agent_queue_enqueued",
            session_id=item.session_id,
            priority=item.priority,
            intent=item.intent,
            depth=len(self._items),
        )

    async def pending(self) -> list[AgentQueueItem]:
        return sorted(self._items, key=lambda i: (_PRIORITY_RANK[i.priority], i.enqueued_at))

    async def claim(self, session_id: str) -> AgentQueueItem | None:
        for i, item in enumerate(self._items):
            if item.session_id == session_id:
                return self._items.pop(i)
        return None
