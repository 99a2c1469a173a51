"""VectorStore abstract interface.

Stores embedded knowledge chunks and runs similarity search over them.
Implementations can wrap a hosted vector database; the engine only depends
on this interface.
"""

from abc import ABC, abstractmethod

from tastychat.knowledge.models import KnowledgeDocument, SearchResult


class VectorStore(ABC):
    """Abstract interface for vector storage and similarity search."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""

    @abstractmethod
    async def upsert(self, documents: list[KnowledgeDocument]) -> int:
        """Insert or replace documents by id.

        Returns:
            Number of documents written
        """

    @abstractmethod
    async def search(self, vector: list[float], k: int = 6) -> list[SearchResult]:
        """Return up to `k` documents sorted by score descending."""

    @abstractmethod
    async def count(self) -> int:
        """Number of stored documents."""
