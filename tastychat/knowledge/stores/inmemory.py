"""In-memory vector store using numpy cosine similarity."""

import numpy as np

from tastychat.knowledge.models import KnowledgeDocument, SearchResult
from tastychat.knowledge.stores.base import VectorStore


class InMemoryVectorStore(VectorStore):
    """Vector store for tests and single-process deployments.

    The knowledge base is a few hundred chunks, so a brute-force scan is
    enough. Thread-safe operations are not guaranteed.
    """

    def __init__(self) -> None:
        self._documents: dict[str, KnowledgeDocument] = {}

    @property
    def provider_name(self) -> str:
        return "inmemory"

    async def upsert(self, documents: list[KnowledgeDocument]) -> int:
        for doc in documents:
            self._documents[doc.id] = doc
        return len(documents)

    async def search(self, vector: list[float], k: int = 6) -> list[SearchResult]:
        if not self._documents or k <= 0:
            return []

        docs = list(self._documents.values())
        matrix = np.array([d.vector for d in docs], dtype=float)
        query = np.array(vector, dtype=float)

        norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
        dots = matrix @ query
        scores = np.divide(dots, norms, out=np.zeros_like(dots), where=norms > 0)

        order = np.argsort(-scores)[:k]
        return [
            SearchResult(
                id=docs[i].id,
                text=docs[i].text,
                source=docs[i].source,
                score=float(scores[i]),
                metadata=docs[i].metadata,
            )
            for i in order
        ]

    async def count(self) -> int:
        return len(self._documents)
