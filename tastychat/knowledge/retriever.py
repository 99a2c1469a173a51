"""Knowledge retrieval for grounded answers."""

from tastychat.config.models.engine import RetrievalConfig
from tastychat.knowledge.models import SearchResult
from tastychat.knowledge.stores.base import VectorStore
from tastychat.observability.logging import get_logger
from tastychat.providers.embedding.base import EmbeddingProvider

logger = get_logger(__name__)


class KnowledgeRetriever:
    """Embeds a query and returns the best matching knowledge chunks.

    Retrieval is an enhancement: any upstream failure is logged and an empty
    list returned so generation can continue without passages.
    """

    def __init__(
        self,
        embedding_provider: EmbeddingProvider,
        vector_store: VectorStore,
        config: RetrievalConfig | None = None,
    ):
        self._embeddings = embedding_provider
        self._store = vector_store
        self._config = config or RetrievalConfig()

    async def retrieve(self, query: str, k: int | None = None) -> list[SearchResult]:
        if not query.strip():
            return []

        try:
            vector = await self._embeddings.embed_single(query)
            results = await self._store.search(vector, k or self._config.top_k)
        except Exception as e:
            logger.warning(
                "retrieval_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            return []

        kept = [r for r in results if r.score >= self._config.min_score]
        logger.debug(
            "retrieval_complete",
            candidates=len(results),
            kept=len(kept),
            top_score=results[0].score if results else None,
        )
        return kept
