"""Chunk, embed and store knowledge base documents."""

import re

from tastychat.knowledge.models import KnowledgeDocument
from tastychat.knowledge.stores.base import VectorStore
from tastychat.observability.logging import get_logger
from tastychat.providers.embedding.base import EmbeddingProvider

logger = get_logger(__name__)

_PARAGRAPH_SPLIT = re.compile(r"\n\s*\n")


def chunk_text(text: str, max_chars: int = 1000) -> list[str]:
    """Split on blank lines, merging short paragraphs up to `max_chars`.

    A single paragraph longer than `max_chars` becomes its own chunk.
    """
    chunks: list[str] = []
    current = ""
    for paragraph in _PARAGRAPH_SPLIT.split(text):
        paragraph = paragraph.strip()
        if not paragraph:
            continue
        if current and len(current) + len(paragraph) + 2 > max_chars:
            chunks.append(current)
            current = paragraph
        else:
            current = f"{current}\n\n{paragraph}" if current else paragraph
    if current:
        chunks.append(current)
    return chunks


class DocumentIngestor:
    """Loads plain-text documents into a vector store."""

    def __init__(
        self,
        embedding_provider: EmbeddingProvider,
        vector_store: VectorStore,
        batch_size: int = 32,
        max_chunk_chars: int = 1000,
    ):
        self._embeddings = embedding_provider
        self._store = vector_store
        self._batch_size = batch_size
        self._max_chunk_chars = max_chunk_chars

    async def ingest(self, source: str, text: str, metadata: dict | None = None) -> int:
        """Chunk `text`, embed in batches and upsert. Returns chunks stored.

        Embedding errors propagate; ingestion is an offline job and a
        partial knowledge base should fail loudly.
        """
        chunks = chunk_text(text, self._max_chunk_chars)
        stored = 0
        for start in range(0, len(chunks), self._batch_size):
            batch = chunks[start : start + self._batch_size]
            response = await self._embeddings.embed(batch)
            documents = [
                KnowledgeDocument(
                    id=f"{source}:{start + offset}",
                    text=chunk,
                    vector=vector,
                    source=source,
                    metadata=dict(metadata or {}),
                )
                for offset, (chunk, vector) in enumerate(zip(batch, response.embeddings, strict=True))
            ]
            stored += await self._store.upsert(documents)

        logger.info("document_ingested", source=source, chunks=stored)
        return stored
