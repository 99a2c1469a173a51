"""Tests for knowledge base chunking and ingestion."""

import pytest

from tastychat.knowledge import DocumentIngestor, InMemoryVectorStore, chunk_text
from tastychat.providers.embedding import EmbeddingError, MockEmbeddingProvider


class TestChunkText:
    """Tests for chunk_text."""

    def test_short_paragraphs_merged(self):
        """Should merge paragraphs while they fit."""
        assert chunk_text("Horaires\n\nLivraison", max_chars=100) == ["Horaires\n\nLivraison"]

    def test_split_when_full(self):
        """Should start a new chunk when the next paragraph would overflow."""
        assert chunk_text("one\n\ntwo\n\nthree", max_chars=9) == ["one\n\ntwo", "three"]

    def test_long_paragraph_kept_whole(self):
        """Should not cut a paragraph longer than the limit."""
        long = "x" * 50

        assert chunk_text(f"intro\n\n{long}", max_chars=20) == ["intro", long]

    def test_blank_text(self):
        """Should return no chunks for whitespace."""
        assert chunk_text("  \n\n \n") == []


class TestDocumentIngestor:
    """Tests for DocumentIngestor."""

    @pytest.fixture
    def embeddings(self):
        """Deterministic embedding provider."""
        return MockEmbeddingProvider(dimensions=8)

    @pytest.fixture
    def store(self):
        """Empty vector store."""
        return InMemoryVectorStore()

    @pytest.mark.asyncio
    async def test_chunks_embedded_in_batches(self, embeddings, store):
        """Should embed in batches and store one document per chunk."""
        ingestor = DocumentIngestor(embeddings, store, batch_size=2, max_chunk_chars=10)
        text = "Halal oui\n\nLivraison\n\nAllergènes"

        stored = await ingestor.ingest("faq", text, metadata={"lang": "fr"})

        assert stored == 3
        assert await store.count() == 3
        assert [len(batch) for batch in embeddings.call_history] == [2, 1]

        results = await store.search(await embeddings.embed_single("Allergènes"), k=1)
        assert results[0].id == "faq:2"
        assert results[0].source == "faq"
        assert results[0].metadata == {"lang": "fr"}

    @pytest.mark.asyncio
    async def test_reingest_replaces_chunks(self, embeddings, store):
        """Should upsert by source:index ids."""
        ingestor = DocumentIngestor(embeddings, store)

        await ingestor.ingest("faq", "v1")
        await ingestor.ingest("faq", "v2")

        assert await store.count() == 1

    @pytest.mark.asyncio
    async def test_embedding_failure_propagates(self, store):
        """Should fail loudly when embeddings are unavailable."""
        ingestor = DocumentIngestor(MockEmbeddingProvider(fail=True), store)

        with pytest.raises(EmbeddingError):
            await ingestor.ingest("faq", "Horaires")
        assert await store.count() == 0
