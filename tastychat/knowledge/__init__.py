"""Knowledge base: ingestion, vector storage and retrieval."""

from tastychat.knowledge.ingestion import DocumentIngestor, chunk_text
from tastychat.knowledge.models import KnowledgeDocument, SearchResult
from tastychat.knowledge.retriever import KnowledgeRetriever
from tastychat.knowledge.stores import InMemoryVectorStore, VectorStore

__all__ = [
    "DocumentIngestor",
    "InMemoryVectorStore",
    "KnowledgeDocument",
    "KnowledgeRetriever",
    "SearchResult",
    "VectorStore",
    "chunk_text",
]
