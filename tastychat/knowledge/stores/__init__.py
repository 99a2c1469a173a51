"""Vector store implementations."""

from tastychat.knowledge.stores.base import VectorStore
from tastychat.knowledge.stores.inmemory import InMemoryVectorStore

__all__ = ["InMemoryVectorStore", "VectorStore"]
