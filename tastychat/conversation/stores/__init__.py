"""Session store implementations."""

from tastychat.conversation.stores.inmemory import InMemorySessionStore

__all__ = ["InMemorySessionStore"]
