"""Support repository implementations."""

from tastychat.support.stores.inmemory import InMemoryOrderRepository, InMemoryTicketRepository

__all__ = ["InMemoryOrderRepository", "InMemoryTicketRepository"]
