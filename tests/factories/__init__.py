"""Test factories for creating test data."""

from tests.factories.conversation import IntentFactory, TurnFactory

__all__ = [
    "IntentFactory",
    "TurnFactory",
]
