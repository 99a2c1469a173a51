"""Conversation domain: context, context window and dialogue state."""

from tastychat.conversation.models import (
    Action,
    ActionType,
    ContextHealth,
    ConversationContext,
    ConversationMetadata,
    ConversationState,
    Turn,
)

__all__ = [
    "Action",
    "ActionType",
    "ContextHealth",
    "ConversationContext",
    "ConversationMetadata",
    "ConversationState",
    "Turn",
]
