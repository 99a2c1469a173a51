"""Conversation domain models."""

from tastychat.conversation.models.context import (
    Action,
    ConversationContext,
    ConversationMetadata,
    Role,
    Turn,
    utc_now,
)
from tastychat.conversation.models.enums import ActionType, ContextHealth, ConversationState

__all__ = [
    "Action",
    "ActionType",
    "ContextHealth",
    "ConversationContext",
    "ConversationMetadata",
    "ConversationState",
    "Role",
    "Turn",
    "utc_now",
]
