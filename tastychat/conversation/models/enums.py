"""Enums for the conversation domain."""

from enum import Enum


class ConversationState(str, Enum):
    """Dialogue state held by the state machine, one per session."""

    IDLE = "idle"
    ACTIVE_CONVERSATION = "active_conversation"
    AWAITING_USER_INPUT = "awaiting_user_input"
    FAQ_MODE = "faq_mode"
    SUPPORT_TICKET_MODE = "support_ticket_mode"
    AGENT_HANDOFF_IN_PROGRESS = "agent_handoff_in_progress"
    AGENT_CONVERSATION = "agent_conversation"
    WAITING_FOR_AGENT = "waiting_for_agent"
    ESCALATION_PENDING = "escalation_pending"
    CLOSED = "closed"


class ContextHealth(str, Enum):
    """Token budget usage band of a context."""

    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"


class ActionType(str, Enum):
    """Follow-up actions offered alongside a reply."""

    SUGGESTION = "suggestion"
    SUGGEST_ORDER = "suggest_order"
    SUGGEST_CONTACT = "suggest_contact"
    SUGGEST_ESCALATION = "suggest_escalation"
    SUGGEST_PLATFORMS = "suggest_platforms"
    OPEN_TICKET = "open_ticket"
    PROACTIVE = "proactive"
