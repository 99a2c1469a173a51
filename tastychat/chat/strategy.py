"""Response strategy selection."""

from enum import Enum

from tastychat.conversation.models import ConversationState
from tastychat.conversation.responder import STATE_MESSAGE_STATES
from tastychat.nlp.models import FAQ_INTENTS, IntentResult


class ResponseStrategy(str, Enum):
    STATE_MESSAGE = "state_message"
    TEMPLATE = "template"
    TOOLS = "tools"
    RAG = "rag"
    DIRECT_LLM = "direct_llm"
    FALLBACK = "fallback"


MODEL_STRATEGIES: frozenset[ResponseStrategy] = frozenset({
    ResponseStrategy.TOOLS,
    ResponseStrategy.RAG,
    ResponseStrategy.DIRECT_LLM,
})


def select_strategy(
    state: ConversationState,
    intent: IntentResult,
    *,
    has_template: bool,
    allowed_tools: list[str],
    tools_available: bool,
    retrieval_available: bool,
    escalation_confidence: float = 0.5,
) -> ResponseStrategy:
    """First applicable strategy, cheapest first.

    Agent-facing states answer with fixed text. An order number in the
    message sends tool-enabled intents to the tool loop ahead of
    templates. Turns below the escalation confidence never reach the model.
    """
    entities = intent.entities
    can_call_tools = tools_available and bool(allowed_tools)
    escalating = state == ConversationState.ESCALATION_PENDING

    if state in STATE_MESSAGE_STATES:
        return ResponseStrategy.STATE_MESSAGE
    if can_call_tools and entities.order_number and not escalating:
        return ResponseStrategy.TOOLS
    if has_template:
        return ResponseStrategy.TEMPLATE
    if escalating:
        return ResponseStrategy.STATE_MESSAGE
    if can_call_tools and entities.branch:
        return ResponseStrategy.TOOLS
    if intent.confidence < escalation_confidence:
        return ResponseStrategy.FALLBACK
    if retrieval_available and intent.intent in FAQ_INTENTS:
        return ResponseStrategy.RAG
    return ResponseStrategy.DIRECT_LLM
