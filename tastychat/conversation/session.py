"""Per-session runtime state."""

from dataclasses import dataclass, field
from datetime import datetime

from tastychat.conversation.models import ConversationContext, ConversationState, utc_now
from tastychat.conversation.state_machine import ConversationStateMachine
from tastychat.proactive.tracker import ProactiveHelpTracker


@dataclass
class ChatSession:
    """Everything the engine needs to process the next turn of one session.

    `context` is replaced, never mutated, after each turn.
    """

    context: ConversationContext
    state_machine: ConversationStateMachine
    proactive: ProactiveHelpTracker = field(default_factory=ProactiveHelpTracker)
    created_at: datetime = field(default_factory=utc_now)

    @property
    def session_id(self) -> str:
        return self.context.session_id

    @property
    def state(self) -> ConversationState:
        return self.state_machine.state
