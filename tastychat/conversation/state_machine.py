"""Table-driven conversation state machine.

Each user turn evaluates the transition table from the current state; the
first entry whose condition holds wins. A transition marked `chain` lets the
new state evaluate the same turn again, so a first message can go
IDLE -> ACTIVE_CONVERSATION -> FAQ_MODE in one step. Side effects run
before the reply is generated; a failing side effect is logged and the
transition still applies.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from tastychat.conversation.models import (
    Action,
    ActionType,
    ConversationContext,
    ConversationState,
)
from tastychat.nlp.models import (
    AGENT_REQUEST_INTENTS,
    FAQ_INTENTS,
    ISSUE_INTENTS,
    IntentResult,
    IntentType,
)
from tastychat.observability.logging import get_logger
from tastychat.observability.metrics import ESCALATIONS
from tastychat.support.agent_queue import AgentQueue
from tastychat.support.models import AgentQueueItem

logger = get_logger(__name__)

S = ConversationState

Condition = Callable[[ConversationContext, IntentResult], bool]
SideEffect = Callable[[ConversationContext, IntentResult], Awaitable[None]]

AGENT_INTERVENTION_STATES: frozenset[ConversationState] = frozenset({
    S.ESCALATION_PENDING,
    S.WAITING_FOR_AGENT,
    S.AGENT_CONVERSATION,
    S.AGENT_HANDOFF_IN_PROGRESS,
})

ORDER_PLATFORMS = ["ubereats", "deliveroo", "takeaway", "website"]


@dataclass(frozen=True)
class Transition:
    """One row of the transition table."""

    name: str
    from_states: frozenset[ConversationState]
    to_state: ConversationState
    condition: Condition
    side_effect: SideEffect | None = None
    chain: bool = False


@dataclass
class StateChange:
    """Outcome of advancing the machine for one turn."""

    from_state: ConversationState
    to_state: ConversationState
    applied: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.from_state != self.to_state


def _always(_ctx: ConversationContext, _intent: IntentResult) -> bool:
    return True


def _wants_agent(_ctx: ConversationContext, intent: IntentResult) -> bool:
    return intent.intent in AGENT_REQUEST_INTENTS


def _escalation_flagged(_ctx: ConversationContext, intent: IntentResult) -> bool:
    return intent.escalation_flag


def _has_tickets(ctx: ConversationContext, _intent: IntentResult) -> bool:
    return bool(ctx.metadata.tickets)


def _is_faq(_ctx: ConversationContext, intent: IntentResult) -> bool:
    return intent.intent in FAQ_INTENTS


def build_default_transitions(
    agent_queue: AgentQueue | None = None,
    escalation_confidence: float = 0.5,
) -> list[Transition]:
    """The production transition table. Order is the tie-break."""

    def needs_escalation(_ctx: ConversationContext, intent: IntentResult) -> bool:
        return (
            intent.escalation_flag
            or (intent.confidence < escalation_confidence and intent.sentiment.has_complaint)
            or intent.intent in ISSUE_INTENTS
        )

    def faq_needs_escalation(_ctx: ConversationContext, intent: IntentResult) -> bool:
        return intent.escalation_flag or intent.sentiment.has_complaint

    def leaves_faq(_ctx: ConversationContext, intent: IntentResult) -> bool:
        return intent.intent not in FAQ_INTENTS

    async def notify_agent_queue(ctx: ConversationContext, intent: IntentResult) -> None:
        reason = "escalation_flag" if intent.escalation_flag else intent.intent.value
        ESCALATIONS.labels(reason=reason).inc()
        if agent_queue is None:
            logger.warning("agent_queue_not_configured", session_id=ctx.session_id)
            return
        last_user = ctx.last_user_turn
        await agent_queue.enqueue(
            AgentQueueItem(
                session_id=ctx.session_id,
                priority=intent.entities.priority if intent.entities.priority != "normal" else "high",
                summary=(last_user.content if last_user else "")[:500],
                intent=intent.intent.value,
            )
        )

    open_states = frozenset({S.ACTIVE_CONVERSATION})
    waiting_states = frozenset({S.WAITING_FOR_AGENT, S.AGENT_CONVERSATION, S.AGENT_HANDOFF_IN_PROGRESS})

    return [
        Transition("start", frozenset({S.IDLE}), S.ACTIVE_CONVERSATION, _always, chain=True),
        Transition("request_agent", open_states, S.SUPPORT_TICKET_MODE, _wants_agent),
        Transition(
            "escalate",
            open_states,
            S.ESCALATION_PENDING,
            needs_escalation,
            side_effect=notify_agent_queue,
        ),
        Transition(
            "clarify",
            open_states,
            S.AWAITING_USER_INPUT,
            lambda _ctx, intent: intent.intent == IntentType.UNCLEAR,
        ),
        Transition("faq", open_states, S.FAQ_MODE, _is_faq),
        Transition("faq_request_agent", frozenset({S.FAQ_MODE}), S.SUPPORT_TICKET_MODE, _wants_agent),
        Transition(
            "faq_escalate",
            frozenset({S.FAQ_MODE}),
            S.ESCALATION_PENDING,
            faq_needs_escalation,
            side_effect=notify_agent_queue,
        ),
        Transition("faq_exit", frozenset({S.FAQ_MODE}), S.ACTIVE_CONVERSATION, leaves_faq, chain=True),
        Transition(
            "clarified",
            frozenset({S.AWAITING_USER_INPUT}),
            S.ACTIVE_CONVERSATION,
            _always,
            chain=True,
        ),
        Transition(
            "ticket_escalate",
            frozenset({S.SUPPORT_TICKET_MODE}),
            S.ESCALATION_PENDING,
            _escalation_flagged,
            side_effect=notify_agent_queue,
        ),
        Transition(
            "ticket_opened", frozenset({S.SUPPORT_TICKET_MODE}), S.WAITING_FOR_AGENT, _has_tickets
        ),
        Transition(
            "agent_escalate",
            waiting_states,
            S.ESCALATION_PENDING,
            _escalation_flagged,
            side_effect=notify_agent_queue,
        ),
        Transition(
            "agent_assigned", frozenset({S.ESCALATION_PENDING}), S.AGENT_CONVERSATION, _has_tickets
        ),
    ]


class ConversationStateMachine:
    """Holds the current state of one session and applies the transition table."""

    def __init__(
        self,
        transitions: list[Transition] | None = None,
        initial_state: ConversationState = S.IDLE,
    ) -> None:
        self._transitions = transitions if transitions is not None else build_default_transitions()
        self._state = initial_state

    @property
    def state(self) -> ConversationState:
        return self._state

    def set_state(self, state: ConversationState) -> None:
        """Force a state, e.g. when an agent claims the session or it is closed."""
        logger.info("state_forced", from_state=self._state.value, to_state=state.value)
        self._state = state

    def is_terminal(self) -> bool:
        return self._state == S.CLOSED

    def find_transition(
        self,
        state: ConversationState,
        context: ConversationContext,
        intent: IntentResult,
    ) -> Transition | None:
        for transition in self._transitions:
            if state in transition.from_states and transition.condition(context, intent):
                return transition
        return None

    async def advance(self, context: ConversationContext, intent: IntentResult) -> StateChange:
        """Apply the matching transition(s) for one user turn.

        If nothing matches, the state is unchanged.
        """
        change = StateChange(from_state=self._state, to_state=self._state)
        if self.is_terminal():
            return change

        visited = {self._state}
        while True:
            transition = self.find_transition(self._state, context, intent)
            if transition is None:
                break

            if transition.side_effect is not None:
                try:
                    await transition.side_effect(context, intent)
                except Exception as e:
                    logger.error(
                        "transition_side_effect_failed",
                        session_id=context.session_id,
                        transition=transition.name,
                        error=str(e),
                        error_type=type(e).__name__,
                    )

            self._state = transition.to_state
            change.applied.append(transition.name)
            if not transition.chain or self._state in visited:
                break
            visited.add(self._state)

        change.to_state = self._state
        if change.changed:
            logger.info(
                "state_transition",
                session_id=context.session_id,
                from_state=change.from_state.value,
                to_state=change.to_state.value,
                transitions=change.applied,
                intent=intent.intent.value,
            )
        return change

    def plan_next_actions(self, intent: IntentResult) -> list[Action]:
        """Follow-up actions suggested for the current state and intent."""
        actions: list[Action] = []

        if self._state == S.FAQ_MODE:
            actions.append(
                Action(
                    type=ActionType.SUGGEST_ORDER,
                    label="Prêt à commander?",
                    payload={"platforms": ORDER_PLATFORMS},
                )
            )
            actions.append(
                Action(
                    type=ActionType.SUGGEST_CONTACT,
                    label="Autre question?",
                    payload={"action": "continue_conversation"},
                )
            )

        if (
            intent.sentiment.has_complaint or intent.sentiment.polarity == "negative"
        ) and self._state not in AGENT_INTERVENTION_STATES:
            actions.append(
                Action(
                    type=ActionType.SUGGEST_ESCALATION,
                    label="Parler à un agent",
                    payload={"urgency": intent.entities.priority},
                )
            )

        if self._state == S.SUPPORT_TICKET_MODE:
            actions.append(Action(type=ActionType.OPEN_TICKET, label="Ouvrir un ticket"))

        if self._state == S.ACTIVE_CONVERSATION and intent.intent == IntentType.TRACK_ORDER:
            actions.append(
                Action(
                    type=ActionType.SUGGEST_PLATFORMS,
                    label="Sélectionnez votre plateforme",
                    payload={"options": ["Uber Eats", "Deliveroo", "Takeaway", "Site web"]},
                )
            )
        return actions
