"""Chat engine: the single entry point that turns one utterance into a reply.

Pipeline per turn:
    agent replies -> input guardrails -> classify -> state machine ->
    ticket intake/timeout -> strategy -> reply -> output filter ->
    context update -> proactive help

Callers must serialize turns per session; see ChatService.
"""

import time
from collections.abc import Callable
from datetime import datetime
from typing import Any

from tastychat.chat.models import ChatResult
from tastychat.chat.strategy import MODEL_STRATEGIES, ResponseStrategy, select_strategy
from tastychat.config.models.engine import GenerationConfig
from tastychat.conversation.models import (
    Action,
    ConversationContext,
    ConversationState,
    utc_now,
)
from tastychat.conversation.responder import CLOSED, TICKET_TIMEOUT, state_message
from tastychat.conversation.session import ChatSession
from tastychat.conversation.state_machine import (
    ConversationStateMachine,
    StateChange,
    build_default_transitions,
)
from tastychat.conversation.window import ContextWindowManager
from tastychat.generation import (
    ERROR_APOLOGY,
    ResponseGenerator,
    build_system_prompt,
    fallback_response,
)
from tastychat.guardrails import GuardrailsEngine, Severity, ValidatedInput
from tastychat.knowledge import KnowledgeRetriever
from tastychat.nlp import IntentClassifier
from tastychat.nlp.models import IntentResult
from tastychat.observability.logging import get_logger
from tastychat.observability.metrics import ESCALATIONS, PROACTIVE_SHOWN, TURN_LATENCY, TURNS_PROCESSED
from tastychat.proactive import ProactiveHelpEngine, ProactiveHelpTracker, format_message
from tastychat.providers.llm.base import ProviderError
from tastychat.providers.llm.executor import (
    ExecutionContext,
    clear_execution_context,
    get_execution_context,
    set_execution_context,
)
from tastychat.support import AgentQueue, HandoffCoordinator, OrderRepository, TicketRepository
from tastychat.templates import TemplateRegistry
from tastychat.tools import ToolContext, ToolOrchestrator
from tastychat.tools.builtin import allowed_tools_for
from tastychat.tools.orchestrator import EMPTY_RESPONSE

logger = get_logger(__name__)

S = ConversationState

TICKET_INTAKE_STATES = frozenset({S.SUPPORT_TICKET_MODE, S.ESCALATION_PENDING})
RELAY_STATES = frozenset({S.WAITING_FOR_AGENT, S.AGENT_CONVERSATION, S.AGENT_HANDOFF_IN_PROGRESS})


class _Reply:
    """Mutable accumulator for one turn's reply."""

    def __init__(self, strategy: ResponseStrategy) -> None:
        self.strategy = strategy
        self.text = ""
        self.model_generated = False
        self.used_rag = False
        self.used_tools = False
        self.rag_documents: list[str] = []
        self.metadata: dict[str, Any] = {}


class ChatEngine:
    """Composes classifier, context window, guardrails, state machine and generators."""

    def __init__(
        self,
        classifier: IntentClassifier,
        window: ContextWindowManager,
        guardrails: GuardrailsEngine,
        templates: TemplateRegistry,
        generator: ResponseGenerator,
        *,
        orchestrator: ToolOrchestrator | None = None,
        retriever: KnowledgeRetriever | None = None,
        handoff: HandoffCoordinator | None = None,
        agent_queue: AgentQueue | None = None,
        orders: OrderRepository | None = None,
        tickets: TicketRepository | None = None,
        proactive: ProactiveHelpEngine | None = None,
        config: GenerationConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._classifier = classifier
        self._window = window
        self._guardrails = guardrails
        self._templates = templates
        self._generator = generator
        self._orchestrator = orchestrator
        self._retriever = retriever
        self._handoff = handoff
        self._agent_queue = agent_queue
        self._orders = orders
        self._tickets = tickets
        self._proactive = proactive or ProactiveHelpEngine()
        self._config = config or GenerationConfig()
        self._clock = clock

    @property
    def window(self) -> ContextWindowManager:
        return self._window

    def create_session(
        self,
        session_id: str,
        user_email: str | None = None,
        tracker: ProactiveHelpTracker | None = None,
    ) -> ChatSession:
        """New session in IDLE with the production transition table."""
        transitions = build_default_transitions(
            agent_queue=self._agent_queue,
            escalation_confidence=self._config.escalation_confidence,
        )
        return ChatSession(
            context=self._window.create_context(session_id, user_email=user_email),
            state_machine=ConversationStateMachine(transitions),
            proactive=tracker or ProactiveHelpTracker(clock=self._clock),
        )

    def close_session(self, session: ChatSession) -> None:
        session.state_machine.set_state(S.CLOSED)
        if self._handoff is not None:
            self._handoff.release(session.session_id)

    async def process_user_message(self, user_message: str, session: ChatSession) -> ChatResult:
        """Process one user turn. Never raises.

        On success `session.context` is replaced with the updated context.
        Any unexpected error yields an apology flagged for escalation. The
        context is committed as soon as the state machine has acted, so a
        failure after that point keeps the user turn and any ticket id and
        records the apology as the reply; a failure before it leaves the
        session untouched.
        """
        start = time.perf_counter()
        set_execution_context(
            ExecutionContext(
                session_id=session.session_id,
                turn_id=f"{session.session_id}:{len(session.context.turns)}",
            )
        )
        try:
            result = await self._process(user_message, session)
        except Exception as e:
            logger.exception(
                "turn_failed",
                session_id=session.session_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            ESCALATIONS.labels(reason="error").inc()
            TURNS_PROCESSED.labels(strategy="error", outcome="error").inc()
            last = session.context.turns[-1] if session.context.turns else None
            if last is not None and last.role == "user":
                session.context = self._window.add_turn(
                    session.context,
                    "assistant",
                    ERROR_APOLOGY,
                    metadata={"strategy": "error", "state": session.state.value},
                    timestamp=self._clock(),
                )
            result = ChatResult(
                response=ERROR_APOLOGY,
                escalate=True,
                escalation_reason=str(e) or type(e).__name__,
                state=session.state,
                metadata={"error": str(e), "error_type": type(e).__name__},
            )

        finally:
            clear_execution_context()

        elapsed = time.perf_counter() - start
        TURN_LATENCY.observe(elapsed)
        result.metadata["processing_time_ms"] = round(elapsed * 1000, 2)
        return result

    async def _process(self, user_message: str, session: ChatSession) -> ChatResult:
        machine = session.state_machine
        if machine.is_terminal():
            return ChatResult(response=CLOSED, state=machine.state)

        now = self._clock()
        context = self._merge_agent_replies(session.context, now)
        # Replies are drained from the handoff buffer, so keep them right away
        session.context = context

        validated = self._guardrails.validate_input(user_message, session.session_id)
        intent = await self._classifier.classify(validated.sanitized, context)

        if not validated.is_valid or validated.should_escalate:
            return await self._reject_input(session, context, validated, intent, now)

        before = machine.state
        change = await machine.advance(self._stage_user_turn(context, validated, intent, before, now), intent)
        context = self._stage_user_turn(context, validated, intent, change.to_state, now)
        # The transition and its side effects are done; the ticket id below lands here too
        session.context = context

        escalate = False
        reason: str | None = None
        if change.changed and change.to_state == S.ESCALATION_PENDING:
            escalate = True
            reason = "escalation_flag" if intent.escalation_flag else intent.intent.value

        ticket_id = await self._ticket_intake(context, intent, machine.state)

        if machine.state in RELAY_STATES and self._handoff is not None:
            await self._handoff.relay_customer_message(context, validated.sanitized)
            if machine.state == S.WAITING_FOR_AGENT:
                timed_out = await self._handoff.timed_out_ticket(context)
                if timed_out is not None:
                    ESCALATIONS.labels(reason="ticket_timeout").inc()
                    reply = _Reply(ResponseStrategy.STATE_MESSAGE)
                    reply.text = TICKET_TIMEOUT
                    reply.metadata["timed_out_ticket"] = timed_out
                    return self._finish(
                        session, context, intent, change, reply, True, "ticket_timeout"
                    )

        reply = await self._respond(validated.sanitized, intent, context, machine.state, ticket_id)

        if reply.model_generated:
            filtered = self._guardrails.filter_output(reply.text, reply.rag_documents or None)
            reply.text = filtered.filtered
            if filtered.violations:
                reply.metadata["output_violations"] = [v.rule_id for v in filtered.violations]
            if filtered.should_escalate:
                escalate = True
                reason = reason or filtered.escalation_reason
                ESCALATIONS.labels(reason="output_filter").inc()

        if validated.violations:
            reply.metadata["input_violations"] = [v.rule_id for v in validated.violations]

        return self._finish(session, context, intent, change, reply, escalate, reason)

    def _merge_agent_replies(self, context: ConversationContext, now: datetime) -> ConversationContext:
        """Surface buffered agent replies as assistant turns before the new user turn."""
        if self._handoff is None:
            return context
        for message in self._handoff.take_agent_replies(context.session_id):
            context = self._window.add_turn(
                context,
                "assistant",
                message.body,
                metadata={"author": "agent", "ticket_id": message.ticket_id},
                timestamp=min(message.created_at, now),
            )
        return context

    def _stage_user_turn(
        self,
        context: ConversationContext,
        validated: ValidatedInput,
        intent: IntentResult,
        state: ConversationState,
        now: datetime,
    ) -> ConversationContext:
        # add_turn copies, so staging twice from the same base records the turn once
        return self._window.add_turn(
            context,
            "user",
            validated.sanitized,
            intent,
            metadata={"state": state.value},
            timestamp=now,
        )

    async def _reject_input(
        self,
        session: ChatSession,
        context: ConversationContext,
        validated: ValidatedInput,
        intent: IntentResult,
        now: datetime,
    ) -> ChatResult:
        """Short-circuit a blocked or escalated input. No model or tool call happens."""
        machine = session.state_machine
        blocking = validated.first_blocking
        violation = blocking or next(
            v for v in validated.violations if v.severity == Severity.ESCALATE or v.requires_escalation
        )

        change = StateChange(from_state=machine.state, to_state=machine.state)
        if blocking is None:
            # Allowed but sensitive: hand the session to a human
            flagged = intent.model_copy(update={"escalation_flag": True})
            staged = self._stage_user_turn(context, validated, flagged, machine.state, now)
            change = await machine.advance(staged, flagged)
            intent = flagged

        context = self._stage_user_turn(context, validated, intent, machine.state, now)
        ESCALATIONS.labels(reason=violation.rule_id).inc()

        reply = _Reply(ResponseStrategy.STATE_MESSAGE)
        reply.text = violation.message
        reply.metadata["input_violations"] = [v.rule_id for v in validated.violations]
        reply.metadata["blocked"] = blocking is not None
        return self._finish(session, context, intent, change, reply, True, violation.message)

    async def _ticket_intake(
        self,
        context: ConversationContext,
        intent: IntentResult,
        state: ConversationState,
    ) -> str | None:
        """Open the session's ticket once an email is known. Mutates `context` (a staged copy)."""
        if self._handoff is None or state not in TICKET_INTAKE_STATES:
            return None
        if context.metadata.tickets:
            return context.metadata.tickets[-1]

        email = intent.entities.email or context.user_email
        if not email:
            return None

        ticket = await self._handoff.open_ticket(context, intent, email)
        context.metadata.tickets.append(ticket.id)
        return ticket.id

    async def _respond(
        self,
        message: str,
        intent: IntentResult,
        context: ConversationContext,
        state: ConversationState,
        ticket_id: str | None,
    ) -> _Reply:
        # Generation sees history without the current user turn
        history = context.model_copy(update={"turns": context.turns[:-1]})
        template = self._templates.find(intent.intent, context, intent)
        allowed = allowed_tools_for(intent.intent)

        strategy = select_strategy(
            state,
            intent,
            has_template=template is not None,
            allowed_tools=allowed,
            tools_available=self._orchestrator is not None,
            retrieval_available=self._retriever is not None,
            escalation_confidence=self._config.escalation_confidence,
        )
        reply = _Reply(strategy)
        execution = get_execution_context()
        if execution is not None:
            execution.purpose = strategy.value
        if ticket_id is not None:
            reply.metadata["ticket_id"] = ticket_id

        if strategy == ResponseStrategy.STATE_MESSAGE:
            reply.text = state_message(state, ticket_id) or fallback_response(intent)
        elif strategy == ResponseStrategy.TEMPLATE:
            assert template is not None
            reply.text = self._templates.render(template, context, intent.entities)
            reply.metadata["template_id"] = template.id
        elif strategy == ResponseStrategy.TOOLS:
            await self._respond_with_tools(reply, message, intent, history, state, allowed)
        elif strategy in (ResponseStrategy.RAG, ResponseStrategy.DIRECT_LLM):
            await self._respond_with_model(reply, message, intent, history, state)
        else:
            reply.text = fallback_response(intent)

        if not reply.text.strip():
            reply.text = fallback_response(intent)
        return reply

    async def _respond_with_tools(
        self,
        reply: _Reply,
        message: str,
        intent: IntentResult,
        history: ConversationContext,
        state: ConversationState,
        allowed: list[str],
    ) -> None:
        assert self._orchestrator is not None
        tool_context = ToolContext(
            session_id=history.session_id,
            user_email=history.user_email,
            orders=self._orders,
            tickets=self._tickets,
            clock=self._clock,
        )
        system_prompt = build_system_prompt(state, intent.language, with_tools=True)
        try:
            result = await self._orchestrator.execute_with_tools(
                message,
                system_prompt,
                allowed,
                tool_context,
                acquire_budget=self._generator.acquire_budget,
            )
        except ProviderError as e:
            logger.warning("tool_generation_failed", session_id=history.session_id, error=str(e))
            reply.text = self._template_or_fallback(intent, history)
            reply.metadata["fallback_reason"] = "provider_error"
            return

        reply.used_tools = bool(result.tools_used)
        reply.metadata["tools_executed"] = [
            {"name": t.tool_name, "success": t.success} for t in result.tools_used
        ]
        reply.metadata["tool_stop_reason"] = result.stop_reason

        if result.stop_reason == "budget_exhausted":
            reply.text = self._template_or_fallback(intent, history)
            reply.metadata["fallback_reason"] = "budget_exhausted"
            return

        text = None
        if result.final_response != EMPTY_RESPONSE:
            text = self._generator.finalize(result.final_response, history)
        if text is None:
            reply.text = fallback_response(intent)
            reply.metadata["fallback_reason"] = "invalid_response"
            return
        reply.text = text
        reply.model_generated = True

    async def _respond_with_model(
        self,
        reply: _Reply,
        message: str,
        intent: IntentResult,
        history: ConversationContext,
        state: ConversationState,
    ) -> None:
        passages: list[str] = []
        if reply.strategy == ResponseStrategy.RAG and self._retriever is not None:
            results = await self._retriever.retrieve(message)
            passages = [r.text for r in results]
            reply.metadata["rag_sources"] = sorted({r.source for r in results})
            if not passages:
                reply.strategy = ResponseStrategy.DIRECT_LLM

        system_prompt = build_system_prompt(state, intent.language, passages=passages)
        generated = await self._generator.generate(message, intent, history, system_prompt)

        reply.text = generated.response
        if generated.used_fallback:
            reply.metadata["fallback_reason"] = generated.fallback_reason
            return

        reply.model_generated = True
        reply.used_rag = bool(passages)
        reply.rag_documents = passages
        if generated.sources:
            reply.metadata["sources"] = generated.sources

    def _template_or_fallback(self, intent: IntentResult, context: ConversationContext) -> str:
        template = self._templates.find(intent.intent, context, intent)
        if template is not None:
            return self._templates.render(template, context, intent.entities)
        return fallback_response(intent)

    def _finish(
        self,
        session: ChatSession,
        context: ConversationContext,
        intent: IntentResult,
        change: StateChange,
        reply: _Reply,
        escalate: bool,
        reason: str | None,
    ) -> ChatResult:
        machine = session.state_machine
        actions: list[Action] = machine.plan_next_actions(intent)

        context = self._window.add_turn(
            context,
            "assistant",
            reply.text,
            actions=actions,
            metadata={"strategy": reply.strategy.value, "state": machine.state.value},
            timestamp=self._clock(),
        )

        metadata: dict[str, Any] = {
            "intent": intent.intent.value,
            "confidence": round(intent.confidence, 3),
            "language": intent.language,
            "strategy": reply.strategy.value,
            "transitions": change.applied,
            "context_state": self._window.calculate_context_state(context).value,
            **reply.metadata,
        }

        opportunity = session.proactive.select(
            self._proactive.analyze_user_behavior(context, now=self._clock())
        )
        if opportunity is not None:
            session.proactive.record(opportunity.type)
            PROACTIVE_SHOWN.labels(opportunity=opportunity.type.value).inc()
            metadata["proactive"] = {
                "type": opportunity.type.value,
                "message": format_message(opportunity, context.metadata.language),
                "action": opportunity.action,
                "priority": opportunity.priority,
            }
            if opportunity.action == "escalate_immediately" and not escalate:
                escalate = True
                reason = opportunity.type.value
                ESCALATIONS.labels(reason=opportunity.type.value).inc()

        session.context = context

        outcome = "escalated" if escalate else "ok"
        if reply.metadata.get("blocked"):
            outcome = "blocked"
        TURNS_PROCESSED.labels(strategy=reply.strategy.value, outcome=outcome).inc()
        logger.info(
            "turn_processed",
            session_id=session.session_id,
            intent=intent.intent.value,
            state=machine.state.value,
            strategy=reply.strategy.value,
            escalate=escalate,
            model_call=reply.strategy in MODEL_STRATEGIES,
        )

        return ChatResult(
            response=reply.text,
            escalate=escalate,
            escalation_reason=reason if escalate else None,
            used_rag=reply.used_rag,
            used_tools=reply.used_tools,
            state=machine.state,
            actions=actions,
            metadata=metadata,
        )
