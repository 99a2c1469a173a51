"""Token-budgeted conversation history.

Two tiers of degradation keep the model context bounded:

- warning: turns older than the recent window collapse into one summary turn
- critical: the summary is kept, plus any older turn whose intent is in
  PRIORITY_INTENTS, then retained turns are hard-capped

A final pass drops the oldest turns until the history fits the budget.
"""

import math
from collections import Counter
from datetime import datetime, timedelta

from pydantic import BaseModel, Field

from tastychat.config.models.engine import ContextWindowConfig
from tastychat.conversation.models import (
    Action,
    ContextHealth,
    ConversationContext,
    ConversationMetadata,
    Role,
    Turn,
    utc_now,
)
from tastychat.nlp.models import IntentResult, IntentType, describe_intent
from tastychat.observability.logging import get_logger

logger = get_logger(__name__)

PRIORITY_INTENTS: frozenset[IntentType] = frozenset({
    IntentType.COMPLAINT,
    IntentType.REFUND,
    IntentType.MISSING_ITEM,
    IntentType.WRONG_ORDER,
    IntentType.QUALITY_ISSUE,
    IntentType.SPEAK_AGENT,
    IntentType.CONTACT_SUPPORT,
})

RESOLVED_CONFIDENCE = 0.7
KEY_STATEMENT_CHARS = 200
MAX_KEY_STATEMENTS = 3


class LLMContext(BaseModel):
    """History and session facts prepared for one model call."""

    history: list[Turn] = Field(default_factory=list, description="Turns to send, oldest first")
    metadata: str = Field(default="", description="Rendered session facts")
    token_budget_remaining: int = Field(..., description="Budget left after history")
    state: ContextHealth = Field(..., description="Health of the full context")

    def history_text(self) -> str:
        return "\n\n".join(
            f"{'Customer' if t.role == 'user' else 'Assistant'}: {t.content}" for t in self.history
        )


class ContextWindowManager:
    """Owns token accounting and pruning for conversation contexts."""

    def __init__(self, config: ContextWindowConfig | None = None):
        self._config = config or ContextWindowConfig()

    @property
    def max_tokens(self) -> int:
        return self._config.max_tokens

    def estimate_tokens(self, text: str) -> int:
        return math.ceil(len(text) / self._config.chars_per_token)

    def create_context(
        self,
        session_id: str,
        user_email: str | None = None,
        language: str | None = None,
    ) -> ConversationContext:
        return ConversationContext(
            session_id=session_id,
            user_email=user_email,
            metadata=ConversationMetadata(language=language),
        )

    def calculate_context_state(self, context: ConversationContext) -> ContextHealth:
        """Band of the context's total estimated tokens against the budget."""
        ratio = context.total_tokens / self._config.max_tokens
        if ratio > self._config.critical_ratio:
            return ContextHealth.CRITICAL
        if ratio > self._config.warning_ratio:
            return ContextHealth.WARNING
        return ContextHealth.HEALTHY

    def add_turn(
        self,
        context: ConversationContext,
        role: Role,
        content: str,
        intent: IntentResult | None = None,
        actions: list[Action] | None = None,
        *,
        metadata: dict | None = None,
        timestamp: datetime | None = None,
    ) -> ConversationContext:
        """Return a copy of `context` with one more turn appended.

        Resolved and failed intent bookkeeping happens here and only here,
        once per classified turn.
        """
        updated = context.model_copy(deep=True)
        turn = Turn(
            role=role,
            content=content,
            timestamp=timestamp or utc_now(),
            intent=intent,
            actions=tuple(actions or ()),
            token_cost=self.estimate_tokens(content),
            metadata=metadata or {},
        )
        updated.turns.append(turn)

        meta = updated.metadata
        meta.last_activity_at = turn.timestamp

        if intent is not None:
            if intent.confidence > RESOLVED_CONFIDENCE:
                meta.resolved_intents.add(intent.intent)
            else:
                meta.failed_intents[intent.intent] = meta.failed_intents.get(intent.intent, 0) + 1

            entities = intent.entities
            if entities.branch:
                meta.current_branch = entities.branch
            if entities.platform:
                meta.current_platform = entities.platform
            if intent.language:
                meta.language = intent.language
            if entities.email and not updated.user_email:
                updated.user_email = entities.email

        return updated

    def build_llm_context(self, context: ConversationContext) -> LLMContext:
        state = self.calculate_context_state(context)
        turns = list(context.turns)
        recent_count = self._config.recent_turns

        if state != ContextHealth.HEALTHY and len(turns) > recent_count:
            older, recent = turns[:-recent_count], turns[-recent_count:]
            summary = self._summary_turn(older, context.metadata)

            if state == ContextHealth.CRITICAL:
                priority = [
                    t for t in older if t.intent is not None and t.intent.intent in PRIORITY_INTENTS
                ]
                cap = max(1, self._config.max_retained_turns - 1)
                kept = (priority + recent)[-cap:]
            else:
                kept = recent
            turns = [summary, *kept]

            logger.debug(
                "context_condensed",
                session_id=context.session_id,
                state=state.value,
                original_turns=len(context.turns),
                kept_turns=len(turns),
            )

        turns = self._fit_to_budget(turns)
        used = sum(t.token_cost for t in turns)

        return LLMContext(
            history=turns,
            metadata=self._render_metadata(context),
            token_budget_remaining=self._config.max_tokens - used,
            state=state,
        )

    def should_close_conversation(
        self,
        context: ConversationContext,
        now: datetime | None = None,
    ) -> bool:
        """Whether the session has been idle past the inactivity threshold."""
        idle = (now or utc_now()) - context.metadata.last_activity_at
        return idle > timedelta(minutes=self._config.inactivity_minutes)

    def conversation_duration_minutes(
        self,
        context: ConversationContext,
        now: datetime | None = None,
    ) -> int:
        elapsed = (now or utc_now()) - context.metadata.started_at
        return round(elapsed.total_seconds() / 60)

    def _summary_turn(self, older: list[Turn], metadata: ConversationMetadata) -> Turn:
        intents = [t.intent.intent for t in older if t.intent is not None]
        topic = describe_intent(Counter(intents).most_common(1)[0][0]) if intents else "General inquiry"

        statements = [
            t.content[:KEY_STATEMENT_CHARS] for t in older if t.role == "user" and not t.is_summary
        ][-MAX_KEY_STATEMENTS:]

        unresolved = [
            describe_intent(intent)
            for intent in metadata.failed_intents
            if intent not in metadata.resolved_intents
        ]
        if any(t.intent is not None and t.intent.sentiment.has_complaint for t in older):
            unresolved.append("Complaint not fully resolved")

        content = (
            f"[Conversation summary: {topic}. "
            f"Key points: {' | '.join(statements) or 'none'}. "
            f"Unresolved: {', '.join(unresolved) or 'none'}]"
        )
        return Turn(
            role="assistant",
            content=content,
            timestamp=older[-1].timestamp,
            token_cost=self.estimate_tokens(content),
            metadata={"summary": True, "summarized_turns": len(older)},
        )

    def _fit_to_budget(self, turns: list[Turn]) -> list[Turn]:
        budget = self._config.max_tokens
        turns = list(turns)

        while sum(t.token_cost for t in turns) > budget and len(turns) > 1:
            # Oldest non-summary turn goes first; the newest turn is never dropped here
            drop = next((i for i, t in enumerate(turns[:-1]) if not t.is_summary), 0)
            turns.pop(drop)

        if turns and turns[0].token_cost > budget:
            max_chars = budget * self._config.chars_per_token - 3
            content = turns[0].content[:max_chars] + "..."
            turns[0] = turns[0].model_copy(
                update={"content": content, "token_cost": self.estimate_tokens(content)}
            )
        return turns

    def _render_metadata(self, context: ConversationContext) -> str:
        meta = context.metadata
        lines = [
            "[Session metadata]",
            f"- Language: {meta.language or 'unknown'}",
            f"- Branch: {meta.current_branch or 'not specified'}",
            f"- Platform: {meta.current_platform or 'not specified'}",
            f"- Duration: {self.conversation_duration_minutes(context)} min",
            "- Resolved intents: "
            + (", ".join(sorted(i.value for i in meta.resolved_intents)) or "none"),
        ]
        if meta.tickets:
            lines.append(f"- Related tickets: {', '.join(meta.tickets)}")
        return "\n".join(lines)


def export_conversation(context: ConversationContext) -> str:
    """Plain-text transcript for support staff and debugging."""
    meta = context.metadata
    lines = [
        "=== CONVERSATION EXPORT ===",
        f"Session ID: {context.session_id}",
        f"Language: {meta.language or 'unknown'}",
        f"Started: {meta.started_at.isoformat()}",
        f"Turns: {len(context.turns)}",
        f"Resolved intents: {', '.join(sorted(i.value for i in meta.resolved_intents))}",
        "",
        "=== MESSAGES ===",
        "",
    ]
    for turn in context.turns:
        author = turn.metadata.get("author")
        speaker = "CUSTOMER" if turn.role == "user" else ("AGENT" if author == "agent" else "ASSISTANT")
        tag = f" [{turn.intent.intent.value} @ {turn.intent.confidence:.2f}]" if turn.intent else ""
        lines.append(f"[{turn.timestamp.isoformat()}] {speaker}{tag}:")
        lines.append(turn.content)
        lines.append("")
    return "\n".join(lines)
