"""Conversation context and turn models."""

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from tastychat.conversation.models.enums import ActionType
from tastychat.nlp.models import IntentResult, IntentType, Language

Role = Literal["user", "assistant"]


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class Action(BaseModel):
    """A follow-up the UI may render as a button or link."""

    model_config = ConfigDict(frozen=True)

    type: ActionType = Field(default=ActionType.SUGGESTION, description="Action kind")
    label: str = Field(..., description="Text shown to the user")
    payload: dict[str, Any] = Field(default_factory=dict, description="Action data")


class Turn(BaseModel):
    """One message in a conversation. Immutable once appended."""

    model_config = ConfigDict(frozen=True)

    role: Role = Field(..., description="Who wrote the message")
    content: str = Field(..., description="Message text")
    timestamp: datetime = Field(default_factory=utc_now, description="When it was written")
    intent: IntentResult | None = Field(default=None, description="Classification of user turns")
    actions: tuple[Action, ...] = Field(default=(), description="Suggested follow-ups")
    token_cost: int = Field(default=0, ge=0, description="Estimated token cost")
    metadata: dict[str, Any] = Field(default_factory=dict, description="author, state, summary")

    @property
    def is_summary(self) -> bool:
        return bool(self.metadata.get("summary"))


class ConversationMetadata(BaseModel):
    """Session-level facts accumulated across turns."""

    model_config = ConfigDict(validate_assignment=True)

    started_at: datetime = Field(default_factory=utc_now, description="Session start")
    last_activity_at: datetime = Field(default_factory=utc_now, description="Last turn time")
    language: Language | None = Field(default=None, description="Detected language")
    current_branch: str | None = Field(default=None, description="Last mentioned branch")
    current_platform: str | None = Field(default=None, description="Last mentioned platform")
    tickets: list[str] = Field(default_factory=list, description="Linked ticket ids")
    resolved_intents: set[IntentType] = Field(
        default_factory=set, description="Intents answered with confidence"
    )
    failed_intents: dict[IntentType, int] = Field(
        default_factory=dict, description="intent -> low-confidence turn count"
    )


class ConversationContext(BaseModel):
    """Per-session conversation history.

    Owned by one session and only changed through ContextWindowManager.add_turn,
    which returns a new copy rather than mutating in place.
    """

    session_id: str = Field(..., description="Session identifier")
    user_email: str | None = Field(default=None, description="Known customer email")
    turns: list[Turn] = Field(default_factory=list, description="Chronological turns")
    metadata: ConversationMetadata = Field(default_factory=ConversationMetadata)

    @property
    def last_user_turn(self) -> Turn | None:
        for turn in reversed(self.turns):
            if turn.role == "user":
                return turn
        return None

    @property
    def total_tokens(self) -> int:
        return sum(t.token_cost for t in self.turns)
