"""Chat engine result model."""

from typing import Any

from pydantic import BaseModel, Field

from tastychat.conversation.models import Action, ConversationState


class ChatResult(BaseModel):
    """Outcome of one user turn, as shown to the UI layer."""

    response: str = Field(..., min_length=1, description="Text to show the user")
    escalate: bool = Field(default=False, description="Needs human follow-up")
    escalation_reason: str | None = None
    used_rag: bool = False
    used_tools: bool = False
    state: ConversationState | None = Field(default=None, description="State after the turn")
    actions: list[Action] = Field(default_factory=list, description="Suggested follow-ups")
    metadata: dict[str, Any] = Field(default_factory=dict)
