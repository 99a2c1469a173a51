"""Session response models."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from tastychat.conversation.models import ConversationState


class TurnResponse(BaseModel):
    """Single turn in a session transcript."""

    role: str
    content: str
    timestamp: datetime
    intent: str | None = None
    confidence: float | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class SessionResponse(BaseModel):
    """Session state response for GET /v1/sessions/{id}."""

    session_id: str
    state: ConversationState
    user_email: str | None = None
    language: str | None = None
    tickets: list[str] = Field(default_factory=list)
    turns: list[TurnResponse] = Field(default_factory=list)
    transcript: str = Field(default="", description="Plain-text export")
    created_at: datetime
    last_activity_at: datetime
