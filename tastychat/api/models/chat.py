"""Chat endpoint models."""

from typing import Any

from pydantic import BaseModel, Field

from tastychat.chat.models import ChatResult
from tastychat.conversation.models import Action, ConversationState


class ChatRequest(BaseModel):
    """Body of POST /v1/chat."""

    session_id: str | None = Field(
        default=None, max_length=128, description="Existing session; omitted to start one"
    )
    message: str = Field(..., min_length=1, max_length=4000, description="Customer message")
    user_email: str | None = Field(default=None, description="Known customer email")


class ChatResponse(BaseModel):
    """One processed turn plus the session it belongs to."""

    session_id: str
    state: ConversationState
    response: str
    escalate: bool = False
    escalation_reason: str | None = None
    used_rag: bool = False
    used_tools: bool = False
    actions: list[Action] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_result(
        cls, session_id: str, state: ConversationState, result: ChatResult
    ) -> "ChatResponse":
        return cls(
            session_id=session_id,
            state=result.state or state,
            response=result.response,
            escalate=result.escalate,
            escalation_reason=result.escalation_reason,
            used_rag=result.used_rag,
            used_tools=result.used_tools,
            actions=result.actions,
            metadata=result.metadata,
        )
