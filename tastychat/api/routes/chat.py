"""Chat endpoint."""

from fastapi import APIRouter

from tastychat.api.dependencies import ChatServiceDep
from tastychat.api.models.chat import ChatRequest, ChatResponse
from tastychat.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.post("/chat", response_model=ChatResponse)
async def chat(request: ChatRequest, service: ChatServiceDep) -> ChatResponse:
    """Process one customer message.

    A new session is created when `session_id` is omitted or unknown. The
    engine never raises; failures come back as an apology with
    `escalate=true`.
    """
    logger.debug("chat_request", session_id=request.session_id)

    session, result = await service.handle(
        request.message,
        session_id=request.session_id,
        user_email=request.user_email,
    )
    return ChatResponse.from_result(session.session_id, session.state, result)
