"""Session inspection and closing."""

from fastapi import APIRouter

from tastychat.api.dependencies import ChatServiceDep
from tastychat.api.exceptions import SessionNotFoundError
from tastychat.api.models.session import SessionResponse, TurnResponse
from tastychat.conversation.session import ChatSession
from tastychat.conversation.window import export_conversation
from tastychat.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/sessions")


def _map_session_to_response(session: ChatSession) -> SessionResponse:
    context = session.context
    turns = [
        TurnResponse(
            role=turn.role,
            content=turn.content,
            timestamp=turn.timestamp,
            intent=turn.intent.intent.value if turn.intent else None,
            confidence=turn.intent.confidence if turn.intent else None,
            metadata=turn.metadata,
        )
        for turn in context.turns
    ]
    return SessionResponse(
        session_id=session.session_id,
        state=session.state,
        user_email=context.user_email,
        language=context.metadata.language,
        tickets=list(context.metadata.tickets),
        turns=turns,
        transcript=export_conversation(context),
        created_at=session.created_at,
        last_activity_at=context.metadata.last_activity_at,
    )


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str, service: ChatServiceDep) -> SessionResponse:
    """Get a session's state and transcript.

    Raises:
        SessionNotFoundError: If the session doesn't exist
    """
    session = await service.get_session(session_id)
    if session is None:
        raise SessionNotFoundError(f"Session {session_id} not found")
    return _map_session_to_response(session)


@router.delete("/{session_id}", status_code=204)
async def close_session(session_id: str, service: ChatServiceDep) -> None:
    """Close a session and release its subscriptions.

    Raises:
        SessionNotFoundError: If the session doesn't exist
    """
    if not await service.close_session(session_id):
        raise SessionNotFoundError(f"Session {session_id} not found")
    logger.info("session_close_requested", session_id=session_id)
