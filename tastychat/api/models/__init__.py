"""Request and response models for the HTTP API."""

from tastychat.api.models.chat import ChatRequest, ChatResponse
from tastychat.api.models.errors import ErrorBody, ErrorCode, ErrorDetail, ErrorResponse
from tastychat.api.models.health import HealthResponse
from tastychat.api.models.session import SessionResponse, TurnResponse

__all__ = [
    "ChatRequest",
    "ChatResponse",
    "ErrorBody",
    "ErrorCode",
    "ErrorDetail",
    "ErrorResponse",
    "HealthResponse",
    "SessionResponse",
    "TurnResponse",
]
