"""Chat orchestration: engine, strategy selection and the session service."""

from tastychat.chat.engine import ChatEngine
from tastychat.chat.factory import create_chat_service
from tastychat.chat.models import ChatResult
from tastychat.chat.service import ChatService
from tastychat.chat.strategy import ResponseStrategy, select_strategy

__all__ = [
    "ChatEngine",
    "ChatResult",
    "ChatService",
    "ResponseStrategy",
    "create_chat_service",
    "select_strategy",
]
