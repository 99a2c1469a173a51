"""Dependency injection for API routes.

The chat service and its notification dispatcher are created once and
shared by every request. Tests override them with
`app.dependency_overrides` or `set_chat_service`.
"""

from typing import Annotated

from fastapi import Depends

from tastychat.chat import ChatService, create_chat_service
from tastychat.chat.factory import create_dispatcher
from tastychat.config import Settings, get_settings
from tastychat.observability.logging import get_logger
from tastychat.support import NotificationDispatcher

logger = get_logger(__name__)

_dispatcher: NotificationDispatcher | None = None
_chat_service: ChatService | None = None


def get_dispatcher(
    settings: Annotated[Settings, Depends(get_settings)],
) -> NotificationDispatcher:
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = create_dispatcher(settings)
        logger.info("notification_dispatcher_initialized")
    return _dispatcher


def get_chat_service(
    settings: Annotated[Settings, Depends(get_settings)],
    dispatcher: Annotated[NotificationDispatcher, Depends(get_dispatcher)],
) -> ChatService:
    """Get the shared ChatService, building it from settings on first use."""
    global _chat_service
    if _chat_service is None:
        _chat_service = create_chat_service(settings, dispatcher=dispatcher)
        logger.info("chat_service_initialized", model=settings.providers.llm.model)
    return _chat_service


def set_chat_service(service: ChatService | None) -> None:
    """Install a prebuilt service, or clear it with None."""
    global _chat_service
    _chat_service = service


SettingsDep = Annotated[Settings, Depends(get_settings)]
ChatServiceDep = Annotated[ChatService, Depends(get_chat_service)]


async def reset_dependencies() -> None:
    """Close the dispatcher and drop cached instances."""
    global _dispatcher, _chat_service

    if _dispatcher is not None:
        await _dispatcher.close()

    _dispatcher = None
    _chat_service = None
    get_settings.cache_clear()
