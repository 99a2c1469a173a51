"""API route registration."""

from fastapi import APIRouter, FastAPI

from tastychat.observability.logging import get_logger

logger = get_logger(__name__)


def create_v1_router() -> APIRouter:
    router = APIRouter(prefix="/v1")

    from tastychat.api.routes.chat import router as chat_router
    from tastychat.api.routes.sessions import router as sessions_router

    router.include_router(chat_router, tags=["Chat"])
    router.include_router(sessions_router, tags=["Sessions"])

    logger.debug("v1_router_created", routes=["chat", "sessions"])
    return router


def register_routes(app: FastAPI) -> None:
    """Register the v1 API and the root-level health routes."""
    app.include_router(create_v1_router())

    from tastychat.api.routes.health import router as health_router

    app.include_router(health_router, tags=["Health"])

    logger.info("routes_registered")
