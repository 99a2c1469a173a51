"""Health check and metrics endpoints."""

from datetime import UTC, datetime

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from tastychat import __version__
from tastychat.api.dependencies import ChatServiceDep
from tastychat.api.models.health import HealthResponse
from tastychat.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(service: ChatServiceDep) -> HealthResponse:
    """Service status and the number of live sessions."""
    logger.debug("health_check_request")
    session_ids = await service.list_session_ids()
    return HealthResponse(
        status="healthy",
        version=__version__,
        active_sessions=len(session_ids),
        timestamp=datetime.now(UTC),
    )


@router.get("/metrics")
async def get_metrics() -> Response:
    """Prometheus metrics in text exposition format."""
    logger.debug("metrics_request")
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
