"""
Health check route.

PUBLIC (no session required) and never calls the provider: it only reports
whether the default provider session is currently valid.
"""

from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends

from fiscozen_parser import __version__
from fiscozen_parser.auth.dependencies import get_session_manager
from fiscozen_parser.auth.session import SessionManager
from fiscozen_parser.schemas.health import HealthResponse
from fiscozen_parser.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["system"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check endpoint",
    status_code=200,
)
async def health_check(
    manager: Annotated[SessionManager, Depends(get_session_manager)],
) -> HealthResponse:
    logger.debug("Health check endpoint called")

    return HealthResponse(
        version=__version__,
        timestamp=datetime.now(timezone.utc).isoformat(),
        providerSession=manager.default_store.is_valid(),
    )
