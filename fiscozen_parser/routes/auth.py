"""
Provider login endpoint.

POST /login runs the CSRF bootstrap + login handshake against Fiscozen and
stores the resulting session in memory. The returned token is an opaque
session marker, not a credential: it only selects which stored session
later calls use.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status

from fiscozen_parser.auth.dependencies import get_session_establisher, get_session_manager
from fiscozen_parser.auth.establisher import SessionEstablisher
from fiscozen_parser.auth.session import SessionManager
from fiscozen_parser.schemas.auth import LoginRequest, LoginResponse
from fiscozen_parser.utils.logging import mask_email

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="Log in to Fiscozen",
    description="""
    Establish a Fiscozen session with the operator's account credentials.

    The session lives in process memory for 24 hours or until the provider
    answers 401. Send the returned token as `Authorization: Bearer <token>`
    to pin later calls to this session; without it the latest session is used.
    """
)
async def login(
    request: LoginRequest,
    establisher: Annotated[SessionEstablisher, Depends(get_session_establisher)],
    manager: Annotated[SessionManager, Depends(get_session_manager)],
) -> LoginResponse:
    logger.info(f"Login requested for {mask_email(request.email)}")

    marker = await manager.login(establisher, request.email, request.password)
    session = manager.store_for(marker).session
    assert session is not None

    return LoginResponse(
        token=marker,
        expiresAt=session.expires_at.isoformat(),
    )
