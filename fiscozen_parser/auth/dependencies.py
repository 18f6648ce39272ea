"""
FastAPI dependency functions for the provider session.

These resolve, per request:
- the provider transport (httpx.AsyncClient, closed after the request)
- the caller's CredentialStore (from the optional Bearer session marker)
- the AuthenticatedClient bound to that store

Tests override get_provider_http / get_session_manager through
app.dependency_overrides.
"""

import logging
from typing import Annotated, AsyncIterator, Optional

import httpx
from fastapi import Depends, Header

from fiscozen_parser.auth.establisher import SessionEstablisher
from fiscozen_parser.auth.session import CredentialStore, SessionManager, session_manager
from fiscozen_parser.provider.client import AuthenticatedClient, build_async_client
from fiscozen_parser.provider.errors import NotAuthenticated
from fiscozen_parser.services.lookup_service import build_lookup_client
from fiscozen_parser.services.session_log import SessionLog, get_session_log

logger = logging.getLogger(__name__)


def get_session_manager() -> SessionManager:
    return session_manager


async def get_provider_http() -> AsyncIterator[httpx.AsyncClient]:
    async with build_async_client() as client:
        yield client


async def get_lookup_http() -> AsyncIterator[httpx.AsyncClient]:
    async with build_lookup_client() as client:
        yield client


async def get_session_marker(
    authorization: Annotated[str | None, Header()] = None
) -> Optional[str]:
    """
    Read the optional session marker from `Authorization: Bearer <marker>`.

    Returns:
        The marker, or None when no Authorization header was sent.

    Raises:
        NotAuthenticated: Header present but not in Bearer format
    """
    if not authorization:
        return None

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        logger.warning("Invalid Authorization header format")
        raise NotAuthenticated("Invalid Authorization header format")

    return parts[1]


async def get_credential_store(
    marker: Annotated[Optional[str], Depends(get_session_marker)],
    manager: Annotated[SessionManager, Depends(get_session_manager)],
) -> CredentialStore:
    return manager.store_for(marker)


async def get_authenticated_client(
    http: Annotated[httpx.AsyncClient, Depends(get_provider_http)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
    session_log: Annotated[SessionLog, Depends(get_session_log)],
) -> AuthenticatedClient:
    return AuthenticatedClient(http, store, session_log)


async def get_session_establisher(
    http: Annotated[httpx.AsyncClient, Depends(get_provider_http)],
    session_log: Annotated[SessionLog, Depends(get_session_log)],
) -> SessionEstablisher:
    return SessionEstablisher(http, session_log)
