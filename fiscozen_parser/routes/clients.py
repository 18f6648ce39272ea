"""
Customer search and creation endpoints.

Both require a Fiscozen session (see POST /login). They are thin wrappers
around CustomerResolver; errors surface as ProviderError and are rendered
by the handler registered in main.py.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status

from fiscozen_parser.auth.dependencies import get_authenticated_client
from fiscozen_parser.provider.client import AuthenticatedClient
from fiscozen_parser.provider.errors import MissingClient
from fiscozen_parser.schemas.clients import (
    ClientCreateResponse,
    ClientRecord,
    SearchResponse,
)
from fiscozen_parser.services.customer_service import CustomerResolver
from fiscozen_parser.services.session_log import SessionLog, get_session_log

logger = logging.getLogger(__name__)

router = APIRouter(tags=["clients"])


@router.get(
    "/search",
    response_model=SearchResponse,
    response_model_by_alias=True,
    summary="Search Fiscozen customers",
)
async def search_clients(
    client: Annotated[AuthenticatedClient, Depends(get_authenticated_client)],
    session_log: Annotated[SessionLog, Depends(get_session_log)],
    company_name: Annotated[Optional[str], Query(alias="companyName")] = None,
    tax_id: Annotated[Optional[str], Query(alias="partitaIVA")] = None,
) -> SearchResponse:
    """
    Search customers by company name. partitaIVA is only logged.

    Results keep the provider's order; the first one is what automatic
    resolution would pick.
    """
    if not company_name or not company_name.strip():
        raise MissingClient("Company name required")

    resolver = CustomerResolver(client, session_log)
    results = await resolver.search(company_name.strip(), tax_id)
    return SearchResponse(results=results)


@router.post(
    "/clients",
    response_model=ClientCreateResponse,
    status_code=status.HTTP_200_OK,
    summary="Create a Fiscozen customer",
)
async def create_client(
    request: ClientRecord,
    client: Annotated[AuthenticatedClient, Depends(get_authenticated_client)],
    session_log: Annotated[SessionLog, Depends(get_session_log)],
) -> ClientCreateResponse:
    """Create the customer without searching first."""
    if not request.legal_name.strip():
        raise MissingClient("Company name required")

    resolver = CustomerResolver(client, session_log)
    customer_id = await resolver.create(request)
    logger.info(f"Customer created via API: {customer_id}")
    return ClientCreateResponse(id=customer_id)
