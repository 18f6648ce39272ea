"""
VAT and postal code lookups used while completing a customer.

These endpoints do not need a Fiscozen session. Upstream failures come
back as 200 with an `error` field; only malformed input is a 400.
"""

import logging
from typing import Annotated

import httpx
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from fiscozen_parser.auth.dependencies import get_lookup_http
from fiscozen_parser.schemas.lookups import (
    LocationResponse,
    VatValidationRequest,
    VatValidationResponse,
)
from fiscozen_parser.services.lookup_service import (
    InvalidLookupInput,
    lookup_location,
    validate_vat,
)
from fiscozen_parser.services.session_log import SessionLog, get_session_log

logger = logging.getLogger(__name__)

router = APIRouter(tags=["lookups"])


def _bad_request(e: InvalidLookupInput) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "error": str(e), "code": "invalid_input"},
    )


@router.post(
    "/validate-vat",
    response_model=VatValidationResponse,
    summary="Validate an Italian VAT number",
)
async def validate_vat_number(
    request: VatValidationRequest,
    http: Annotated[httpx.AsyncClient, Depends(get_lookup_http)],
    session_log: Annotated[SessionLog, Depends(get_session_log)],
):
    try:
        result = await validate_vat(http, session_log, request.vat_number)
    except InvalidLookupInput as e:
        return _bad_request(e)
    return VatValidationResponse(**result)


@router.get(
    "/location/{cap}",
    response_model=LocationResponse,
    summary="Municipality and province for a postal code",
)
async def get_location(
    cap: str,
    http: Annotated[httpx.AsyncClient, Depends(get_lookup_http)],
    session_log: Annotated[SessionLog, Depends(get_session_log)],
):
    try:
        result = await lookup_location(http, session_log, cap)
    except InvalidLookupInput as e:
        return _bad_request(e)
    return LocationResponse(**result)
