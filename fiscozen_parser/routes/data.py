"""
Stored workflow session records and their export.

Mounted under /api/data. Every endpoint needs Supabase; without it they
answer 503.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response
from supabase import Client

from fiscozen_parser.db.client import get_supabase_client
from fiscozen_parser.schemas.sessions import (
    SessionDetailResponse,
    SessionListResponse,
    SessionRecordCreateResponse,
    SessionRecordRequest,
    SessionSummary,
)
from fiscozen_parser.services.session_record_service import (
    get_recent_session_records,
    get_session_record,
    save_session_record,
    sessions_to_csv,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["data"])


def require_supabase() -> Client:
    supabase_client = get_supabase_client()
    if supabase_client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "error": "storage_unavailable",
                "details": "Supabase is not configured",
            },
        )
    return supabase_client


@router.post(
    "/sessions",
    response_model=SessionRecordCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Save a workflow session record",
)
async def create_session_record(
    request: SessionRecordRequest,
    supabase_client: Annotated[Client, Depends(require_supabase)],
) -> SessionRecordCreateResponse:
    try:
        session_id = await save_session_record(
            supabase_client,
            client_data=request.client_data,
            search_results=request.search_results,
            status=request.status,
            created_client_id=request.created_client_id,
        )
    except Exception as e:
        logger.error(f"Failed to save session record: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "save_failed", "details": "Could not save session record"},
        )
    return SessionRecordCreateResponse(sessionId=session_id)


@router.get(
    "/sessions",
    response_model=SessionListResponse,
    summary="Most recent session records",
)
async def list_session_records(
    supabase_client: Annotated[Client, Depends(require_supabase)],
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> SessionListResponse:
    sessions = await get_recent_session_records(supabase_client, limit=limit)
    return SessionListResponse(sessions=[SessionSummary(**row) for row in sessions])


@router.get(
    "/sessions/{session_id}",
    response_model=SessionDetailResponse,
    summary="One session record",
)
async def get_session_record_by_id(
    session_id: str,
    supabase_client: Annotated[Client, Depends(require_supabase)],
) -> SessionDetailResponse:
    record = await get_session_record(supabase_client, session_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "not_found", "details": f"Session {session_id} not found"},
        )
    return SessionDetailResponse(session=record)


@router.get("/export/csv", summary="Export recent sessions as CSV")
async def export_sessions_csv(
    supabase_client: Annotated[Client, Depends(require_supabase)],
    limit: Annotated[int, Query(ge=1, le=1000)] = 100,
) -> Response:
    sessions = await get_recent_session_records(supabase_client, limit=limit)
    return Response(
        content=sessions_to_csv(sessions),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="fiscozen-sessions.csv"'},
    )


@router.get(
    "/export/json",
    response_model=SessionListResponse,
    summary="Export recent sessions as JSON",
)
async def export_sessions_json(
    supabase_client: Annotated[Client, Depends(require_supabase)],
    limit: Annotated[int, Query(ge=1, le=1000)] = 100,
) -> SessionListResponse:
    sessions = await get_recent_session_records(supabase_client, limit=limit)
    return SessionListResponse(sessions=[SessionSummary(**row) for row in sessions])
