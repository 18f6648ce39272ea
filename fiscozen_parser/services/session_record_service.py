"""
Workflow session records (what was extracted, searched and created).

Records live in the Supabase `sessions` table:
    id, timestamp, client_data (json), search_results (json), status,
    created_client_id
"""

import csv
import io
import logging
from typing import Any, Dict, List, Optional, cast
from uuid import uuid4

from supabase import Client

logger = logging.getLogger(__name__)

SESSIONS_TABLE = "sessions"

CSV_HEADERS = ["ID", "Timestamp", "Ragione Sociale", "Status", "Created Client ID"]


async def save_session_record(
    supabase_client: Client,
    client_data: Dict[str, Any],
    search_results: List[Dict[str, Any]],
    status: str,
    created_client_id: Optional[str] = None,
) -> str:
    """
    Insert a session record.

    Returns:
        The generated session id (UUID4 string).
    """
    session_id = str(uuid4())
    record = {
        "id": session_id,
        "client_data": client_data,
        "search_results": search_results,
        "status": status,
        "created_client_id": created_client_id,
    }

    result = supabase_client.table(SESSIONS_TABLE).upsert(record).execute()
    if not result.data:
        raise Exception("Failed to save session record: no data returned")

    logger.info(f"Session record saved: id={session_id}, status={status}")
    return session_id


async def get_session_record(supabase_client: Client, session_id: str) -> Optional[Dict[str, Any]]:
    result = (
        supabase_client.table(SESSIONS_TABLE)
        .select("*")
        .eq("id", session_id)
        .execute()
    )

    if not result.data:
        logger.warning(f"Session record {session_id} not found")
        return None

    return cast(Dict[str, Any], result.data[0])


async def get_recent_session_records(supabase_client: Client, limit: int = 10) -> List[Dict[str, Any]]:
    result = (
        supabase_client.table(SESSIONS_TABLE)
        .select("id, timestamp, status, created_client_id, client_data")
        .order("timestamp", desc=True)
        .limit(limit)
        .execute()
    )

    sessions = []
    for row in cast(List[Dict[str, Any]], result.data or []):
        client_data = row.get("client_data") or {}
        sessions.append({
            "id": row.get("id"),
            "timestamp": row.get("timestamp"),
            "status": row.get("status"),
            "created_client_id": row.get("created_client_id"),
            "ragione_sociale": client_data.get("ragioneSociale") or client_data.get("legal_name"),
        })
    return sessions


def sessions_to_csv(sessions: List[Dict[str, Any]]) -> str:
    """Render recent session rows as CSV (all fields quoted)."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for session in sessions:
        writer.writerow([
            session.get("id") or "",
            session.get("timestamp") or "",
            session.get("ragione_sociale") or "",
            session.get("status") or "",
            session.get("created_client_id") or "",
        ])
    return buffer.getvalue()
