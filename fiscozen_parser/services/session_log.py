"""
Session log: the single observation point of the provider workflow.

Every state-machine transition (login attempted/succeeded/failed, customer
searched/resolved/created, invoice submitted/created/rejected, session
expired) is reported through SessionLog.observe(). Entries always go to the
Python logger and, when Supabase is configured, to the `logs` table.

A failing sink never fails the caller.
"""

import json
import logging
from typing import Any, Mapping, Optional

from supabase import Client

from fiscozen_parser.db.client import get_supabase_client
from fiscozen_parser.utils.logging import redact_payload

logger = logging.getLogger(__name__)

LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


class Event:
    """Observed workflow transitions."""
    LOGIN_ATTEMPTED = "login.attempted"
    LOGIN_SUCCEEDED = "login.succeeded"
    LOGIN_FAILED = "login.failed"
    SESSION_EXPIRED = "session.expired"
    CUSTOMER_SEARCHED = "customer.searched"
    CUSTOMER_RESOLVED = "customer.resolved"
    CUSTOMER_CREATED = "customer.created"
    CUSTOMER_CREATION_FAILED = "customer.creation_failed"
    INVOICE_SUBMITTED = "invoice.submitted"
    INVOICE_CREATED = "invoice.created"
    INVOICE_REJECTED = "invoice.rejected"
    LOOKUP_COMPLETED = "lookup.completed"
    LOOKUP_FAILED = "lookup.failed"
    EXTRACTION_COMPLETED = "extraction.completed"


class SessionLog:
    """Append-only log sink keyed by level/message/JSON payload."""

    def __init__(self, client: Optional[Client] = None, table: str = "logs"):
        self._client = client
        self._table = table

    def observe(
        self,
        event: str,
        message: str,
        payload: Optional[Mapping[str, Any]] = None,
        level: str = "info",
    ) -> None:
        data = redact_payload(payload)
        logger.log(
            LEVELS.get(level, logging.INFO),
            f"[{event}] {message} {json.dumps(data, default=str)}"
        )

        if self._client is None:
            return

        try:
            self._client.table(self._table).insert({
                "level": level,
                "message": message,
                "event": event,
                "data": json.loads(json.dumps(data, default=str)),
            }).execute()
        except Exception as e:
            logger.warning(f"Session log sink failed for {event}: {e}")


_session_log: Optional[SessionLog] = None


def get_session_log() -> SessionLog:
    """Shared SessionLog bound to the Supabase sink when configured."""
    global _session_log
    if _session_log is None:
        _session_log = SessionLog(get_supabase_client())
    return _session_log
