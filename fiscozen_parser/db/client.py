"""
Supabase client factory.

Supabase is an optional sink: when SUPABASE_URL and SUPABASE_PUBLISHABLE_KEY
are configured, session logs and session records are written to the `logs`
and `sessions` tables. Without them the backend runs in local mode and the
factory returns None.
"""

import logging
from typing import Optional

from supabase import Client, create_client

from fiscozen_parser.config import settings

logger = logging.getLogger(__name__)

_client: Optional[Client] = None


def get_supabase_client() -> Optional[Client]:
    """
    Get the shared Supabase client, or None in local mode.

    The client is created lazily on first use and reused afterwards.
    """
    global _client

    if not settings.supabase_enabled:
        return None

    if _client is None:
        _client = create_client(
            supabase_url=settings.SUPABASE_URL,
            supabase_key=settings.SUPABASE_PUBLISHABLE_KEY
        )
        logger.info("Created Supabase client for session log sink")

    return _client
