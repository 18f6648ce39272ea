"""
Persistence sink for the Fiscozen parser backend.

Nothing here is required by the provider workflow: session state lives in
memory. Supabase only receives append-only logs and session records.
"""

from .client import get_supabase_client

__all__ = ["get_supabase_client"]
