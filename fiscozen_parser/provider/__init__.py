"""
Fiscozen provider access layer.

Includes:
- Transport factory and the authenticated request wrapper (client)
- Response envelope parsers (envelopes)
- Error taxonomy shared by every provider workflow (errors)

Only the error taxonomy is re-exported here: auth.session depends on it,
and the client depends on auth.session.
"""

from .errors import ProviderError

__all__ = ["ProviderError"]
