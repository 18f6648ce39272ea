"""
Provider session state.

ProviderSession is the credential bundle obtained from the Fiscozen login
handshake (cookie header + CSRF token). A CredentialStore holds at most one
of them; the SessionManager owns the stores and hands the right one to each
caller.

Scoping:
- Callers presenting `Authorization: Bearer <marker>` get the store created
  by their own login, so a second login never swaps credentials under them.
- Callers without a marker share the default slot, which always points at
  the most recent successful login (single-session "local mode").
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, Optional, Protocol

from fiscozen_parser.provider.errors import NotAuthenticated

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ProviderSession:
    """
    Authenticated provider session.

    Attributes:
        cookie_header: "name=value; name=value" exactly as re-sent to the provider
        csrf_token: Value of the csrftoken cookie ("" after a token-only login)
        marker: Opaque session marker returned to the caller
        created_at: When the login completed
        expires_at: Local expiry (created_at + TTL)
    """
    cookie_header: str
    csrf_token: str
    marker: str
    created_at: datetime
    expires_at: datetime


class CredentialStore:
    """Single-slot holder for a ProviderSession."""

    def __init__(self, clock: Clock = utcnow):
        self._clock = clock
        self._session: Optional[ProviderSession] = None

    @property
    def session(self) -> Optional[ProviderSession]:
        return self._session

    def is_valid(self) -> bool:
        return self._session is not None and self._clock() < self._session.expires_at

    def set(self, session: ProviderSession) -> None:
        self._session = session

    def clear(self) -> None:
        if self._session is not None:
            logger.info("Clearing provider session")
        self._session = None


class Establisher(Protocol):
    def login(self, identifier: str, secret: str, store: CredentialStore) -> Awaitable[str]:
        ...


class SessionManager:
    """
    Owns every CredentialStore of the process.

    Logins are serialized so that two concurrent handshakes never interleave
    their writes to the default slot.
    """

    def __init__(self, clock: Clock = utcnow):
        self._clock = clock
        self._stores: Dict[str, CredentialStore] = {}
        self._default = CredentialStore(clock=clock)
        self._login_lock = asyncio.Lock()

    @property
    def default_store(self) -> CredentialStore:
        return self._default

    async def login(self, establisher: Establisher, identifier: str, secret: str) -> str:
        """
        Run the login handshake into a fresh store and register it.

        Returns:
            The session marker identifying the new store.
        """
        async with self._login_lock:
            store = CredentialStore(clock=self._clock)
            marker = await establisher.login(identifier, secret, store)
            self.prune()
            self._stores[marker] = store
            self._default = store
            return marker

    def store_for(self, marker: Optional[str]) -> CredentialStore:
        """
        Resolve the store for a caller.

        Raises:
            NotAuthenticated: If a marker is given but unknown or expired.
        """
        if not marker:
            return self._default

        store = self._stores.get(marker)
        if store is None or not store.is_valid():
            self._stores.pop(marker, None)
            raise NotAuthenticated("Unknown or expired session token")
        return store

    def prune(self) -> None:
        """Forget stores whose session expired or was cleared."""
        for marker in [m for m, s in self._stores.items() if not s.is_valid()]:
            del self._stores[marker]

    def clear_all(self) -> None:
        self._stores.clear()
        self._default = CredentialStore(clock=self._clock)


# Process-wide instance, injected into routes via get_session_manager()
session_manager = SessionManager()
