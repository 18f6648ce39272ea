"""
Pytest configuration for the Fiscozen parser backend tests.

Sets up the test environment and the shared fixtures:
- provider: a scripted Fiscozen (httpx.MockTransport handler) that records
  every request it receives
- session_log: a SessionLog that remembers the observed events
- clock / logged_in_store: deterministic session state
"""
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple
from unittest.mock import MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient

# Disable config validation during tests
# This allows tests to run without requiring real environment variables
os.environ["VALIDATE_CONFIG"] = "false"

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "testing")
# Local mode: no Supabase sink, regex extraction only
os.environ["SUPABASE_URL"] = ""
os.environ["SUPABASE_PUBLISHABLE_KEY"] = ""
os.environ["GOOGLE_API_KEY"] = ""

from fiscozen_parser.auth.dependencies import (  # noqa: E402
    get_lookup_http,
    get_provider_http,
    get_session_manager,
)
from fiscozen_parser.auth.session import CredentialStore, ProviderSession, SessionManager  # noqa: E402
from fiscozen_parser.provider.client import AuthenticatedClient, build_async_client  # noqa: E402
from fiscozen_parser.services.lookup_service import build_lookup_client  # noqa: E402
from fiscozen_parser.services.session_log import SessionLog, get_session_log  # noqa: E402

FIXED_NOW = datetime(2025, 3, 14, 9, 30, tzinfo=timezone.utc)


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class RecordingSessionLog(SessionLog):
    """SessionLog without sink that keeps every observed event."""

    def __init__(self):
        super().__init__(client=None)
        self.events: List[Tuple[str, Dict[str, Any], str]] = []

    def observe(self, event, message, payload=None, level="info"):
        self.events.append((event, dict(payload or {}), level))
        super().observe(event, message, payload, level)

    @property
    def names(self) -> List[str]:
        return [event for event, _, _ in self.events]


class ProviderStub:
    """
    Scripted provider behind httpx.MockTransport.

    Responses are queued per (method, path). The last queued response of a
    route is repeated; unknown routes answer 404.
    """

    def __init__(self):
        self._routes: Dict[Tuple[str, str], List[Dict[str, Any]]] = {}
        self.requests: List[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        status_code: int = 200,
        *,
        json: Any = None,
        text: Optional[str] = None,
        cookies: Optional[List[str]] = None,
        error: Optional[Exception] = None,
    ) -> "ProviderStub":
        self._routes.setdefault((method, path), []).append({
            "status_code": status_code,
            "json": json,
            "text": text,
            "cookies": cookies or [],
            "error": error,
        })
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self._routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"detail": "Not found."})

        scripted = queue.pop(0) if len(queue) > 1 else queue[0]
        if scripted["error"] is not None:
            raise scripted["error"]

        headers = [("set-cookie", cookie) for cookie in scripted["cookies"]]
        if scripted["json"] is not None:
            return httpx.Response(scripted["status_code"], json=scripted["json"], headers=headers)
        if scripted["text"] is not None:
            return httpx.Response(scripted["status_code"], text=scripted["text"], headers=headers)
        return httpx.Response(scripted["status_code"], headers=headers)

    def calls(self, method: Optional[str] = None, path: Optional[str] = None) -> List[httpx.Request]:
        return [
            r for r in self.requests
            if (method is None or r.method == method) and (path is None or r.url.path == path)
        ]


@pytest.fixture
def supabase_client():
    """
    Mock Supabase client for the session record and log sink tests.
    Returns a MagicMock that simulates Supabase client behavior.
    """
    mock_client = MagicMock()
    return mock_client


@pytest.fixture
def provider() -> ProviderStub:
    return ProviderStub()


@pytest.fixture
def provider_http(provider) -> httpx.AsyncClient:
    """Provider transport wired to the scripted provider."""
    return build_async_client(transport=httpx.MockTransport(provider))


@pytest.fixture
def session_log() -> RecordingSessionLog:
    return RecordingSessionLog()


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


def make_session(clock: FrozenClock, marker: str = "fiscozen-session-test") -> ProviderSession:
    return ProviderSession(
        cookie_header="csrftoken=ABC123; sessionid=S1",
        csrf_token="ABC123",
        marker=marker,
        created_at=clock(),
        expires_at=clock() + timedelta(hours=24),
    )


@pytest.fixture
def logged_in_store(clock) -> CredentialStore:
    store = CredentialStore(clock=clock)
    store.set(make_session(clock))
    return store


@pytest.fixture
def authenticated_client(provider_http, logged_in_store, session_log) -> AuthenticatedClient:
    return AuthenticatedClient(provider_http, logged_in_store, session_log)


@pytest.fixture
def session_factory(clock):
    """Build valid ProviderSessions on the test clock."""
    def _make(marker: str = "fiscozen-session-test") -> ProviderSession:
        return make_session(clock, marker=marker)
    return _make


# --- Route fixtures ---------------------------------------------------------


class LookupStub:
    """VIES / zippopotam double: path -> response factory, 404 otherwise."""

    def __init__(self):
        self.responses: Dict[str, Any] = {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        factory = self.responses.get(request.url.path)
        if factory is None:
            return httpx.Response(404, json={})
        return factory(request)


@pytest.fixture
def lookups() -> LookupStub:
    return LookupStub()


@pytest.fixture
def manager(clock) -> SessionManager:
    return SessionManager(clock=clock)


@pytest.fixture
def client(provider_http, manager, session_log, lookups):
    """Create test client for FastAPI app with the provider doubles wired in."""
    from fiscozen_parser.main import app

    app.dependency_overrides[get_provider_http] = lambda: provider_http
    app.dependency_overrides[get_session_manager] = lambda: manager
    app.dependency_overrides[get_session_log] = lambda: session_log
    app.dependency_overrides[get_lookup_http] = lambda: build_lookup_client(
        transport=httpx.MockTransport(lookups)
    )

    yield TestClient(app)

    # Clean up after test
    app.dependency_overrides.clear()


@pytest.fixture
def logged_in(manager, logged_in_store):
    """Install a valid session as the default slot."""
    manager._default = logged_in_store
    return logged_in_store
