"""
HTTP access to the Fiscozen web API.

- build_async_client(): the shared transport (httpx.AsyncClient) with the
  provider base URL, browser-like headers and the outbound deadline.
- AuthenticatedClient: wraps every authenticated call. It refuses to send
  anything without a valid session, attaches cookies, CSRF token and the
  XHR headers the provider's bot detection expects, and clears the session
  when the provider answers 401.
"""

import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from fiscozen_parser.auth.session import CredentialStore
from fiscozen_parser.config import settings
from fiscozen_parser.provider.errors import (
    NotAuthenticated,
    ProviderUnreachable,
    SessionExpired,
    provider_message,
)
from fiscozen_parser.services.session_log import Event, SessionLog
from fiscozen_parser.utils.constants import REFERER_HOME

logger = logging.getLogger(__name__)

JSON_ACCEPT = "application/json, text/plain, */*"


def browser_headers() -> Dict[str, str]:
    return {
        "User-Agent": settings.FISCOZEN_USER_AGENT,
        "Accept-Language": "it-IT,it;q=0.9,en;q=0.8",
    }


def build_async_client(
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    base_url: Optional[str] = None,
) -> httpx.AsyncClient:
    """
    Create the provider transport.

    Cookies are never kept in the client jar: session cookies travel in an
    explicit Cookie header built from the CredentialStore, so one client can
    serve callers holding different sessions.
    """
    return httpx.AsyncClient(
        base_url=(base_url or settings.FISCOZEN_BASE_URL).rstrip("/"),
        timeout=httpx.Timeout(settings.PROVIDER_TIMEOUT_SECONDS),
        headers=browser_headers(),
        follow_redirects=True,
        transport=transport,
    )


def response_body(response: httpx.Response) -> Any:
    """Decoded JSON body, falling back to text for HTML/empty error pages."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class AuthenticatedClient:
    """Authenticated request wrapper bound to one CredentialStore."""

    def __init__(self, http: httpx.AsyncClient, store: CredentialStore, session_log: SessionLog):
        self._http = http
        self._store = store
        self._log = session_log

    @property
    def store(self) -> CredentialStore:
        return self._store

    def _headers(self, referer_path: str) -> Dict[str, str]:
        session = self._store.session
        assert session is not None
        origin = settings.FISCOZEN_ORIGIN.rstrip("/")
        headers = {
            "Accept": JSON_ACCEPT,
            "Content-Type": "application/json",
            "Cookie": session.cookie_header,
            "X-Requested-With": "XMLHttpRequest",
            "Referer": f"{origin}{referer_path}",
            "Origin": origin,
        }
        if session.csrf_token:
            headers["X-CSRFToken"] = session.csrf_token
        return headers

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
        referer_path: str = REFERER_HOME,
    ) -> httpx.Response:
        """
        Send one authenticated request. Single attempt, no retries.

        Returns:
            The provider response for any status other than 401.

        Raises:
            NotAuthenticated: No valid session; nothing was sent.
            SessionExpired: Provider answered 401; the session is cleared.
            ProviderUnreachable: Transport error or timeout.
        """
        if not self._store.is_valid():
            raise NotAuthenticated("Not authenticated")

        try:
            response = await self._http.request(
                method,
                path,
                params=params,
                json=json,
                headers=self._headers(referer_path),
            )
        except httpx.HTTPError as e:
            logger.error(f"Provider request {method} {path} failed: {e}")
            raise ProviderUnreachable(f"Provider request failed: {e}") from e

        if response.status_code == 401:
            self._store.clear()
            body = response_body(response)
            self._log.observe(
                Event.SESSION_EXPIRED,
                "Provider rejected session, credentials cleared",
                {"method": method, "path": path},
                level="warn",
            )
            raise SessionExpired(
                provider_message(body, "Session expired, please log in again"),
                details=body,
            )

        return response

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", path, **kwargs)
