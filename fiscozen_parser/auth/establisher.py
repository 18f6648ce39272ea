"""
Fiscozen login handshake.

The provider has no token API: the web app bootstraps a Django-style CSRF
cookie from an unauthenticated page, then posts the credentials with that
token and the collected cookies. This module replays that handshake:

1. Probe landing pages in order until one answers (CSRF bootstrap)
2. Collect every Set-Cookie pair and pick out csrftoken
3a. No CSRF cookie: try a direct login and accept a token-bearing body
3b. CSRF cookie: POST credentials with X-CSRFToken + Cookie headers
4. Store cookies + CSRF token in the CredentialStore for 24 hours
"""

import asyncio
import logging
import random
import re
import secrets
from datetime import timedelta
from typing import Any, List, Optional, Tuple

import httpx

from fiscozen_parser.auth.session import Clock, CredentialStore, ProviderSession, utcnow
from fiscozen_parser.config import settings
from fiscozen_parser.provider.client import JSON_ACCEPT, response_body
from fiscozen_parser.provider.errors import (
    AuthenticationRejected,
    CsrfUnavailable,
    InvalidCredentials,
    ProviderError,
    ProviderUnreachable,
    provider_message,
)
from fiscozen_parser.services.session_log import Event, SessionLog
from fiscozen_parser.utils.constants import CSRF_COOKIE_PATTERN, LANDING_PATHS, LOGIN_PATH
from fiscozen_parser.utils.logging import mask_email, truncate_secret

logger = logging.getLogger(__name__)

HTML_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8"

_csrf_re = re.compile(CSRF_COOKIE_PATTERN)


def collect_cookies(set_cookie_headers: List[str]) -> Tuple[str, Optional[str]]:
    """
    Fold Set-Cookie headers into a Cookie header and find the CSRF token.

    Keeps the `name=value` segment of each header, in the order received,
    joined with "; ". Duplicate names are kept.

    Returns:
        (cookie_header, csrf_token or None)
    """
    pairs: List[str] = []
    csrf_token: Optional[str] = None

    for header in set_cookie_headers:
        match = _csrf_re.search(header)
        if match:
            csrf_token = match.group(1)
        pair = header.split(";", 1)[0].strip()
        if pair:
            pairs.append(pair)

    return "; ".join(pairs), csrf_token


def merge_cookie_header(existing: str, set_cookie_headers: List[str]) -> str:
    """Append the pairs of later Set-Cookie headers to an existing Cookie header."""
    extra, _ = collect_cookies(set_cookie_headers)
    if not existing:
        return extra
    if not extra:
        return existing
    return f"{existing}; {extra}"


class SessionEstablisher:
    """Performs the CSRF bootstrap + login handshake against the provider."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        session_log: SessionLog,
        *,
        clock: Clock = utcnow,
        ttl: Optional[timedelta] = None,
        probe_retries: Optional[int] = None,
        probe_backoff: Optional[float] = None,
    ):
        self._http = http
        self._log = session_log
        self._clock = clock
        self._ttl = ttl or timedelta(hours=settings.SESSION_TTL_HOURS)
        self._probe_retries = (
            settings.LANDING_PROBE_RETRIES if probe_retries is None else probe_retries
        )
        self._probe_backoff = (
            settings.LANDING_PROBE_BACKOFF_SECONDS if probe_backoff is None else probe_backoff
        )

    async def login(self, identifier: str, secret: str, store: CredentialStore) -> str:
        """
        Log in to the provider and populate `store`.

        Args:
            identifier: Provider account email
            secret: Provider account password
            store: Store receiving the new session

        Returns:
            Opaque session marker for the caller.

        Raises:
            InvalidCredentials: Empty email or password (no network call)
            ProviderUnreachable: No landing page answered
            CsrfUnavailable: No CSRF cookie and the direct login failed
            AuthenticationRejected: Provider refused the credentials
        """
        if not identifier or not secret:
            logger.warning("Login attempted with missing credentials")
            raise InvalidCredentials("Email and password required")

        self._log.observe(Event.LOGIN_ATTEMPTED, "Fiscozen login attempt", {"email": identifier})

        try:
            landing = await self._probe_landing()
            cookie_header, csrf_token = collect_cookies(landing.headers.get_list("set-cookie"))

            if not csrf_token:
                logger.warning("CSRF cookie not found, trying direct login")
                session = await self._direct_login(identifier, secret, cookie_header)
            else:
                logger.info(f"CSRF token found: {truncate_secret(csrf_token, 10)}")
                session = await self._csrf_login(identifier, secret, cookie_header, csrf_token)
        except ProviderError as e:
            self._log.observe(
                Event.LOGIN_FAILED,
                "Fiscozen login failed",
                {"email": identifier, "error": e.message, "code": e.code},
                level="error" if e.status_code >= 500 else "warn",
            )
            raise

        store.set(session)
        self._log.observe(
            Event.LOGIN_SUCCEEDED,
            "Fiscozen login successful (session-based)",
            {"email": identifier, "csrf": bool(session.csrf_token)},
        )
        return session.marker

    async def _probe_landing(self) -> httpx.Response:
        """GET the first landing candidate that answers without a transport error."""
        self._http.cookies.clear()
        headers = {"Accept": HTML_ACCEPT}

        for path in LANDING_PATHS:
            for attempt in range(self._probe_retries + 1):
                if attempt:
                    # Bounded retry with jitter, transport errors only
                    await asyncio.sleep(self._probe_backoff * attempt * random.uniform(0.5, 1.5))
                try:
                    response = await self._http.get(path, headers=headers)
                except httpx.HTTPError as e:
                    logger.info(f"Landing path {path} failed (attempt {attempt + 1}): {e}")
                    continue
                logger.info(f"Landing path {path} answered {response.status_code}")
                self._http.cookies.clear()
                return response

        raise ProviderUnreachable("Could not access any login page")

    async def _post_credentials(
        self,
        identifier: str,
        secret: str,
        extra_headers: dict,
    ) -> httpx.Response:
        origin = settings.FISCOZEN_ORIGIN.rstrip("/")
        headers = {
            "Content-Type": "application/json",
            "Accept": JSON_ACCEPT,
            "Referer": f"{origin}/",
            "Origin": origin,
        }
        headers.update(extra_headers)
        try:
            response = await self._http.post(
                LOGIN_PATH,
                json={"email": identifier, "password": secret},
                headers=headers,
            )
        except httpx.HTTPError as e:
            raise ProviderUnreachable(f"Login request failed: {e}") from e
        self._http.cookies.clear()
        return response

    async def _direct_login(self, identifier: str, secret: str, cookie_header: str) -> ProviderSession:
        """Fallback login without CSRF; only a token-bearing body counts as success."""
        try:
            response = await self._post_credentials(identifier, secret, {})
        except ProviderUnreachable as e:
            raise CsrfUnavailable("CSRF token not found and direct login failed") from e

        body: Any = response_body(response)
        token = body.get("token") if isinstance(body, dict) else None
        if not response.is_success or not token:
            logger.warning(
                f"Direct login failed for {mask_email(identifier)}: status={response.status_code}"
            )
            raise CsrfUnavailable(
                "CSRF token not found and direct login failed",
                details=body if not response.is_success else None,
            )

        cookies = merge_cookie_header(cookie_header, response.headers.get_list("set-cookie"))
        return self._new_session(cookies, "", marker=f"fiscozen-{token}")

    async def _csrf_login(
        self,
        identifier: str,
        secret: str,
        cookie_header: str,
        csrf_token: str,
    ) -> ProviderSession:
        response = await self._post_credentials(
            identifier,
            secret,
            {"X-CSRFToken": csrf_token, "Cookie": cookie_header},
        )
        logger.info(f"Login response status: {response.status_code}")

        if response.status_code != 200:
            body = response_body(response)
            raise AuthenticationRejected(
                provider_message(body, "Invalid credentials"),
                details=body,
            )

        cookies = merge_cookie_header(cookie_header, response.headers.get_list("set-cookie"))
        return self._new_session(cookies, csrf_token)

    def _new_session(self, cookie_header: str, csrf_token: str, marker: Optional[str] = None) -> ProviderSession:
        now = self._clock()
        return ProviderSession(
            cookie_header=cookie_header,
            csrf_token=csrf_token,
            marker=marker or f"fiscozen-session-{secrets.token_urlsafe(16)}",
            created_at=now,
            expires_at=now + self._ttl,
        )
