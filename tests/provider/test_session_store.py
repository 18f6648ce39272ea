"""
Tests for CredentialStore and SessionManager.

Covers:
- validity window (now < expires_at)
- clear() empties the slot
- per-marker stores and the default slot
- concurrent logins never interleave
"""

import asyncio

import pytest

from fiscozen_parser.auth.session import CredentialStore, SessionManager
from fiscozen_parser.provider.errors import NotAuthenticated


class StaticEstablisher:
    """Establisher that installs a prepared session without network calls."""

    def __init__(self, session_factory, markers):
        self._session_factory = session_factory
        self._markers = list(markers)
        self.in_flight = 0
        self.max_in_flight = 0

    async def login(self, identifier, secret, store):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        await asyncio.sleep(0)
        marker = self._markers.pop(0)
        store.set(self._session_factory(marker))
        self.in_flight -= 1
        return marker


class TestCredentialStore:

    def test_empty_store_is_not_valid(self, clock):
        store = CredentialStore(clock=clock)

        assert store.session is None
        assert store.is_valid() is False

    def test_session_valid_until_expiry(self, clock, session_factory):
        store = CredentialStore(clock=clock)
        store.set(session_factory())

        clock.advance(hours=23, minutes=59)
        assert store.is_valid() is True

        clock.advance(minutes=1)
        assert store.is_valid() is False

    def test_clear_empties_slot(self, logged_in_store):
        logged_in_store.clear()

        assert logged_in_store.session is None
        assert logged_in_store.is_valid() is False

    def test_set_replaces_previous_session(self, logged_in_store, session_factory):
        logged_in_store.set(session_factory("second"))

        assert logged_in_store.session.marker == "second"


class TestSessionManager:

    @pytest.mark.asyncio
    async def test_login_registers_store_and_default(self, clock, session_factory):
        manager = SessionManager(clock=clock)

        marker = await manager.login(StaticEstablisher(session_factory, ["m1"]), "user@example.com", "pw")

        assert marker == "m1"
        assert manager.store_for("m1").is_valid()
        assert manager.store_for(None) is manager.store_for("m1")
        assert manager.default_store.session.marker == "m1"

    @pytest.mark.asyncio
    async def test_second_login_does_not_replace_first_marker_store(self, clock, session_factory):
        manager = SessionManager(clock=clock)
        establisher = StaticEstablisher(session_factory, ["m1", "m2"])

        await manager.login(establisher, "a@example.com", "pw")
        await manager.login(establisher, "b@example.com", "pw")

        assert manager.store_for("m1").session.marker == "m1"
        assert manager.store_for("m2").session.marker == "m2"
        assert manager.default_store.session.marker == "m2"

    def test_no_login_yet_returns_empty_default(self, clock):
        manager = SessionManager(clock=clock)

        assert manager.store_for(None).is_valid() is False

    def test_unknown_marker_raises_not_authenticated(self, clock):
        manager = SessionManager(clock=clock)

        with pytest.raises(NotAuthenticated):
            manager.store_for("fiscozen-session-unknown")

    @pytest.mark.asyncio
    async def test_expired_marker_raises_and_is_forgotten(self, clock, session_factory):
        manager = SessionManager(clock=clock)
        await manager.login(StaticEstablisher(session_factory, ["m1"]), "a@example.com", "pw")

        clock.advance(hours=25)

        with pytest.raises(NotAuthenticated):
            manager.store_for("m1")
        with pytest.raises(NotAuthenticated):
            manager.store_for("m1")

    @pytest.mark.asyncio
    async def test_concurrent_logins_are_serialized(self, clock, session_factory):
        manager = SessionManager(clock=clock)
        establisher = StaticEstablisher(session_factory, ["m1", "m2", "m3"])

        markers = await asyncio.gather(
            manager.login(establisher, "a@example.com", "pw"),
            manager.login(establisher, "b@example.com", "pw"),
            manager.login(establisher, "c@example.com", "pw"),
        )

        assert establisher.max_in_flight == 1
        assert sorted(markers) == ["m1", "m2", "m3"]
        assert manager.default_store.session.marker == markers[-1]

    @pytest.mark.asyncio
    async def test_failed_login_keeps_previous_default(self, clock, session_factory):
        manager = SessionManager(clock=clock)
        await manager.login(StaticEstablisher(session_factory, ["m1"]), "a@example.com", "pw")

        class FailingEstablisher:
            async def login(self, identifier, secret, store):
                raise NotAuthenticated("nope")

        with pytest.raises(NotAuthenticated):
            await manager.login(FailingEstablisher(), "a@example.com", "bad")

        assert manager.default_store.session.marker == "m1"

    @pytest.mark.asyncio
    async def test_clear_all(self, clock, session_factory):
        manager = SessionManager(clock=clock)
        await manager.login(StaticEstablisher(session_factory, ["m1"]), "a@example.com", "pw")

        manager.clear_all()

        assert manager.default_store.is_valid() is False
        with pytest.raises(NotAuthenticated):
            manager.store_for("m1")
