"""
Tests for the VAT (VIES) and postal code (zippopotam) lookups.
"""

import httpx
import pytest

from fiscozen_parser.services.lookup_service import (
    InvalidLookupInput,
    build_lookup_client,
    lookup_location,
    validate_vat,
)


def lookup_http(handler):
    return build_lookup_client(transport=httpx.MockTransport(handler))


class TestValidateVat:

    @pytest.mark.asyncio
    async def test_valid_number(self, session_log):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"valid": True, "name": "ACME SRL"})

        result = await validate_vat(lookup_http(handler), session_log, "IT01234567890")

        assert result == {"valid": True, "details": {"valid": True, "name": "ACME SRL"}}
        assert seen[0].url.params["countryCode"] == "IT"
        assert seen[0].url.params["vatNumber"] == "01234567890"
        assert session_log.names == ["lookup.completed"]

    @pytest.mark.asyncio
    async def test_bad_format_makes_no_call(self, session_log):
        def handler(request):
            raise AssertionError("VIES must not be called")

        result = await validate_vat(lookup_http(handler), session_log, "12345")

        assert result == {"valid": False, "error": "Invalid VAT format"}

    @pytest.mark.asyncio
    async def test_empty_number_is_invalid_input(self, session_log):
        with pytest.raises(InvalidLookupInput):
            await validate_vat(lookup_http(lambda r: httpx.Response(200)), session_log, "")

    @pytest.mark.asyncio
    async def test_service_down(self, session_log):
        result = await validate_vat(
            lookup_http(lambda r: httpx.Response(503, text="down")),
            session_log,
            "01234567890",
        )

        assert result == {"valid": False, "error": "Validation service unavailable"}
        assert session_log.names == ["lookup.failed"]


class TestLookupLocation:

    @pytest.mark.asyncio
    async def test_first_place(self, session_log):
        def handler(request):
            assert request.url.path == "/IT/20121"
            return httpx.Response(200, json={"places": [
                {"place name": "Milano", "state": "Lombardia"},
                {"place name": "Milano Centro", "state": "Lombardia"},
            ]})

        result = await lookup_location(lookup_http(handler), session_log, "20121")

        assert result == {"comune": "Milano", "provincia": "Lombardia"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("cap", ["", "2012", "20121a", "ABCDE"])
    async def test_invalid_cap(self, session_log, cap):
        with pytest.raises(InvalidLookupInput):
            await lookup_location(lookup_http(lambda r: httpx.Response(200)), session_log, cap)

    @pytest.mark.asyncio
    async def test_unknown_cap(self, session_log):
        result = await lookup_location(
            lookup_http(lambda r: httpx.Response(404, json={})),
            session_log,
            "99999",
        )

        assert result == {"comune": "", "provincia": "", "error": "Location service unavailable"}
