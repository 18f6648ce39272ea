"""
Pass-through lookups used while filling in a customer.

- validate_vat(): Italian VAT format check, then the EU VIES service
- lookup_location(): municipality/province for an Italian postal code

Both degrade to an "unavailable" answer instead of raising when the
upstream service fails; only malformed input is an error.
"""

import logging
import re
from typing import Any, Dict

import httpx

from fiscozen_parser.config import settings
from fiscozen_parser.services.session_log import Event, SessionLog

logger = logging.getLogger(__name__)

VAT_RE = re.compile(r"^IT[0-9]{11}$|^[0-9]{11}$")
CAP_RE = re.compile(r"^\d{5}$")


class InvalidLookupInput(ValueError):
    """Malformed postal code or missing VAT number."""


def build_lookup_client(transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.PROVIDER_TIMEOUT_SECONDS),
        transport=transport,
    )


async def validate_vat(http: httpx.AsyncClient, session_log: SessionLog, vat_number: str) -> Dict[str, Any]:
    """
    Validate an Italian VAT number.

    Returns:
        {"valid": bool, "details": {...}} or {"valid": False, "error": str}
    """
    if not vat_number:
        raise InvalidLookupInput("VAT number required")

    vat_number = vat_number.strip().upper()
    clean_vat = re.sub(r"^IT", "", vat_number)
    if not VAT_RE.match(vat_number) and not VAT_RE.match(clean_vat):
        return {"valid": False, "error": "Invalid VAT format"}

    try:
        response = await http.get(
            settings.VIES_URL,
            params={"countryCode": "IT", "vatNumber": clean_vat},
        )
        response.raise_for_status()
        details = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"VAT validation service failed: {e}")
        session_log.observe(Event.LOOKUP_FAILED, "VAT validation error", {"error": str(e)}, level="error")
        return {"valid": False, "error": "Validation service unavailable"}

    valid = isinstance(details, dict) and details.get("valid") is True
    session_log.observe(
        Event.LOOKUP_COMPLETED,
        "VAT validation completed",
        {"partitaIVA": vat_number, "valid": valid},
    )
    return {"valid": valid, "details": details}


async def lookup_location(http: httpx.AsyncClient, session_log: SessionLog, cap: str) -> Dict[str, str]:
    """
    Resolve an Italian postal code (CAP).

    Returns:
        {"comune": str, "provincia": str}, plus "error" when the service failed

    Raises:
        InvalidLookupInput: cap is not five digits
    """
    if not cap or not CAP_RE.match(cap):
        raise InvalidLookupInput("Valid CAP required")

    try:
        response = await http.get(f"{settings.ZIPPOPOTAM_URL.rstrip('/')}/IT/{cap}")
        response.raise_for_status()
        places = response.json().get("places") or []
    except (httpx.HTTPError, ValueError, AttributeError) as e:
        logger.warning(f"Location lookup failed for {cap}: {e}")
        session_log.observe(Event.LOOKUP_FAILED, "Location lookup error", {"error": str(e)}, level="error")
        return {"comune": "", "provincia": "", "error": "Location service unavailable"}

    first = places[0] if places else {}
    location = {
        "comune": first.get("place name", ""),
        "provincia": first.get("state", ""),
    }
    session_log.observe(Event.LOOKUP_COMPLETED, "Location lookup completed", {"cap": cap, "location": location})
    return location
