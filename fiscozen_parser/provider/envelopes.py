"""
Boundary parsers for the provider's inconsistent response bodies.

Each parser tries the known shapes in a fixed priority order and raises
UnrecognizedResponseShape when none matches, instead of defaulting to an
empty value that would hide a provider-side error page.
"""

from typing import Any, Dict, List, Optional

from fiscozen_parser.provider.errors import UnrecognizedResponseShape


def _first_present(record: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = record.get(key)
        if value is not None and value != "":
            return value
    return None


def _as_str(value: Any) -> str:
    return "" if value is None else str(value)


def parse_customer_list(body: Any) -> List[Dict[str, Any]]:
    """
    Extract the customer rows from a search response.

    Accepted shapes, in priority order: {"results": [...]}, {"data": [...]},
    bare [...].
    """
    if isinstance(body, dict):
        for key in ("results", "data"):
            rows = body.get(key)
            if isinstance(rows, list):
                return [row for row in rows if isinstance(row, dict)]
    elif isinstance(body, list):
        return [row for row in body if isinstance(row, dict)]

    raise UnrecognizedResponseShape(
        "Unrecognized customer search response from provider",
        details=body,
    )


def map_search_result(customer: Dict[str, Any]) -> Dict[str, str]:
    """Project a provider customer onto the SearchResult fields."""
    return {
        "provider_customer_id": _as_str(customer.get("id")),
        "legal_name": _as_str(_first_present(customer, "company_name", "name")),
        "tax_id": _as_str(_first_present(customer, "vat_number", "fiscal_code")),
        "municipality": _as_str(customer.get("municipality")),
        "province": _as_str(customer.get("province")),
        "address": _as_str(customer.get("address")),
        "email": _as_str(customer.get("email")),
        "phone": _as_str(customer.get("phone")),
    }


def parse_created_id(body: Any, *alternate_keys: str) -> str:
    """
    Extract the id of a created resource ("id", then each alternate key).

    Raises:
        UnrecognizedResponseShape: If no id is present.
    """
    if isinstance(body, dict):
        value = _first_present(body, "id", *alternate_keys)
        if value is not None:
            return str(value)

    raise UnrecognizedResponseShape(
        "Provider response does not contain an id",
        details=body,
    )


def parse_invoice_number(body: Any) -> Optional[str]:
    if not isinstance(body, dict):
        return None
    value = _first_present(body, "invoiceNumber", "invoice_number", "number")
    return None if value is None else str(value)
