"""
Regex extraction used when Gemini is not configured or fails.

Recognizes amounts in USD ($), GBP (£) and EUR (€/EUR/euro), in that
priority order, an 11-digit Italian VAT number and a short list of
well-known payers.
"""

import re
from typing import Optional, Tuple

from fiscozen_parser.agents.payment.types import PaymentAgentOutput

UNKNOWN_CLIENT = "Cliente da identificare"

_AMOUNT = r"(\d+(?:[.,]\d{1,2})?)"

CURRENCY_PATTERNS = (
    ("USD", (
        re.compile(r"\$\s*" + _AMOUNT + r"\s*(?:USD)?", re.IGNORECASE),
        re.compile(_AMOUNT + r"\s*\$\s*(?:USD)?", re.IGNORECASE),
        re.compile(_AMOUNT + r"\s*USD\b", re.IGNORECASE),
    )),
    ("GBP", (
        re.compile(r"£\s*" + _AMOUNT + r"\s*(?:GBP)?", re.IGNORECASE),
        re.compile(_AMOUNT + r"\s*£\s*(?:GBP)?", re.IGNORECASE),
        re.compile(_AMOUNT + r"\s*GBP\b", re.IGNORECASE),
    )),
    ("EUR", (
        re.compile(r"(?:€|\bEUR\b|\beuro\b)\s*" + _AMOUNT, re.IGNORECASE),
        re.compile(_AMOUNT + r"\s*(?:€|\bEUR\b|\beuro\b)", re.IGNORECASE),
    )),
)

VAT_PATTERN = re.compile(r"(?:p\.?\s?iva|partita iva|vat)\s*:?\s*(?:IT)?(\d{11})", re.IGNORECASE)

COMPANY_PATTERN = re.compile(
    r"(stripe|paypal|google|apple|microsoft|amazon|meta|facebook|netflix|spotify|"
    r"adobe|salesforce|zoom|slack|github|gitlab|aws|azure|digital ocean|heroku|"
    r"vercel|netlify)(?:\s+inc\.?|\s+ltd\.?|\s+srl|\s+spa)?",
    re.IGNORECASE,
)


def _to_float(raw: str) -> float:
    return float(raw.replace(",", "."))


def find_amount(text: str) -> Tuple[float, str]:
    """Return (amount, currency); (0.0, "EUR") when nothing matches."""
    for currency, patterns in CURRENCY_PATTERNS:
        for pattern in patterns:
            match = pattern.search(text)
            if match:
                return _to_float(match.group(1)), currency
    return 0.0, "EUR"


def find_vat_number(text: str) -> Optional[str]:
    match = VAT_PATTERN.search(text)
    return match.group(1) if match else None


def regex_extraction(text: str) -> PaymentAgentOutput:
    """Best-effort extraction; always returns a DRAFT."""
    amount, currency = find_amount(text)
    company = COMPANY_PATTERN.search(text)
    description = text.strip()
    if len(description) > 100:
        description = description[:100] + "..."

    return {
        "status": "DRAFT",
        "source": "regex",
        "client_name": company.group(0) if company else UNKNOWN_CLIENT,
        "vat_number": find_vat_number(text) or "",
        "address": "",
        "amount": amount,
        "currency": currency,
        "description": description,
        "date": None,
        "services": [
            {"description": "Servizio/Prodotto", "quantity": 1, "unit_price": amount}
        ],
        "reason": None,
    }
