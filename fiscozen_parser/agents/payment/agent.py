"""
PaymentAgent Runner

Single-shot LLM extraction of a payment notification using Gemini. Falls
back to regex extraction when no API key is configured or the model
answer cannot be used.
"""

import json
import logging
from typing import Any, Dict, List

from google import genai
from google.genai import types

from fiscozen_parser.agents.payment.fallback import regex_extraction
from fiscozen_parser.agents.payment.prompts import (
    PAYMENT_AGENT_SYSTEM_PROMPT,
    build_payment_agent_user_prompt,
)
from fiscozen_parser.agents.payment.types import PaymentAgentOutput, ServiceLine
from fiscozen_parser.config import settings

logger = logging.getLogger(__name__)

MAX_TEXT_LENGTH = 20_000


def _invalid(reason: str) -> PaymentAgentOutput:
    return {
        "status": "INVALID_TEXT",
        "source": "llm",
        "client_name": None,
        "vat_number": None,
        "address": None,
        "amount": None,
        "currency": None,
        "description": None,
        "date": None,
        "services": None,
        "reason": reason,
    }


def _number(value: Any, default: float = 0.0) -> float:
    try:
        return float(str(value).replace(",", "."))
    except (TypeError, ValueError):
        return default


def _normalize_services(raw: Any, amount: float, description: str) -> List[ServiceLine]:
    services: List[ServiceLine] = []
    for item in raw or []:
        if not isinstance(item, dict) or not item.get("description"):
            logger.debug("Skipping malformed service line from model output")
            continue
        services.append({
            "description": str(item["description"]),
            "quantity": _number(item.get("quantity"), 1.0) or 1.0,
            "unit_price": _number(item.get("unit_price", item.get("unitPrice"))),
        })
    if not services:
        services.append({
            "description": description or "Servizio/Prodotto",
            "quantity": 1.0,
            "unit_price": amount,
        })
    return services


def normalize_model_output(result: Dict[str, Any]) -> PaymentAgentOutput:
    """Coerce the model JSON into a PaymentAgentOutput."""
    if result.get("status") == "INVALID_TEXT":
        return _invalid(result.get("reason") or "Text does not describe a payment")

    amount = _number(result.get("amount"))
    description = str(result.get("description") or "")
    return {
        "status": "DRAFT",
        "source": "llm",
        "client_name": str(result.get("client_name") or result.get("clientName") or ""),
        "vat_number": str(result.get("vat_number") or result.get("vatNumber") or ""),
        "address": str(result.get("address") or ""),
        "amount": amount,
        "currency": str(result.get("currency") or "EUR").upper(),
        "description": description,
        "date": result.get("date") or None,
        "services": _normalize_services(result.get("services"), amount, description),
        "reason": None,
    }


def run_payment_agent(text: str) -> PaymentAgentOutput:
    """
    Extract client and amounts from a payment notification.

    Args:
        text: Free-text payment notification

    Returns:
        PaymentAgentOutput with status DRAFT or INVALID_TEXT. `source` tells
        whether Gemini or the regex fallback produced it.

    Notes:
        - One prompt, one response, temperature 0
        - Never raises for model errors; the regex fallback answers instead
        - Does NOT log the payment text (may contain PII)
    """
    if not text or not text.strip():
        return _invalid("Payment text is required")

    text = text[:MAX_TEXT_LENGTH]

    if not settings.GOOGLE_API_KEY:
        logger.info("GOOGLE_API_KEY not configured, using regex extraction")
        return regex_extraction(text)

    try:
        client = genai.Client(api_key=settings.GOOGLE_API_KEY)

        config = types.GenerateContentConfig(
            system_instruction=PAYMENT_AGENT_SYSTEM_PROMPT,
            temperature=0.0,
            response_mime_type="application/json"
        )

        response = client.models.generate_content(
            model=settings.EXTRACTION_MODEL,
            contents=build_payment_agent_user_prompt(text),
            config=config
        )

        response_text = (response.text or "").strip()
        if not response_text:
            logger.warning("Empty model response, using regex extraction")
            return regex_extraction(text)

        result = json.loads(response_text)
        if not isinstance(result, dict):
            logger.warning("Model returned non-object JSON, using regex extraction")
            return regex_extraction(text)

    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse model JSON: {e}")
        return regex_extraction(text)
    except Exception as e:
        logger.error(f"PaymentAgent error: {e}", exc_info=True)
        return regex_extraction(text)

    output = normalize_model_output(result)
    logger.info(f"PaymentAgent completed: status={output['status']}")
    return output
