"""
PaymentAgent Package

Extracts the payer and the amounts from a free-text payment notification
(Stripe/PayPal emails, bank notices) so an invoice can be issued.

Main Components:
- types: TypedDict definitions for structured data
- prompts: System prompt and user prompt builder
- agent: Gemini single-shot runner
- fallback: Regex extraction used without an API key or on model failure

Usage:
    from fiscozen_parser.agents.payment import run_payment_agent

    result = run_payment_agent("Hai ricevuto 500,00 € da Acme Srl ...")
"""

from fiscozen_parser.agents.payment.agent import run_payment_agent
from fiscozen_parser.agents.payment.fallback import regex_extraction
from fiscozen_parser.agents.payment.types import PaymentAgentOutput, ServiceLine

__all__ = [
    "run_payment_agent",
    "regex_extraction",
    "PaymentAgentOutput",
    "ServiceLine",
]
