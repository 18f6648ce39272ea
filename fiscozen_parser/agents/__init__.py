"""
AI components for the Fiscozen parser backend.

1. PaymentAgent (single-shot text extraction)
   - Uses Gemini to turn a payment notification into client + amounts
   - Regex fallback when Gemini is unavailable
"""

from fiscozen_parser.agents.payment import PaymentAgentOutput, run_payment_agent

__all__ = ["run_payment_agent", "PaymentAgentOutput"]
