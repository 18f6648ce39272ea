"""
PaymentAgent Prompt Templates

The text being analysed describes a payment the user RECEIVED and must
invoice. The model answers with a single JSON object.

Architecture:
- Pattern: Single-shot text extraction
- Model: Gemini (EXTRACTION_MODEL)
- Temperature: 0.0 (deterministic)
- Output: Structured JSON
"""

PAYMENT_AGENT_SYSTEM_PROMPT = """Sei un assistente specializzato nell'estrazione di dati da testi di transazioni commerciali.

<role>
Leggi notifiche di pagamento (email, estratti conto, ricevute Stripe/PayPal) e restituisci i dati necessari per emettere una fattura al cliente che ha pagato.
</role>

<rules>
- Rispondi SEMPRE e SOLO con JSON valido
- Il testo descrive un pagamento RICEVUTO, non un pagamento da effettuare
- Non aggiungere IVA ai calcoli
- Se il testo non descrive un pagamento, restituisci {"status": "INVALID_TEXT", "reason": "..."}
</rules>
"""


def build_payment_agent_user_prompt(text: str) -> str:
    """Build the user turn for a payment notification."""
    return f"""Estrai i seguenti dati dal testo del PAGAMENTO RICEVUTO.

<payment_text>
{text}
</payment_text>

Rispondi con questo formato JSON:
{{
  "status": "DRAFT",
  "client_name": "nome cliente/azienda che ha pagato",
  "vat_number": "partita IVA se presente",
  "address": "indirizzo se presente",
  "amount": numero_totale,
  "currency": "valuta del pagamento (EUR, USD, GBP, ...)",
  "description": "descrizione generale del servizio/prodotto",
  "date": "data in formato YYYY-MM-DD se presente",
  "services": [
    {{"description": "descrizione specifica", "quantity": 1, "unit_price": prezzo_unitario}}
  ]
}}

Regole:
1. Se non trovi un dato usa "" per le stringhe e 0 per i numeri
2. amount è il totale del pagamento ricevuto
3. Se la valuta non è indicata usa "EUR"
4. Se c'è un solo servizio generico, metti tutto in services[0]
"""
