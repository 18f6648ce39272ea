"""
Tests for POST /api/fiscozen/extract and POST /api/fiscozen/workflow.

PaymentAgent is patched where the route looks it up.
"""

from unittest.mock import patch

import pytest

from fiscozen_parser.agents.payment.types import PaymentAgentOutput

CUSTOMERS = "/api/v1/customers/"
INVOICES = "/api/v1/invoices/"


@pytest.fixture
def draft_output() -> PaymentAgentOutput:
    return {
        "status": "DRAFT",
        "source": "llm",
        "client_name": "Acme Srl",
        "vat_number": "01234567890",
        "address": "Via Roma 1",
        "amount": 500.0,
        "currency": "EUR",
        "description": "Consulenza marzo",
        "date": "2025-03-14",
        "services": [{"description": "Consulenza", "quantity": 1.0, "unit_price": 500.0}],
        "reason": None,
    }


@pytest.fixture
def mock_payment_agent(draft_output):
    with patch("fiscozen_parser.routes.extraction.run_payment_agent") as mock:
        mock.return_value = draft_output
        yield mock


class TestExtractEndpoint:

    def test_draft(self, client, mock_payment_agent, provider):
        response = client.post("/api/fiscozen/extract", json={"text": "Acme Srl ha pagato 500 €"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["clientName"] == "Acme Srl"
        assert data["vatNumber"] == "01234567890"
        assert data["amount"] == 500.0
        assert data["services"] == [{"description": "Consulenza", "quantity": 1.0, "unitPrice": 500.0}]
        assert data["source"] == "llm"
        mock_payment_agent.assert_called_once_with("Acme Srl ha pagato 500 €")
        assert provider.requests == []

    def test_invalid_text(self, client):
        invalid: PaymentAgentOutput = {
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
            "reason": "Text does not describe a payment",
        }
        with patch("fiscozen_parser.routes.extraction.run_payment_agent", return_value=invalid):
            response = client.post("/api/fiscozen/extract", json={"text": "ciao"})

        assert response.status_code == 422
        assert response.json()["code"] == "extraction_failed"

    def test_regex_fallback_without_api_key(self, client):
        response = client.post("/api/fiscozen/extract", json={"text": "Ricevuti 120 € da PayPal"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["source"] == "regex"
        assert data["clientName"] == "PayPal"
        assert data["amount"] == 120.0

    def test_empty_text_is_rejected_by_schema(self, client):
        response = client.post("/api/fiscozen/extract", json={"text": ""})

        assert response.status_code == 422


class TestWorkflowEndpoint:

    def test_full_workflow(self, client, provider, logged_in, mock_payment_agent):
        provider.add("GET", CUSTOMERS, json={"results": [{"id": 77, "company_name": "Acme Srl"}]})
        provider.add("GET", "/api/v1/customers/77/", json={})
        provider.add("POST", INVOICES, 201, json={"id": "inv-9", "invoiceNumber": "FAT-2025-0001"})

        response = client.post("/api/fiscozen/workflow", json={"text": "Acme Srl ha pagato 500 €"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["id"] == "inv-9"
        assert data["invoiceNumber"] == "FAT-2025-0001"
        assert data["resolution"] == {
            "state": "RESOLVED",
            "customerId": "77",
            "created": False,
            "path": ["SEARCHING", "FOUND", "RESOLVED"],
        }
        assert data["extraction"]["clientName"] == "Acme Srl"

    def test_client_override(self, client, provider, logged_in, mock_payment_agent):
        provider.add("GET", "/api/v1/customers/c-9/", json={})
        provider.add("POST", INVOICES, 201, json={"id": "inv-2"})

        response = client.post("/api/fiscozen/workflow", json={
            "text": "Acme Srl ha pagato 500 €",
            "client": {"id": "c-9"},
        })

        assert response.status_code == 200
        assert response.json()["resolution"]["customerId"] == "c-9"
        assert provider.calls("GET", CUSTOMERS) == []

    def test_needs_client_creation(self, client, provider, logged_in, mock_payment_agent):
        provider.add("GET", CUSTOMERS, json={"results": []})

        response = client.post("/api/fiscozen/workflow", json={
            "text": "Acme Srl ha pagato 500 €",
            "autoCreateClient": False,
        })

        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert data["needsClientCreation"] is True
        assert data["resolution"]["state"] == "NOT_FOUND"
        assert data["id"] is None

    def test_requires_session(self, client, provider, mock_payment_agent):
        response = client.post("/api/fiscozen/workflow", json={"text": "Acme Srl ha pagato 500 €"})

        assert response.status_code == 401
        assert provider.requests == []

    def test_unidentified_payer_is_rejected_before_provider(self, client, provider, logged_in):
        provider.add("GET", CUSTOMERS, json={"results": []})
        provider.add("POST", CUSTOMERS, 201, json={"id": "cust-x"})

        response = client.post("/api/fiscozen/workflow", json={"text": "Bonifico di 120 € ricevuto"})

        assert response.status_code == 400
        assert response.json()["code"] == "missing_client"
        assert provider.requests == []

    def test_unidentified_payer_with_client_name(self, client, provider, logged_in):
        provider.add("GET", CUSTOMERS, json={"results": [{"id": 5, "company_name": "Rossi Srl"}]})
        provider.add("GET", "/api/v1/customers/5/", json={})
        provider.add("POST", INVOICES, 201, json={"id": "inv-5"})

        response = client.post("/api/fiscozen/workflow", json={
            "text": "Bonifico di 120 € ricevuto",
            "client": {"ragioneSociale": "Rossi Srl"},
        })

        assert response.status_code == 200
        assert response.json()["id"] == "inv-5"
        assert provider.calls("POST", CUSTOMERS) == []
