"""
Error taxonomy for provider calls.

Every failure the session broker, resolver or composer can surface is a
ProviderError subclass. Each carries a stable `code`, the HTTP status the
API layer answers with, a human-readable message and, when the provider
returned one, its error body verbatim in `details`.
"""

from typing import Any, Optional


class ProviderError(Exception):
    """Base class for all provider workflow failures."""

    code = "provider_error"
    status_code = 502

    def __init__(
        self,
        message: str,
        *,
        details: Any = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code

    def to_response(self) -> dict:
        body = {"success": False, "error": self.message, "code": self.code}
        if self.details is not None:
            body["details"] = self.details
        return body


class InvalidCredentials(ProviderError):
    code = "invalid_credentials"
    status_code = 400


class ProviderUnreachable(ProviderError):
    code = "provider_unreachable"
    status_code = 502


class CsrfUnavailable(ProviderError):
    code = "csrf_unavailable"
    status_code = 502


class AuthenticationRejected(ProviderError):
    code = "authentication_rejected"
    status_code = 401


class NotAuthenticated(ProviderError):
    code = "not_authenticated"
    status_code = 401


class SessionExpired(ProviderError):
    code = "session_expired"
    status_code = 401


class ClientCreationFailed(ProviderError):
    code = "client_creation_failed"


class InvoiceRejected(ProviderError):
    code = "invoice_rejected"


class MissingLineItems(ProviderError):
    code = "missing_line_items"
    status_code = 400


class MissingClient(ProviderError):
    code = "missing_client"
    status_code = 400


class UnrecognizedResponseShape(ProviderError):
    code = "unrecognized_response_shape"


class ProviderRequestFailed(ProviderError):
    code = "provider_request_failed"


class ExtractionFailed(ProviderError):
    """The payment text could not be turned into a client and amounts."""
    code = "extraction_failed"
    status_code = 422


def provider_message(body: Any, default: str) -> str:
    """
    Pick the provider's own error message out of a response body.

    The provider is inconsistent: DRF-style `detail`, a `message` key, a
    `non_field_errors` list, or a bare string.
    """
    if isinstance(body, str) and body.strip():
        return body.strip()[:500]
    if isinstance(body, dict):
        for key in ("message", "detail", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
        non_field = body.get("non_field_errors")
        if isinstance(non_field, list) and non_field:
            return str(non_field[0])
    return default