"""
Logging utilities for the Fiscozen parser backend.

Provides standardized logger configuration and redaction helpers.

CRITICAL SECURITY RULES:
- NEVER log provider passwords
- NEVER log full session cookies, CSRF tokens or session markers
- NEVER log full email addresses of provider accounts

Acceptable logging:
- High-level events (e.g., "Login succeeded", "Customer created")
- Truncated secrets (first few characters followed by "...")
- Provider error payloads (validation messages are the only diagnostic)
"""

import logging
from typing import Any, Dict, Mapping, Optional

SECRET_KEYS = frozenset({
    "password",
    "secret",
    "token",
    "csrf_token",
    "csrftoken",
    "cookie",
    "cookie_header",
    "marker",
})


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get a configured logger for the specified module.

    Args:
        name: Module name (typically __name__)
        level: Optional logging level (defaults to INFO)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if level is None:
        level = logging.INFO

    logger.setLevel(level)

    # Add handler if not already configured (avoid duplicate handlers)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def mask_email(email: Optional[str]) -> str:
    """Keep the first three characters of an address: 'mar***'."""
    if not email:
        return ""
    return f"{email[:3]}***"


def truncate_secret(value: Optional[str], keep: int = 6) -> str:
    """Truncate a token or cookie string for logging."""
    if not value:
        return ""
    if len(value) <= keep:
        return "***"
    return f"{value[:keep]}..."


def redact_payload(payload: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Copy a log payload with secrets removed.

    Passwords are dropped entirely, other secret-looking keys are
    truncated and "email" is masked. Nested mappings are redacted too.
    """
    if not payload:
        return {}

    redacted: Dict[str, Any] = {}
    for key, value in payload.items():
        lowered = key.lower()
        if lowered in ("password", "secret"):
            continue
        if lowered in SECRET_KEYS:
            redacted[key] = truncate_secret(str(value)) if value else value
        elif lowered == "email" and isinstance(value, str):
            redacted[key] = mask_email(value)
        elif isinstance(value, Mapping):
            redacted[key] = redact_payload(value)
        else:
            redacted[key] = value
    return redacted
