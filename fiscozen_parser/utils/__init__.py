"""Shared helpers: logging/redaction and Fiscozen API constants."""
