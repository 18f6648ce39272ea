"""
Configuration module for the Fiscozen parser backend.

Loads environment variables and validates required settings.
"""
import os
from typing import List
from dotenv import load_dotenv

# Load .env file
load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Fiscozen provider
    FISCOZEN_BASE_URL: str = os.getenv("FISCOZEN_BASE_URL", "https://app.fiscozen.it")
    # Origin/Referer the provider's bot detection expects on XHR calls
    FISCOZEN_ORIGIN: str = os.getenv("FISCOZEN_ORIGIN", "https://app.fiscozen.it")
    FISCOZEN_USER_AGENT: str = os.getenv(
        "FISCOZEN_USER_AGENT",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    )

    # Outbound deadline for every provider round-trip
    PROVIDER_TIMEOUT_SECONDS: float = float(os.getenv("PROVIDER_TIMEOUT_SECONDS", "20"))

    # Extra attempts per landing candidate on transport errors (0 = probe once)
    LANDING_PROBE_RETRIES: int = int(os.getenv("LANDING_PROBE_RETRIES", "0"))
    LANDING_PROBE_BACKOFF_SECONDS: float = float(os.getenv("LANDING_PROBE_BACKOFF_SECONDS", "0.5"))

    SESSION_TTL_HOURS: int = int(os.getenv("SESSION_TTL_HOURS", "24"))

    # Google Gemini API (payment text extraction)
    GOOGLE_API_KEY: str = os.getenv("GOOGLE_API_KEY", "")
    EXTRACTION_MODEL: str = os.getenv("EXTRACTION_MODEL", "gemini-2.5-flash")

    # Supabase (optional session log / session records sink)
    SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
    SUPABASE_PUBLISHABLE_KEY: str = os.getenv("SUPABASE_PUBLISHABLE_KEY", "")

    # Pass-through lookups
    VIES_URL: str = os.getenv(
        "VIES_URL",
        "https://ec.europa.eu/taxation_customs/vies/services/checkVatService",
    )
    ZIPPOPOTAM_URL: str = os.getenv("ZIPPOPOTAM_URL", "https://api.zippopotam.us")

    # Application Settings
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS Settings
    CORS_ALLOWED_ORIGINS: List[str] = [
        origin.strip()
        for origin in os.getenv("CORS_ALLOWED_ORIGINS", "").split(",")
        if origin.strip()
    ]

    @property
    def supabase_enabled(self) -> bool:
        """Whether the Supabase sink is configured."""
        return bool(self.SUPABASE_URL and self.SUPABASE_PUBLISHABLE_KEY)

    @classmethod
    def validate(cls) -> None:
        """
        Validate that all required settings are configured.

        Raises:
            ValueError: If any required setting is missing or malformed.
        """
        required_settings = {
            "FISCOZEN_BASE_URL": cls.FISCOZEN_BASE_URL,
        }

        missing = [key for key, value in required_settings.items() if not value]

        if missing:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing)}. "
                "Please check your .env file."
            )

        if not cls.FISCOZEN_BASE_URL.startswith(("http://", "https://")):
            raise ValueError("FISCOZEN_BASE_URL must be an http(s) URL.")

    @classmethod
    def is_production(cls) -> bool:
        """Check if running in production environment."""
        return cls.ENVIRONMENT.lower() == "production"

    @classmethod
    def is_development(cls) -> bool:
        """Check if running in development environment."""
        return cls.ENVIRONMENT.lower() == "development"


# Create a singleton instance
settings = Settings()

# Validate settings on module import (will fail fast if misconfigured)
# Skip validation during tests or when importing for introspection
if os.getenv("VALIDATE_CONFIG", "true").lower() == "true":
    try:
        settings.validate()
    except ValueError as e:
        # In development, warn but don't crash
        if settings.is_development():
            print(f"⚠️  Warning: {e}")
            print("   The app may not work correctly until you configure your .env file.")
        else:
            raise
