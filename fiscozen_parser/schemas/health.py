"""
Health check endpoint schemas.

The health endpoint is PUBLIC and never touches the provider.
"""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response model for GET /health."""

    status: str = Field(default="OK", examples=["OK"])
    service: str = Field(default="fiscozen-parser-backend")
    version: str
    timestamp: str = Field(..., description="ISO-8601 server time")
    providerSession: bool = Field(
        False,
        description="Whether the default provider session is currently valid"
    )
