"""
Pydantic schemas for the provider login endpoint.
"""

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """
    Fiscozen account credentials.

    Empty values are accepted here so the session broker can answer with
    its own InvalidCredentials error.
    """
    email: str = Field("", description="Fiscozen account email")
    password: str = Field("", description="Fiscozen account password")


class LoginResponse(BaseModel):
    """
    Response for POST /login.

    `token` is an opaque session marker. Send it back as
    `Authorization: Bearer <token>` to use this session even if another
    login happens in the meantime; without the header the most recent
    session is used.
    """
    success: bool = True
    token: str = Field(..., description="Opaque session marker")
    expiresAt: str = Field(..., description="ISO-8601 local expiry of the session")
