"""Schemas describing authentication payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from ..models import EMAIL_MAX_LENGTH, NAME_MAX_LENGTH


class SignupRequest(BaseModel):
    """Incoming payload for registering a new user."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"name": "Alice", "email": "alice@example.com", "password": "pw123"}
        }
    )

    name: str = Field(max_length=NAME_MAX_LENGTH)
    email: str = Field(max_length=EMAIL_MAX_LENGTH)
    password: str


class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    """A freshly issued bearer token."""

    token: str
    token_type: str = Field(default="bearer", frozen=True)
    expires_at: datetime
    expires_in: int = Field(description="Seconds until the token expires")


__all__ = ["LoginRequest", "SignupRequest", "TokenResponse"]
