"""Schemas related to OAuth flows and the redirect channel."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AuthUrlRequest(BaseModel):
    """Body of ``POST /{platform}/generateAuthUrl``."""

    callback: Optional[str] = Field(
        None,
        description="Redirect URI for the popup; defaults to the configured callback.",
    )


class AuthUrlResponse(BaseModel):
    """Authorization URL the popup window should open."""

    model_config = ConfigDict(populate_by_name=True)

    auth_url: str = Field(..., alias="authUrl")


class RedirectData(BaseModel):
    """Query parameters the OAuth provider appended to the callback."""

    model_config = ConfigDict(frozen=True)

    code: str = Field(..., description="One-time authorization code.")
    state: str = Field(..., description="Session key issued with the authorization URL.")


class RedirectMessage(BaseModel):
    """Message posted by the popup once the external authorization completes."""

    model_config = ConfigDict(frozen=True)

    target: str = Field(..., description="Platform the redirect belongs to.")
    data: RedirectData


__all__ = ["AuthUrlRequest", "AuthUrlResponse", "RedirectData", "RedirectMessage"]
