"""
Domain models for in-flight OAuth authorizations.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PendingAuthorization(BaseModel):
    """An authorization URL that was issued and awaits its code exchange."""

    model_config = ConfigDict(frozen=True)

    session_key: str = Field(..., description="Opaque state value sent to the provider.")
    platform: str = Field(..., description="OAuth platform that issued the URL.")
    redirect_uri: str = Field(..., description="Callback registered for this attempt.")
    code_verifier: Optional[str] = Field(
        None, description="PKCE verifier, only for platforms that require PKCE."
    )
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


__all__ = ["PendingAuthorization"]
