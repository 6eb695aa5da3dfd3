"""
Pydantic models for verification requests and results.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

REQUIRED_PROOFS = ("sessionKey", "code")


class RequestPayload(BaseModel):
    """Incoming verification request for one or more provider types."""

    model_config = ConfigDict(frozen=True)

    type: Optional[str] = Field(None, description="Single provider type to verify.")
    types: Optional[List[str]] = Field(
        None, description="Several provider types verified against the same proofs."
    )
    version: str = Field("0.0.0")
    address: str = Field("", description="Wallet address the stamp is issued to.")
    proofs: Dict[str, str] = Field(
        ..., description="Must contain sessionKey and the OAuth authorization code."
    )

    @model_validator(mode="after")
    def _check_proofs(self) -> "RequestPayload":
        missing = [name for name in REQUIRED_PROOFS if not self.proofs.get(name)]
        if missing:
            raise ValueError(f"Missing required proofs: {', '.join(missing)}")
        return self

    def requested_types(self) -> List[str]:
        """Return the provider types named by ``types`` and ``type``, in order, deduplicated."""
        names = list(self.types or [])
        if self.type:
            names.insert(0, self.type)
        return list(dict.fromkeys(names))


class VerifiedPayload(BaseModel):
    """Outcome of a provider's ``verify``.

    ``record`` is present exactly when ``valid`` is true.
    """

    model_config = ConfigDict(frozen=True)

    valid: bool
    record: Optional[Dict[str, str]] = None

    @model_validator(mode="after")
    def _check_record(self) -> "VerifiedPayload":
        if self.valid and not self.record:
            raise ValueError("A valid payload must carry a non-empty record.")
        if not self.valid and self.record is not None:
            raise ValueError("An invalid payload must not carry a record.")
        return self

    @classmethod
    def invalid(cls) -> "VerifiedPayload":
        return cls(valid=False)

    @classmethod
    def verified(cls, record: Dict[str, str]) -> "VerifiedPayload":
        return cls(valid=True, record=record)


class ProviderVerification(BaseModel):
    """Per-type entry of a verify response."""

    type: str
    valid: bool
    record: Optional[Dict[str, str]] = None


class VerifyResponse(BaseModel):
    """Response of ``POST /verify``."""

    credentials: List[ProviderVerification] = Field(default_factory=list)


__all__ = [
    "ProviderVerification",
    "RequestPayload",
    "VerifiedPayload",
    "VerifyResponse",
]
