"""Public schema exports."""

from .auth import AuthUrlRequest, AuthUrlResponse, RedirectData, RedirectMessage
from .verification import (
    ProviderVerification,
    RequestPayload,
    VerifiedPayload,
    VerifyResponse,
)

__all__ = [
    "AuthUrlRequest",
    "AuthUrlResponse",
    "ProviderVerification",
    "RedirectData",
    "RedirectMessage",
    "RequestPayload",
    "VerifiedPayload",
    "VerifyResponse",
]
