"""
Error taxonomy for credential verification.

Expected failures never escape a provider's ``verify``; they are raised inside
the verification pipeline and converted to ``valid: false`` at the provider
boundary. ``FailureCategory`` is what ends up in the logs.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class FailureCategory(str, Enum):
    """Coarse reason a verification attempt came back negative."""

    AUTH = "auth"
    FETCH = "fetch"
    DATA_SHAPE = "data_shape"
    THRESHOLD_UNMET = "threshold_unmet"


class VerificationError(Exception):
    """Base class for recoverable verification failures."""

    category: FailureCategory


class AuthError(VerificationError):
    """The authorization code was rejected or could not be exchanged."""

    category = FailureCategory.AUTH


class FetchError(VerificationError):
    """The external API call failed (network, rate limit, unauthorized)."""

    category = FailureCategory.FETCH

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DataShapeError(VerificationError):
    """The external record lacks a field the provider needs."""

    category = FailureCategory.DATA_SHAPE


class UnknownProviderError(LookupError):
    """Raised when a request names a provider type that is not registered."""


class AuthUrlError(Exception):
    """The procedure endpoint did not return a usable authorization URL."""


class IssuanceError(Exception):
    """The credential-issuance endpoint failed or answered with a bad payload."""


__all__ = [
    "AuthError",
    "AuthUrlError",
    "DataShapeError",
    "FailureCategory",
    "FetchError",
    "IssuanceError",
    "UnknownProviderError",
    "VerificationError",
]
