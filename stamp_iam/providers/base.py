"""
Protocol for verification providers.

A provider checks one credential type. Implementations must resolve every
expected failure to ``VerifiedPayload(valid=False)`` and keep no state between
calls except through the ``VerificationContext``.
"""

from typing import Protocol, runtime_checkable

from stamp_iam.schemas import RequestPayload, VerifiedPayload
from stamp_iam.services.client_cache import VerificationContext


@runtime_checkable
class VerificationProvider(Protocol):
    """Protocol for a pluggable credential-type verifier."""

    type: str

    async def verify(
        self, payload: RequestPayload, context: VerificationContext
    ) -> VerifiedPayload:
        """Verify the payload's proofs and return the outcome."""
        ...
