"""
Provider registry and request-level verification.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable, List, Tuple

from stamp_iam.core.errors import UnknownProviderError
from stamp_iam.providers.base import VerificationProvider
from stamp_iam.schemas import RequestPayload, VerifiedPayload
from stamp_iam.services.client_cache import VerificationContext

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Runtime dispatch from provider type to provider."""

    def __init__(self, providers: Iterable[VerificationProvider] = ()) -> None:
        self._providers: Dict[str, VerificationProvider] = {}
        for provider in providers:
            self.register(provider)

    def register(self, provider: VerificationProvider) -> None:
        if provider.type in self._providers:
            raise ValueError(f"Provider {provider.type!r} is already registered.")
        self._providers[provider.type] = provider

    def get(self, provider_type: str) -> VerificationProvider:
        try:
            return self._providers[provider_type]
        except KeyError as exc:
            raise UnknownProviderError(provider_type) from exc

    def types(self) -> List[str]:
        return sorted(self._providers)

    def __contains__(self, provider_type: object) -> bool:
        return provider_type in self._providers

    async def verify(
        self, provider_types: List[str], payload: RequestPayload
    ) -> List[Tuple[str, VerifiedPayload]]:
        """Verify several types against one set of proofs.

        All providers share one ``VerificationContext``, so each session's
        code is exchanged once; the context is cleared when the request ends.
        """
        providers = [self.get(name) for name in provider_types]
        with VerificationContext() as context:
            results = await asyncio.gather(
                *(provider.verify(payload, context) for provider in providers)
            )

        outcome = list(zip(provider_types, results))
        logger.info(
            "Verified %d provider(s), %d valid",
            len(outcome),
            sum(1 for _, result in outcome if result.valid),
            extra={"session_key": payload.proofs.get("sessionKey")},
        )
        return outcome


__all__ = ["ProviderRegistry"]
