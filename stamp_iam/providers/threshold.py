"""
Threshold-based providers.

Every provider in this family runs the same routine: resolve the platform
client, fetch the account record, then compare one metric against a fixed
tier. Tiers are values, so a new bracket is a new ``ThresholdProvider``
instance rather than a new class. A provider without a tier only proves that
the account exists.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from stamp_iam.core.errors import (
    AuthError,
    DataShapeError,
    FailureCategory,
    FetchError,
)
from stamp_iam.core.result import Err
from stamp_iam.schemas import RequestPayload, VerifiedPayload
from stamp_iam.services.client_cache import AuthClientCache, VerificationContext
from stamp_iam.services.fetchers import ExternalDataFetcher

logger = logging.getLogger(__name__)


class Comparator(str, Enum):
    GT = "gt"
    GTE = "gte"

    def holds(self, metric: int, boundary: int) -> bool:
        if self is Comparator.GTE:
            return metric >= boundary
        return metric > boundary


@dataclass(frozen=True)
class Threshold:
    """Immutable ``(comparator, boundary, label)`` triple."""

    comparator: Comparator
    boundary: int
    label: str

    @classmethod
    def gt(cls, boundary: int) -> "Threshold":
        return cls(Comparator.GT, boundary, f"gt{boundary}")

    @classmethod
    def gte(cls, boundary: int) -> "Threshold":
        return cls(Comparator.GTE, boundary, f"gte{boundary}")

    def is_met(self, metric: int) -> bool:
        return self.comparator.holds(metric, self.boundary)


@dataclass(frozen=True)
class MetricTier:
    """Which metric to compare, the threshold, and the record key for its label."""

    metric: str
    record_key: str
    threshold: Threshold


@dataclass(frozen=True)
class ThresholdProvider:
    type: str
    client_cache: AuthClientCache[Any]
    fetcher: ExternalDataFetcher
    tier: Optional[MetricTier] = None

    async def verify(
        self, payload: RequestPayload, context: VerificationContext
    ) -> VerifiedPayload:
        session_key = payload.proofs["sessionKey"]
        code = payload.proofs["code"]

        try:
            client = await self.client_cache.get_client(session_key, code, context)
            outcome = await self.fetcher.fetch(client)
            if isinstance(outcome, Err):
                return self._reject(session_key, outcome.category, outcome.message)

            record = outcome.value
            username = record.require_username()
            if self.tier is None:
                return VerifiedPayload.verified({"username": username})

            metric = record.require_metric(self.tier.metric)
        except (AuthError, FetchError, DataShapeError) as exc:
            return self._reject(session_key, exc.category, str(exc))

        threshold = self.tier.threshold
        if not threshold.is_met(metric):
            return self._reject(
                session_key,
                FailureCategory.THRESHOLD_UNMET,
                f"{self.tier.metric} does not satisfy {threshold.label}",
            )

        # The tier label stands in for the raw count.
        return VerifiedPayload.verified(
            {"username": username, self.tier.record_key: threshold.label}
        )

    def _reject(
        self, session_key: str, category: FailureCategory, reason: str
    ) -> VerifiedPayload:
        level = logging.INFO if category is FailureCategory.THRESHOLD_UNMET else logging.WARNING
        logger.log(
            level,
            "Verification failed: %s",
            reason,
            extra={
                "provider": self.type,
                "session_key": session_key,
                "category": category.value,
            },
        )
        return VerifiedPayload.invalid()


__all__ = ["Comparator", "MetricTier", "Threshold", "ThresholdProvider"]
