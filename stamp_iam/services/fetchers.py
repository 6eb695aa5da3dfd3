"""
External data fetchers.

A fetcher issues the calls needed for one platform's identity and metrics and
normalizes the answer into an ``ExternalRecord``. Call failures come back as
``Err`` so "fetch failed" stays distinguishable from "fetched but empty".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Protocol

from stamp_iam.clients import GithubApiClient, TwitterApiClient
from stamp_iam.core.errors import DataShapeError, FetchError
from stamp_iam.core.result import Err, Ok, Result

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ExternalRecord:
    """Normalized identity and metrics for an external account."""

    username: Optional[str] = None
    metrics: Mapping[str, int] = field(default_factory=dict)

    def require_username(self) -> str:
        if not self.username:
            raise DataShapeError("External record has no username.")
        return self.username

    def require_metric(self, name: str) -> int:
        value = self.metrics.get(name)
        if value is None:
            raise DataShapeError(f"External record has no '{name}' metric.")
        return value


FetchResult = Result[ExternalRecord]


class ExternalDataFetcher(Protocol):
    async def fetch(self, client: Any) -> FetchResult:
        ...


def _int_metrics(raw: Mapping[str, Any]) -> Dict[str, int]:
    metrics: Dict[str, int] = {}
    for name, value in raw.items():
        # bool is an int subclass; a flag is never a count.
        if isinstance(value, int) and not isinstance(value, bool):
            metrics[name] = value
    return metrics


def _username(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _failed(platform: str, exc: FetchError) -> Err:
    logger.warning(
        "External data fetch failed: %s",
        exc,
        extra={"platform": platform, "category": exc.category.value},
    )
    return Err(category=exc.category, message=str(exc))


class TwitterProfileFetcher:
    """Fetch the Twitter username with follower and tweet counts."""

    platform = "twitter"

    async def fetch(self, client: TwitterApiClient) -> FetchResult:
        try:
            data = await client.find_my_user()
        except FetchError as exc:
            return _failed(self.platform, exc)

        public_metrics = data.get("public_metrics")
        if not isinstance(public_metrics, dict):
            public_metrics = {}
        return Ok(
            ExternalRecord(
                username=_username(data.get("username")),
                metrics=_int_metrics(
                    {
                        "followers": public_metrics.get("followers_count"),
                        "tweets": public_metrics.get("tweet_count"),
                    }
                ),
            )
        )


class GithubProfileFetcher:
    """Fetch the GitHub login with follower and public repository counts."""

    platform = "github"

    async def fetch(self, client: GithubApiClient) -> FetchResult:
        try:
            data = await client.get_user()
        except FetchError as exc:
            return _failed(self.platform, exc)

        return Ok(
            ExternalRecord(
                username=_username(data.get("login")),
                metrics=_int_metrics(
                    {
                        "followers": data.get("followers"),
                        "repos": data.get("public_repos"),
                    }
                ),
            )
        )


__all__ = [
    "ExternalDataFetcher",
    "ExternalRecord",
    "FetchResult",
    "GithubProfileFetcher",
    "TwitterProfileFetcher",
]
