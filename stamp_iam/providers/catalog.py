"""
Provider catalogue for the supported platforms.
"""

from __future__ import annotations

from typing import List

from stamp_iam.clients import GithubApiClient, TwitterApiClient
from stamp_iam.providers.registry import ProviderRegistry
from stamp_iam.providers.threshold import MetricTier, Threshold, ThresholdProvider
from stamp_iam.services import (
    AuthClientCache,
    GithubProfileFetcher,
    OAuthPlatformClient,
    TwitterProfileFetcher,
)

TWITTER_FOLLOWER_TIERS = {
    "TwitterFollowerGT100": Threshold.gt(100),
    "TwitterFollowerGT500": Threshold.gt(500),
    "TwitterFollowerGTE1000": Threshold.gte(1000),
    "TwitterFollowerGT5000": Threshold.gt(5000),
}

GITHUB_FOLLOWER_TIERS = {
    "GithubFollowerGT10": Threshold.gt(10),
    "GithubFollowerGT50": Threshold.gt(50),
}


def twitter_providers(
    oauth_client: OAuthPlatformClient[TwitterApiClient],
) -> List[ThresholdProvider]:
    cache = AuthClientCache(oauth_client)
    fetcher = TwitterProfileFetcher()
    providers = [ThresholdProvider("Twitter", cache, fetcher)]
    providers.extend(
        ThresholdProvider(name, cache, fetcher, MetricTier("followers", "followerCount", threshold))
        for name, threshold in TWITTER_FOLLOWER_TIERS.items()
    )
    providers.append(
        ThresholdProvider(
            "TwitterTweetGT10",
            cache,
            fetcher,
            MetricTier("tweets", "tweetCount", Threshold.gt(10)),
        )
    )
    return providers


def github_providers(
    oauth_client: OAuthPlatformClient[GithubApiClient],
) -> List[ThresholdProvider]:
    cache = AuthClientCache(oauth_client)
    fetcher = GithubProfileFetcher()
    providers = [
        ThresholdProvider("Github", cache, fetcher),
        ThresholdProvider(
            "FiveOrMoreGithubRepos",
            cache,
            fetcher,
            MetricTier("repos", "repoCount", Threshold.gte(5)),
        ),
    ]
    providers.extend(
        ThresholdProvider(name, cache, fetcher, MetricTier("followers", "followerCount", threshold))
        for name, threshold in GITHUB_FOLLOWER_TIERS.items()
    )
    return providers


def build_registry(
    *,
    twitter: OAuthPlatformClient[TwitterApiClient],
    github: OAuthPlatformClient[GithubApiClient],
) -> ProviderRegistry:
    """Register every Twitter and GitHub provider."""
    return ProviderRegistry([*twitter_providers(twitter), *github_providers(github)])


__all__ = [
    "GITHUB_FOLLOWER_TIERS",
    "TWITTER_FOLLOWER_TIERS",
    "build_registry",
    "github_providers",
    "twitter_providers",
]
