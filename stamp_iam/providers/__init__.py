"""
Verification providers.

Exposes the provider protocol, the threshold family, the registry, and the
catalogue of Twitter and GitHub providers.
"""

from .base import VerificationProvider
from .catalog import build_registry, github_providers, twitter_providers
from .registry import ProviderRegistry
from .threshold import Comparator, MetricTier, Threshold, ThresholdProvider

__all__ = [
    "Comparator",
    "MetricTier",
    "ProviderRegistry",
    "Threshold",
    "ThresholdProvider",
    "VerificationProvider",
    "build_registry",
    "github_providers",
    "twitter_providers",
]
