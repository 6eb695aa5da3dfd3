"""Service layer exports."""

from .client_cache import AuthClientCache, OAuthPlatformClient, VerificationContext
from .fetchers import (
    ExternalDataFetcher,
    ExternalRecord,
    FetchResult,
    GithubProfileFetcher,
    TwitterProfileFetcher,
)

__all__ = [
    "AuthClientCache",
    "ExternalDataFetcher",
    "ExternalRecord",
    "FetchResult",
    "GithubProfileFetcher",
    "OAuthPlatformClient",
    "TwitterProfileFetcher",
    "VerificationContext",
]
