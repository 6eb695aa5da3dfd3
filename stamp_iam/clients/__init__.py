"""Expose constructed client wrappers."""

from .github import GithubApiClient, GithubOAuthClient
from .iam import IamClient, Signer
from .pending_store import PendingAuthStore
from .procedure import ProcedureClient
from .twitter import TwitterApiClient, TwitterOAuthClient

__all__ = [
    "GithubApiClient",
    "GithubOAuthClient",
    "IamClient",
    "PendingAuthStore",
    "ProcedureClient",
    "Signer",
    "TwitterApiClient",
    "TwitterOAuthClient",
]
