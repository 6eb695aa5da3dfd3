"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    create_handshake,
    get_channel_hub,
    get_github_oauth_client,
    get_iam_client,
    get_oauth_clients,
    get_pending_auth_store,
    get_procedure_client,
    get_provider_registry,
    get_twitter_oauth_client,
)
from .config import get_app_settings

__all__ = [
    "create_handshake",
    "get_app_settings",
    "get_channel_hub",
    "get_github_oauth_client",
    "get_iam_client",
    "get_oauth_clients",
    "get_pending_auth_store",
    "get_procedure_client",
    "get_provider_registry",
    "get_twitter_oauth_client",
]
