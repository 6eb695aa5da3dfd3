"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

from functools import lru_cache
from typing import Any, Dict

from stamp_iam.clients import (
    GithubOAuthClient,
    IamClient,
    PendingAuthStore,
    ProcedureClient,
    Signer,
    TwitterOAuthClient,
)
from stamp_iam.core.config import get_settings
from stamp_iam.handshake import (
    AuthorizationHandshake,
    BrowserWindowOpener,
    ChannelHub,
    CredentialStore,
    PopupGeometry,
    RedirectGuard,
    WindowOpener,
)
from stamp_iam.providers import ProviderRegistry, build_registry
from stamp_iam.services import OAuthPlatformClient
from stamp_iam.utils.http import RetryConfig


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_pending_auth_store() -> PendingAuthStore:
    """Provide the process-wide store of pending authorizations."""
    settings = _settings()
    return PendingAuthStore(ttl_seconds=settings.oauth.state_ttl_seconds)


@lru_cache()
def get_twitter_oauth_client() -> TwitterOAuthClient:
    settings = _settings()
    return TwitterOAuthClient(settings.twitter, get_pending_auth_store())


@lru_cache()
def get_github_oauth_client() -> GithubOAuthClient:
    settings = _settings()
    return GithubOAuthClient(settings.github, get_pending_auth_store())


def get_oauth_clients() -> Dict[str, OAuthPlatformClient[Any]]:
    """Map platform name to its OAuth client."""
    clients = (get_twitter_oauth_client(), get_github_oauth_client())
    return {client.platform: client for client in clients}


@lru_cache()
def get_provider_registry() -> ProviderRegistry:
    """Provide the registry holding every provider."""
    return build_registry(
        twitter=get_twitter_oauth_client(),
        github=get_github_oauth_client(),
    )


@lru_cache()
def get_channel_hub() -> ChannelHub:
    """Provide the in-process redirect channel hub."""
    return ChannelHub()


@lru_cache()
def get_procedure_client() -> ProcedureClient:
    settings = _settings()
    return ProcedureClient(
        base_url=str(settings.handshake.procedure_base_url),
        retry_config=RetryConfig.from_settings(settings.http),
    )


@lru_cache()
def get_iam_client() -> IamClient:
    settings = _settings()
    return IamClient(retry_config=RetryConfig.from_settings(settings.http))


def create_handshake(
    provider_id: str,
    *,
    platform: str,
    address: str,
    signer: Signer,
    credential_store: CredentialStore,
    window_opener: WindowOpener | None = None,
) -> AuthorizationHandshake:
    """Build a handshake wired to the configured procedure and IAM services."""
    settings = _settings()
    handshake = settings.handshake
    callbacks = {
        "twitter": str(settings.twitter.callback_url),
        "github": str(settings.github.callback_url),
    }
    return AuthorizationHandshake(
        provider_id=provider_id,
        platform=platform,
        callback_url=callbacks.get(platform),
        address=address,
        signer=signer,
        iam_url=str(handshake.iam_url),
        procedure_client=get_procedure_client(),
        issuer=get_iam_client(),
        credential_store=credential_store,
        channel_hub=get_channel_hub(),
        window_opener=window_opener or BrowserWindowOpener(),
        guard=RedirectGuard(window_seconds=handshake.debounce_ms / 1000),
        geometry=PopupGeometry(width=handshake.popup_width, height=handshake.popup_height),
    )


__all__ = [
    "create_handshake",
    "get_channel_hub",
    "get_github_oauth_client",
    "get_iam_client",
    "get_oauth_clients",
    "get_pending_auth_store",
    "get_procedure_client",
    "get_provider_registry",
    "get_twitter_oauth_client",
]
