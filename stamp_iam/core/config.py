"""
Application configuration models and helpers.

Centralizes settings management so the IAM routes, the provider registry and
the authorization handshake share a consistent configuration surface.
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Optional

import os

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


def _split_scopes(value: str | tuple[str, ...] | list[str]) -> tuple[str, ...]:
    if isinstance(value, tuple):
        return value
    if isinstance(value, list):
        return tuple(value)
    return tuple(scope.strip() for scope in value.split(",") if scope.strip())


class TwitterSettings(BaseSettings):
    """Configuration required for the Twitter OAuth2 (PKCE) client."""

    model_config = SettingsConfigDict(extra="ignore")

    client_id: str = Field(..., validation_alias="TWITTER_CLIENT_ID")
    client_secret: Optional[str] = Field(
        None,
        validation_alias="TWITTER_CLIENT_SECRET",
        description="Only set for confidential clients; public clients rely on PKCE.",
    )
    callback_url: AnyHttpUrl = Field(..., validation_alias="TWITTER_CALLBACK_URL")
    scopes: Annotated[tuple[str, ...], NoDecode] = Field(
        ("tweet.read", "users.read"),
        validation_alias="TWITTER_SCOPES",
    )

    @field_validator("scopes", mode="before")
    @classmethod
    def _parse_scopes(cls, value: str | tuple[str, ...] | list[str]) -> tuple[str, ...]:
        """Support providing scopes as a comma-separated string."""
        return _split_scopes(value)


class GithubSettings(BaseSettings):
    """Configuration required for the GitHub OAuth app."""

    model_config = SettingsConfigDict(extra="ignore")

    client_id: str = Field(..., validation_alias="GITHUB_CLIENT_ID")
    client_secret: str = Field(..., validation_alias="GITHUB_CLIENT_SECRET")
    callback_url: AnyHttpUrl = Field(..., validation_alias="GITHUB_CALLBACK_URL")
    scopes: Annotated[tuple[str, ...], NoDecode] = Field(
        ("read:user",),
        validation_alias="GITHUB_SCOPES",
    )

    @field_validator("scopes", mode="before")
    @classmethod
    def _parse_scopes(cls, value: str | tuple[str, ...] | list[str]) -> tuple[str, ...]:
        return _split_scopes(value)


class OAuthSettings(BaseSettings):
    """OAuth flow configuration shared by every platform."""

    model_config = SettingsConfigDict(extra="ignore")

    state_ttl_seconds: int = Field(
        900,
        validation_alias="OAUTH_STATE_TTL",
        description="Lifetime of a pending authorization between URL issue and verify.",
    )


class HandshakeSettings(BaseSettings):
    """Settings for the popup-based authorization handshake."""

    model_config = SettingsConfigDict(extra="ignore")

    procedure_base_url: AnyHttpUrl = Field(
        "http://localhost:8000/api",
        validation_alias="PROCEDURE_BASE_URL",
        description="Base URL hosting the /{platform}/generateAuthUrl procedures.",
    )
    iam_url: AnyHttpUrl = Field(
        "http://localhost:8001",
        validation_alias="IAM_URL",
        description="Credential-issuance service used once a handshake completes.",
    )
    debounce_ms: int = Field(300, validation_alias="HANDSHAKE_DEBOUNCE_MS")
    popup_width: int = Field(600, validation_alias="POPUP_WIDTH")
    popup_height: int = Field(800, validation_alias="POPUP_HEIGHT")


class HttpSettings(BaseSettings):
    """Retry behaviour for outbound calls that are safe to repeat."""

    model_config = SettingsConfigDict(extra="ignore")

    retry_attempts: int = Field(3, validation_alias="HTTP_RETRY_ATTEMPTS")
    retry_backoff_seconds: float = Field(
        1.0, validation_alias="HTTP_RETRY_BACKOFF_SECONDS"
    )


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    oauth: OAuthSettings = Field(default_factory=OAuthSettings)
    twitter: TwitterSettings = Field(default_factory=TwitterSettings)
    github: GithubSettings = Field(default_factory=GithubSettings)
    handshake: HandshakeSettings = Field(default_factory=HandshakeSettings)
    http: HttpSettings = Field(default_factory=HttpSettings)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "GithubSettings",
    "HandshakeSettings",
    "HttpSettings",
    "OAuthSettings",
    "TwitterSettings",
    "get_settings",
]
