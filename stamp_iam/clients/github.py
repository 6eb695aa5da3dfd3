"""
GitHub OAuth utilities.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Tuple
from urllib.parse import urlencode

import httpx

from stamp_iam.clients.pending_store import PendingAuthStore, new_session_key
from stamp_iam.core.config import GithubSettings
from stamp_iam.core.errors import AuthError, FetchError
from stamp_iam.models.oauth import PendingAuthorization

logger = logging.getLogger(__name__)


class GithubApiClient:
    """Authenticated client for the GitHub REST API."""

    API_BASE_URL = "https://api.github.com"

    def __init__(self, access_token: str, *, timeout: float = 10.0) -> None:
        self._access_token = access_token
        self._timeout = timeout

    async def get_user(self) -> Dict[str, Any]:
        """Return the authenticated user's profile (``GET /user``)."""
        headers = {
            "Authorization": f"Bearer {self._access_token}",
            "Accept": "application/vnd.github+json",
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(f"{self.API_BASE_URL}/user", headers=headers)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise FetchError(
                f"GitHub /user returned {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"GitHub /user request failed: {exc}") from exc
        except ValueError as exc:
            raise FetchError("GitHub /user returned a malformed body") from exc

        return payload if isinstance(payload, dict) else {}


class GithubOAuthClient:
    """Build GitHub authorization URLs and exchange authorization codes."""

    platform = "github"
    AUTH_BASE_URL = "https://github.com/login/oauth/authorize"
    TOKEN_URL = "https://github.com/login/oauth/access_token"

    def __init__(self, settings: GithubSettings, pending_store: PendingAuthStore) -> None:
        self._settings = settings
        self._pending = pending_store

    def build_authorization_url(self, callback: str | None = None) -> Tuple[str, str]:
        """Register a pending authorization and return ``(auth_url, session_key)``."""
        session_key = new_session_key(self.platform)
        redirect_uri = callback or str(self._settings.callback_url)
        self._pending.put(
            PendingAuthorization(
                session_key=session_key,
                platform=self.platform,
                redirect_uri=redirect_uri,
            )
        )

        params = {
            "client_id": self._settings.client_id,
            "redirect_uri": redirect_uri,
            "scope": " ".join(self._settings.scopes),
            "state": session_key,
            "allow_signup": "false",
        }
        return f"{self.AUTH_BASE_URL}?{urlencode(params)}", session_key

    async def exchange_authorization_code(
        self, *, session_key: str, code: str
    ) -> GithubApiClient:
        """Exchange the redirect's code for an authenticated API client."""
        pending = self._pending.pop(session_key)
        if pending is None or pending.platform != self.platform:
            raise AuthError("Unknown or expired GitHub session.")

        payload = {
            "client_id": self._settings.client_id,
            "client_secret": self._settings.client_secret,
            "code": code,
            "redirect_uri": pending.redirect_uri,
        }
        try:
            async with httpx.AsyncClient(timeout=10.0) as client:
                response = await client.post(
                    self.TOKEN_URL,
                    data=payload,
                    headers={"Accept": "application/json"},
                )
        except httpx.HTTPError as exc:
            raise AuthError(f"GitHub token exchange failed: {exc}") from exc

        if response.status_code != httpx.codes.OK:
            raise AuthError(f"GitHub token exchange rejected ({response.status_code}).")

        try:
            token_payload = response.json()
        except ValueError as exc:
            raise AuthError("GitHub token endpoint returned a malformed body.") from exc
        if not isinstance(token_payload, dict):
            raise AuthError("GitHub token endpoint returned a non-object body.")

        # GitHub reports bad or expired codes with a 200 and an error field.
        if token_payload.get("error"):
            raise AuthError(f"GitHub token exchange rejected: {token_payload['error']}")
        access_token = token_payload.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise AuthError("Incomplete token payload returned from GitHub.")

        logger.debug("Exchanged GitHub code", extra={"session_key": session_key})
        return GithubApiClient(access_token)


__all__ = ["GithubApiClient", "GithubOAuthClient"]
