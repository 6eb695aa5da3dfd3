"""
Twitter OAuth2 utilities.

Authorization uses PKCE: the code verifier is kept server-side with the
pending authorization until the redirect's code is exchanged.
"""

from __future__ import annotations

import base64
import hashlib
import logging
import secrets
from typing import Any, Dict, Tuple
from urllib.parse import urlencode

import httpx

from stamp_iam.clients.pending_store import PendingAuthStore, new_session_key
from stamp_iam.core.config import TwitterSettings
from stamp_iam.core.errors import AuthError, FetchError
from stamp_iam.models.oauth import PendingAuthorization

logger = logging.getLogger(__name__)


def _code_challenge(verifier: str) -> str:
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


class TwitterApiClient:
    """Authenticated client for the Twitter v2 API."""

    API_BASE_URL = "https://api.twitter.com/2"

    def __init__(self, access_token: str, *, timeout: float = 10.0) -> None:
        self._access_token = access_token
        self._timeout = timeout

    async def find_my_user(self) -> Dict[str, Any]:
        """Return the ``data`` object of ``GET /users/me`` with public metrics."""
        headers = {"Authorization": f"Bearer {self._access_token}"}
        params = {"user.fields": "public_metrics"}
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(
                    f"{self.API_BASE_URL}/users/me", headers=headers, params=params
                )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise FetchError(
                f"Twitter users/me returned {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"Twitter users/me request failed: {exc}") from exc
        except ValueError as exc:
            raise FetchError("Twitter users/me returned a malformed body") from exc

        data = payload.get("data") if isinstance(payload, dict) else None
        return data if isinstance(data, dict) else {}


class TwitterOAuthClient:
    """Build Twitter authorization URLs and exchange authorization codes."""

    platform = "twitter"
    AUTH_BASE_URL = "https://twitter.com/i/oauth2/authorize"
    TOKEN_URL = "https://api.twitter.com/2/oauth2/token"

    def __init__(self, settings: TwitterSettings, pending_store: PendingAuthStore) -> None:
        self._settings = settings
        self._pending = pending_store

    def build_authorization_url(self, callback: str | None = None) -> Tuple[str, str]:
        """Register a pending authorization and return ``(auth_url, session_key)``."""
        session_key = new_session_key(self.platform)
        code_verifier = secrets.token_urlsafe(64)
        redirect_uri = callback or str(self._settings.callback_url)
        self._pending.put(
            PendingAuthorization(
                session_key=session_key,
                platform=self.platform,
                redirect_uri=redirect_uri,
                code_verifier=code_verifier,
            )
        )

        params = {
            "response_type": "code",
            "client_id": self._settings.client_id,
            "redirect_uri": redirect_uri,
            "scope": " ".join(self._settings.scopes),
            "state": session_key,
            "code_challenge": _code_challenge(code_verifier),
            "code_challenge_method": "S256",
        }
        return f"{self.AUTH_BASE_URL}?{urlencode(params)}", session_key

    async def exchange_authorization_code(
        self, *, session_key: str, code: str
    ) -> TwitterApiClient:
        """Exchange the redirect's code for an authenticated API client."""
        pending = self._pending.pop(session_key)
        if pending is None or pending.platform != self.platform:
            raise AuthError("Unknown or expired Twitter session.")

        payload = {
            "code": code,
            "grant_type": "authorization_code",
            "client_id": self._settings.client_id,
            "redirect_uri": pending.redirect_uri,
            "code_verifier": pending.code_verifier,
        }
        auth = None
        if self._settings.client_secret:
            auth = (self._settings.client_id, self._settings.client_secret)

        try:
            async with httpx.AsyncClient(timeout=10.0) as client:
                response = await client.post(self.TOKEN_URL, data=payload, auth=auth)
        except httpx.HTTPError as exc:
            raise AuthError(f"Twitter token exchange failed: {exc}") from exc

        if response.status_code != httpx.codes.OK:
            raise AuthError(f"Twitter token exchange rejected ({response.status_code}).")

        try:
            token_payload = response.json()
        except ValueError as exc:
            raise AuthError("Twitter token endpoint returned a malformed body.") from exc
        if not isinstance(token_payload, dict):
            raise AuthError("Twitter token endpoint returned a non-object body.")

        access_token = token_payload.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise AuthError("Incomplete token payload returned from Twitter.")

        logger.debug("Exchanged Twitter code", extra={"session_key": session_key})
        return TwitterApiClient(access_token)


__all__ = ["TwitterApiClient", "TwitterOAuthClient"]
