"""Client for the procedure endpoints that mint OAuth authorization URLs."""

from __future__ import annotations

import httpx

from stamp_iam.core.errors import AuthUrlError
from stamp_iam.utils.http import RetryConfig, request_with_retry


class ProcedureClient:
    """Call ``POST {base}/{platform}/generateAuthUrl``."""

    def __init__(
        self,
        *,
        base_url: str,
        retry_config: RetryConfig | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._retry = retry_config or RetryConfig()
        self._timeout = timeout

    async def generate_auth_url(self, platform: str, *, callback: str | None) -> str:
        """Return the authorization URL for ``platform``.

        Raises ``AuthUrlError`` on transport failures, non-2xx answers and
        bodies without an ``authUrl``.
        """
        url = f"{self._base_url}/{platform}/generateAuthUrl"
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await request_with_retry(
                    client.post,
                    url,
                    json={"callback": callback},
                    retry_config=self._retry,
                )
            payload = response.json()
        except httpx.HTTPError as exc:
            raise AuthUrlError(f"generateAuthUrl failed for {platform}: {exc}") from exc
        except ValueError as exc:
            raise AuthUrlError(f"generateAuthUrl returned malformed JSON for {platform}") from exc

        auth_url = payload.get("authUrl") if isinstance(payload, dict) else None
        if not isinstance(auth_url, str) or not auth_url:
            raise AuthUrlError(f"generateAuthUrl response for {platform} has no authUrl")
        return auth_url


__all__ = ["ProcedureClient"]
