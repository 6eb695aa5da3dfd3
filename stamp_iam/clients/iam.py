"""
Client for the credential-issuance (IAM) service.

Issuance is a two step exchange: request a challenge credential for the
address, sign its challenge with the wallet signer, then submit the signed
challenge together with the proofs to obtain the credential.
"""

from __future__ import annotations

from typing import Any, Dict, Protocol

import httpx

from stamp_iam.core.errors import IssuanceError
from stamp_iam.utils.http import NO_RETRY, RetryConfig, request_with_retry


class Signer(Protocol):
    """Wallet-side signer used to prove address ownership."""

    async def sign_message(self, message: str) -> str:
        ...


class IamClient:
    """Fetch verifiable credentials from the issuance service."""

    API_VERSION = "v0.0.0"

    def __init__(
        self,
        *,
        retry_config: RetryConfig | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._retry = retry_config or RetryConfig()
        self._timeout = timeout

    async def fetch_verifiable_credential(
        self, iam_url: str, payload: Dict[str, Any], signer: Signer
    ) -> Dict[str, Any]:
        """Return the issuance response, which carries ``credential``."""
        base_url = f"{iam_url.rstrip('/')}/{self.API_VERSION}"
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            challenge_body = await self._post(
                client,
                f"{base_url}/challenge",
                {"payload": {"address": payload.get("address"), "type": payload.get("type")}},
                self._retry,
            )
            challenge = challenge_body.get("credential")
            message = (
                challenge.get("credentialSubject", {}).get("challenge")
                if isinstance(challenge, dict)
                else None
            )
            if not message:
                raise IssuanceError("Challenge response did not include a challenge.")

            signature = await signer.sign_message(message)

            # Submitting proofs spends the authorization code, so never repeat it.
            verified = await self._post(
                client,
                f"{base_url}/verify",
                {"payload": payload, "challenge": challenge, "signature": signature},
                NO_RETRY,
            )

        if not verified.get("credential"):
            raise IssuanceError("Issuance response did not include a credential.")
        return verified

    @staticmethod
    async def _post(
        client: httpx.AsyncClient,
        url: str,
        body: Dict[str, Any],
        retry_config: RetryConfig,
    ) -> Dict[str, Any]:
        try:
            response = await request_with_retry(
                client.post, url, json=body, retry_config=retry_config
            )
            data = response.json()
        except httpx.HTTPError as exc:
            raise IssuanceError(f"Request to {url} failed: {exc}") from exc
        except ValueError as exc:
            raise IssuanceError(f"Malformed JSON from {url}") from exc
        if not isinstance(data, dict):
            raise IssuanceError(f"Unexpected payload from {url}")
        return data


__all__ = ["IamClient", "Signer"]
