"""
Popup-based OAuth handshake for one provider.

The initiating side fetches an authorization URL, opens it in a popup, and
listens on the platform's redirect channel. When the popup's callback posts
``{target, data: {code, state}}`` the handshake asks the issuance service for
a credential and hands it to the credential store.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from enum import Enum
from typing import Any, AsyncIterator, Dict, Optional, Protocol

from stamp_iam.clients.iam import Signer
from stamp_iam.clients.procedure import ProcedureClient
from stamp_iam.core.errors import AuthUrlError, IssuanceError
from stamp_iam.handshake.channel import ChannelHub, Subscription, channel_name
from stamp_iam.handshake.dedup import RedirectGuard
from stamp_iam.handshake.popup import PopupGeometry, WindowOpener
from stamp_iam.schemas import RedirectMessage

logger = logging.getLogger(__name__)


class HandshakeState(str, Enum):
    IDLE = "idle"
    AWAITING_REDIRECT = "awaiting_redirect"
    VERIFYING = "verifying"


class CredentialIssuer(Protocol):
    async def fetch_verifiable_credential(
        self, iam_url: str, payload: Dict[str, Any], signer: Signer
    ) -> Dict[str, Any]:
        ...


class CredentialStore(Protocol):
    async def add_stamp(self, stamp: Dict[str, Any]) -> None:
        ...


class AuthorizationHandshake:
    """State machine driving one provider's popup authorization."""

    def __init__(
        self,
        *,
        provider_id: str,
        platform: str,
        callback_url: Optional[str],
        address: str,
        signer: Signer,
        iam_url: str,
        procedure_client: ProcedureClient,
        issuer: CredentialIssuer,
        credential_store: CredentialStore,
        channel_hub: ChannelHub,
        window_opener: WindowOpener,
        guard: Optional[RedirectGuard] = None,
        geometry: Optional[PopupGeometry] = None,
        version: str = "0.0.0",
    ) -> None:
        self.provider_id = provider_id
        self.platform = platform
        self._callback_url = callback_url
        self._address = address
        self._signer = signer
        self._iam_url = iam_url
        self._procedure = procedure_client
        self._issuer = issuer
        self._store = credential_store
        self._hub = channel_hub
        self._opener = window_opener
        self._guard = guard or RedirectGuard()
        self._geometry = geometry or PopupGeometry()
        self._version = version
        self._state = HandshakeState.IDLE

    @property
    def state(self) -> HandshakeState:
        return self._state

    @property
    def is_loading(self) -> bool:
        return self._state is HandshakeState.VERIFYING

    async def start(self) -> bool:
        """Fetch the authorization URL and open it; ``False`` leaves the handshake idle."""
        try:
            auth_url = await self._procedure.generate_auth_url(
                self.platform, callback=self._callback_url
            )
        except AuthUrlError as exc:
            logger.warning(
                "Could not obtain authorization URL: %s",
                exc,
                extra={"provider": self.provider_id},
            )
            self._state = HandshakeState.IDLE
            return False

        features = self._geometry.features(*self._opener.screen_size)
        self._opener.open(auth_url, name="_blank", features=features)
        self._state = HandshakeState.AWAITING_REDIRECT
        return True

    async def handle_message(self, message: RedirectMessage) -> bool:
        """Process one channel delivery; return whether a stamp was saved."""
        if message.target != self.platform:
            return False
        if not self._guard.admit(message):
            return False
        if self._state is not HandshakeState.AWAITING_REDIRECT:
            logger.debug(
                "Redirect arrived while %s; processing anyway",
                self._state.value,
                extra={"provider": self.provider_id, "target": message.target},
            )

        self._state = HandshakeState.VERIFYING
        logger.info("Saving stamp", extra={"provider": self.provider_id})
        payload = {
            "type": self.provider_id,
            "version": self._version,
            "address": self._address,
            "proofs": {
                "code": message.data.code,
                "sessionKey": message.data.state,
            },
        }
        try:
            verified = await self._issuer.fetch_verifiable_credential(
                self._iam_url, payload, self._signer
            )
            await self._store.add_stamp(
                {"provider": self.provider_id, "credential": verified["credential"]}
            )
        except IssuanceError as exc:
            logger.warning(
                "Stamp was not issued: %s",
                exc,
                extra={"provider": self.provider_id, "session_key": message.data.state},
            )
            return False
        finally:
            self._state = HandshakeState.IDLE

        logger.info("Successfully saved stamp", extra={"provider": self.provider_id})
        return True

    @asynccontextmanager
    async def listen(self) -> AsyncIterator["AuthorizationHandshake"]:
        """Subscribe to the redirect channel for the duration of the block."""
        with self._hub.subscribe(channel_name(self.platform)) as subscription:
            consumer = asyncio.create_task(self._consume(subscription))
            try:
                yield self
            finally:
                consumer.cancel()
                try:
                    await consumer
                except asyncio.CancelledError:
                    pass

    async def _consume(self, subscription: Subscription) -> None:
        async for message in subscription:
            try:
                await self.handle_message(message)
            except Exception:
                logger.exception(
                    "Failed handling redirect message", extra={"provider": self.provider_id}
                )


__all__ = [
    "AuthorizationHandshake",
    "CredentialIssuer",
    "CredentialStore",
    "HandshakeState",
]
