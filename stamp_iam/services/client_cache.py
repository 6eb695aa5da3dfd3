"""
Per-request memoization of authenticated platform clients.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Generic, Optional, Protocol, Tuple, TypeVar

logger = logging.getLogger(__name__)

ClientT = TypeVar("ClientT")
ClientT_co = TypeVar("ClientT_co", covariant=True)


class OAuthPlatformClient(Protocol[ClientT_co]):
    """OAuth client for one external platform."""

    platform: str

    def build_authorization_url(self, callback: str | None = None) -> Tuple[str, str]:
        ...

    async def exchange_authorization_code(self, *, session_key: str, code: str) -> ClientT_co:
        ...


class VerificationContext:
    """Cache scope shared by every provider verified within one request.

    Entries are keyed by ``(platform, session_key)`` and hold the exchange
    task, so concurrent providers share a single token exchange. Use as a
    context manager to evict everything when the request ends.
    """

    def __init__(self) -> None:
        self._clients: Dict[Tuple[str, str], "asyncio.Future[Any]"] = {}

    def lookup(self, platform: str, session_key: str) -> Optional["asyncio.Future[Any]"]:
        return self._clients.get((platform, session_key))

    def store(self, platform: str, session_key: str, client: "asyncio.Future[Any]") -> None:
        key = (platform, session_key)
        if key in self._clients:
            raise KeyError(f"Client already cached for {platform}/{session_key}")
        self._clients[key] = client

    def clear(self) -> None:
        for pending in self._clients.values():
            if not pending.done():
                pending.cancel()
        self._clients.clear()

    def __len__(self) -> int:
        return len(self._clients)

    def __enter__(self) -> "VerificationContext":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.clear()


class AuthClientCache(Generic[ClientT]):
    """Resolve an authenticated client for a session, exchanging the code once."""

    def __init__(self, oauth_client: OAuthPlatformClient[ClientT]) -> None:
        self._oauth = oauth_client

    @property
    def platform(self) -> str:
        return self._oauth.platform

    async def get_client(
        self, session_key: str, code: str, context: VerificationContext
    ) -> ClientT:
        """Return the cached client or exchange ``code`` for a new one.

        A rejected exchange raises ``AuthError``. The failure stays cached for
        the rest of the request, so the code is never exchanged twice.
        """
        pending = context.lookup(self.platform, session_key)
        if pending is None:
            logger.debug(
                "Exchanging authorization code",
                extra={"platform": self.platform, "session_key": session_key},
            )
            pending = asyncio.ensure_future(
                self._oauth.exchange_authorization_code(session_key=session_key, code=code)
            )
            context.store(self.platform, session_key, pending)
        return await pending


__all__ = ["AuthClientCache", "OAuthPlatformClient", "VerificationContext"]
