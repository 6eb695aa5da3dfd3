"""In-memory store for authorizations awaiting their code exchange."""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

from stamp_iam.models.oauth import PendingAuthorization

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_session_key(platform: str) -> str:
    """Return a fresh ``<platform>-<token>`` session key used as OAuth state."""
    return f"{platform}-{secrets.token_urlsafe(24)}"


class PendingAuthStore:
    """Session-key indexed store with TTL pruning.

    Entries are single use: ``pop`` removes the entry so an authorization
    code can only be exchanged against its session once.
    """

    def __init__(
        self,
        ttl_seconds: int = 900,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock
        self._entries: Dict[str, PendingAuthorization] = {}

    def put(self, entry: PendingAuthorization) -> None:
        self._prune()
        self._entries[entry.session_key] = entry

    def pop(self, session_key: str) -> Optional[PendingAuthorization]:
        self._prune()
        return self._entries.pop(session_key, None)

    def __len__(self) -> int:
        self._prune()
        return len(self._entries)

    def _prune(self) -> None:
        cutoff = self._clock() - self._ttl
        expired = [key for key, entry in self._entries.items() if entry.created_at < cutoff]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("Pruned %d expired pending authorizations", len(expired))


__all__ = ["PendingAuthStore", "new_session_key"]
