"""Deduplication of repeated redirect deliveries."""

from __future__ import annotations

import logging
import time
from typing import Callable, Dict

from stamp_iam.schemas import RedirectMessage

logger = logging.getLogger(__name__)


class RedirectGuard:
    """Admit the first delivery per target, drop repeats inside the window.

    Only admitted deliveries move the window; a burst of duplicates cannot
    keep postponing the next legitimate redirect.
    """

    def __init__(
        self,
        window_seconds: float = 0.3,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._window = window_seconds
        self._clock = clock
        self._last_processed: Dict[str, float] = {}

    def admit(self, message: RedirectMessage) -> bool:
        now = self._clock()
        last = self._last_processed.get(message.target)
        if last is not None and now - last < self._window:
            logger.debug("Dropped duplicate redirect", extra={"target": message.target})
            return False
        self._last_processed[message.target] = now
        return True


__all__ = ["RedirectGuard"]
