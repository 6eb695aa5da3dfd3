"""HTTP utilities providing retry/backoff semantics."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

import httpx

from stamp_iam.core.config import HttpSettings

logger = logging.getLogger(__name__)


class RetryConfig:
    def __init__(self, *, attempts: int = 3, backoff_seconds: float = 1.0) -> None:
        self.attempts = max(1, attempts)
        self.backoff_seconds = backoff_seconds

    @classmethod
    def from_settings(cls, settings: HttpSettings) -> "RetryConfig":
        return cls(
            attempts=settings.retry_attempts,
            backoff_seconds=settings.retry_backoff_seconds,
        )


NO_RETRY = RetryConfig(attempts=1, backoff_seconds=0.0)


def _is_retryable(exc: httpx.HTTPError) -> bool:
    # 4xx answers other than 429 will not change on a second try.
    if isinstance(exc, httpx.HTTPStatusError):
        code = exc.response.status_code
        return code == 429 or code >= 500
    return True


async def request_with_retry(
    func: Callable[..., Awaitable[httpx.Response]],
    *args,
    retry_config: RetryConfig | None = None,
    **kwargs,
) -> httpx.Response:
    config = retry_config or RetryConfig()
    attempt = 0
    last_exception: Exception | None = None

    while attempt < config.attempts:
        try:
            response = await func(*args, **kwargs)
            response.raise_for_status()
            return response
        except httpx.HTTPError as exc:
            last_exception = exc
            attempt += 1
            if attempt >= config.attempts or not _is_retryable(exc):
                break
            logger.warning("Retrying HTTP request after %s (attempt %d)", exc, attempt)
            await asyncio.sleep(config.backoff_seconds * attempt)

    if last_exception is not None:
        raise last_exception
    raise RuntimeError("Request failed without raising an exception")


__all__ = ["NO_RETRY", "RetryConfig", "request_with_retry"]
