"""In-process named channels carrying OAuth redirect messages."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from contextlib import contextmanager
from typing import DefaultDict, Iterator, Set

from stamp_iam.schemas import RedirectMessage

logger = logging.getLogger(__name__)


def channel_name(platform: str) -> str:
    return f"{platform}_oauth_channel"


class Subscription:
    """Receiving end of one channel subscription."""

    def __init__(self, name: str, queue: "asyncio.Queue[RedirectMessage]") -> None:
        self.name = name
        self._queue = queue

    async def receive(self) -> RedirectMessage:
        return await self._queue.get()

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> RedirectMessage:
        return await self.receive()


class ChannelHub:
    """Fan-out of posted messages to every live subscriber of a channel name."""

    def __init__(self) -> None:
        self._subscribers: DefaultDict[str, Set["asyncio.Queue[RedirectMessage]"]] = defaultdict(set)

    def post_message(self, name: str, message: RedirectMessage) -> int:
        """Deliver ``message`` to current subscribers; return how many received it."""
        queues = list(self._subscribers.get(name, ()))
        for queue in queues:
            queue.put_nowait(message)
        if not queues:
            logger.warning("No subscribers on channel %s", name, extra={"target": message.target})
        return len(queues)

    @contextmanager
    def subscribe(self, name: str) -> Iterator[Subscription]:
        """Subscribe for the duration of the ``with`` block."""
        queue: "asyncio.Queue[RedirectMessage]" = asyncio.Queue()
        self._subscribers[name].add(queue)
        try:
            yield Subscription(name, queue)
        finally:
            subscribers = self._subscribers.get(name)
            if subscribers is not None:
                subscribers.discard(queue)
                if not subscribers:
                    del self._subscribers[name]

    def subscriber_count(self, name: str) -> int:
        return len(self._subscribers.get(name, ()))


__all__ = ["ChannelHub", "Subscription", "channel_name"]
