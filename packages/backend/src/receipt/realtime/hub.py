"""Broadcast hub — the set of live subscribers and fan-out to them.

Learn: One hub per app (stored on app.state). All membership changes
go through an asyncio.Lock, and broadcast() sends to a snapshot taken
under that lock, so a connect/disconnect racing a broadcast never sees
a half-mutated set. Sends run concurrently and outside the lock; one
slow or dead client does not hold up subscribe/unsubscribe.
"""

import asyncio
from typing import Protocol

import structlog
from pydantic import BaseModel

from receipt.errors import DeliveryError

logger = structlog.get_logger()


class Subscriber(Protocol):  # pragma: no cover - interface only
    """Anything we can push text frames to (a Starlette WebSocket in practice)."""

    async def send_text(self, data: str) -> None:
        ...


class BroadcastHub:
    """Tracks connected subscribers and pushes new entries to all of them."""

    def __init__(self):
        self._subscribers: set[Subscriber] = set()
        self._lock = asyncio.Lock()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def subscribe(self, connection: Subscriber) -> None:
        async with self._lock:
            self._subscribers.add(connection)
        logger.info("receipt.subscribed", subscribers=self.subscriber_count)

    async def unsubscribe(self, connection: Subscriber) -> None:
        async with self._lock:
            self._subscribers.discard(connection)
        logger.info("receipt.unsubscribed", subscribers=self.subscriber_count)

    async def broadcast(self, entry: BaseModel) -> int:
        """Push one entry to every current subscriber.

        Never raises for delivery problems: a failing subscriber is
        dropped from the set and the rest still get the message.
        Returns how many subscribers received it.
        """
        message = entry.model_dump_json()
        async with self._lock:
            targets = list(self._subscribers)

        if not targets:
            return 0

        results = await asyncio.gather(
            *(self._deliver(conn, message) for conn in targets),
            return_exceptions=True,
        )

        failed = [r for r in results if isinstance(r, DeliveryError)]
        if failed:
            async with self._lock:
                for err in failed:
                    self._subscribers.discard(err.connection)
            for err in failed:
                logger.warning(
                    "receipt.delivery_failed",
                    error=str(err.cause),
                    subscribers=self.subscriber_count,
                )

        return sum(1 for r in results if r is None)

    async def _deliver(self, connection: Subscriber, message: str) -> None:
        try:
            await connection.send_text(message)
        except Exception as e:
            raise DeliveryError(connection, e) from e

    async def close(self) -> None:
        """Forget every subscriber (shutdown). Connections close on their own."""
        async with self._lock:
            self._subscribers.clear()
