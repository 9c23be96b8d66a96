"""In-process broadcast hub with a bounded ring buffer and per-subscriber cursors.

Every published message is appended once to a ring buffer of fixed capacity.
Each subscription keeps its own cursor (the sequence number of the next message
it will read), so a slow reader never holds up the publisher or other readers.
When a cursor falls behind the oldest retained message the subscription is
moved forward and its next receive reports how many messages it lost.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections import deque
from dataclasses import dataclass

from chatcast.logging_setup import log_event
from chatcast.messages import Message

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 1024


@dataclass(frozen=True)
class PublishResult:
    status: str  # "delivered" | "no_subscribers" | "closed"
    receivers: int = 0

    @property
    def delivered(self) -> bool:
        return self.status == "delivered"


@dataclass(frozen=True)
class Received:
    message: Message


@dataclass(frozen=True)
class Lagged:
    skipped: int


@dataclass(frozen=True)
class Closed:
    pass


ReceiveResult = Received | Lagged | Closed

CLOSED = Closed()


def _resolve(waiter: asyncio.Future[None]) -> None:
    if not waiter.done():
        waiter.set_result(None)


def _wake(waiters: list[asyncio.Future[None]]) -> None:
    for waiter in waiters:
        loop = waiter.get_loop()
        if loop.is_closed():
            continue
        loop.call_soon_threadsafe(_resolve, waiter)


class Subscription:
    """Independent read cursor into a hub's message sequence."""

    def __init__(self, hub: BroadcastHub, cursor: int) -> None:
        self._hub = hub
        self._cursor = cursor
        self._detached = False

    @property
    def detached(self) -> bool:
        return self._detached

    async def receive(self) -> ReceiveResult:
        """Wait for the next outcome for this subscriber.

        Cancelling a pending receive loses nothing: the cursor only moves when
        an outcome is returned.
        """
        hub = self._hub
        loop = asyncio.get_running_loop()
        while True:
            with hub._lock:
                result = hub._poll(self)
                if result is not None:
                    return result
                waiter: asyncio.Future[None] = loop.create_future()
                hub._waiters.add(waiter)
            try:
                await waiter
            finally:
                with hub._lock:
                    hub._waiters.discard(waiter)

    def close(self) -> None:
        self._hub.unsubscribe(self)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class BroadcastHub:
    """Process-wide fan-out of chat messages to any number of subscribers."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self._buffer: deque[Message] = deque(maxlen=capacity)
        self._next_seq = 0
        self._subscribers: set[Subscription] = set()
        self._waiters: set[asyncio.Future[None]] = set()
        self._closed = False
        self._lock = threading.Lock()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def subscribe(self) -> Subscription:
        with self._lock:
            subscription = Subscription(self, cursor=self._next_seq)
            if self._closed:
                subscription._detached = True
            else:
                self._subscribers.add(subscription)
            count = len(self._subscribers)
        log_event(logger, "subscribed", component="hub", extra={"subscribers": count}, level=logging.DEBUG)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription._detached:
                return
            subscription._detached = True
            self._subscribers.discard(subscription)
            count = len(self._subscribers)
            waiters = list(self._waiters)
            self._waiters.clear()

        # Other subscriptions re-check and go back to waiting.
        _wake(waiters)
        log_event(logger, "unsubscribed", component="hub", extra={"subscribers": count}, level=logging.DEBUG)

    def publish(self, message: Message) -> PublishResult:
        """Hand `message` to every live subscription without waiting on any of them."""
        with self._lock:
            if self._closed:
                return PublishResult(status="closed")
            receivers = len(self._subscribers)
            if receivers == 0:
                return PublishResult(status="no_subscribers")
            self._buffer.append(message)
            self._next_seq += 1
            waiters = list(self._waiters)
            self._waiters.clear()

        _wake(waiters)
        return PublishResult(status="delivered", receivers=receivers)

    def close(self) -> None:
        """Stop accepting messages and end every subscription."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._buffer.clear()
            for subscription in self._subscribers:
                subscription._detached = True
            dropped = len(self._subscribers)
            self._subscribers.clear()
            waiters = list(self._waiters)
            self._waiters.clear()

        _wake(waiters)
        log_event(logger, "hub closed", component="hub", extra={"subscribers": dropped})

    def _poll(self, subscription: Subscription) -> ReceiveResult | None:
        # Caller holds self._lock.
        if self._closed or subscription._detached:
            return CLOSED

        oldest = self._next_seq - len(self._buffer)
        if subscription._cursor < oldest:
            skipped = oldest - subscription._cursor
            subscription._cursor = oldest
            return Lagged(skipped=skipped)

        if subscription._cursor < self._next_seq:
            message = self._buffer[subscription._cursor - oldest]
            subscription._cursor += 1
            return Received(message=message)

        return None
