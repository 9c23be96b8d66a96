"""Live message streams: subscription-to-iterator adapter and SSE framing."""

from __future__ import annotations

import asyncio
import enum
import json
import logging
from collections.abc import AsyncIterator

from chatcast.broadcast import Closed, Lagged, Subscription
from chatcast.logging_setup import log_event
from chatcast.messages import Message

logger = logging.getLogger(__name__)


def encode_sse(data: dict, retry_ms: int | None = None) -> str:
    """Encode payload as SSE frame."""
    lines = []
    if retry_ms is not None:
        lines.append(f"retry: {retry_ms}")
    lines.append(f"data: {json.dumps(data)}")
    return "\n".join(lines) + "\n\n"


class StreamState(enum.Enum):
    RUNNING = "running"
    STOPPED = "stopped"


class StreamAdapter:
    """Turn a subscription into an async iterator that ends on hub close or shutdown.

    Each step races the subscription's next outcome against the shutdown event.
    Lag outcomes are skipped; once stopped the adapter stays stopped and its
    subscription is detached.
    """

    def __init__(self, subscription: Subscription, shutdown: asyncio.Event) -> None:
        self._subscription = subscription
        self._shutdown = shutdown
        self.state = StreamState.RUNNING

    def __aiter__(self) -> StreamAdapter:
        return self

    async def __anext__(self) -> Message:
        if self.state is StreamState.STOPPED:
            raise StopAsyncIteration

        stop = asyncio.ensure_future(self._shutdown.wait())
        receive: asyncio.Future | None = None
        try:
            while not self._shutdown.is_set():
                receive = asyncio.ensure_future(self._subscription.receive())
                await asyncio.wait({receive, stop}, return_when=asyncio.FIRST_COMPLETED)
                # Shutdown wins even when a message is ready in the same step.
                if self._shutdown.is_set():
                    break

                result = receive.result()
                if isinstance(result, Lagged):
                    log_event(
                        logger,
                        "subscriber lagged",
                        component="stream",
                        extra={"skipped": result.skipped},
                        level=logging.WARNING,
                    )
                    continue
                if isinstance(result, Closed):
                    self._stop("hub closed")
                    raise StopAsyncIteration
                return result.message
        except asyncio.CancelledError:
            self._stop("cancelled")
            raise
        finally:
            stop.cancel()
            if receive is not None:
                receive.cancel()

        self._stop("shutdown")
        raise StopAsyncIteration

    async def aclose(self) -> None:
        self._stop("closed by consumer")

    def _stop(self, reason: str) -> None:
        if self.state is StreamState.STOPPED:
            return
        self.state = StreamState.STOPPED
        self._subscription.close()
        log_event(logger, "stream stopped", component="stream", extra={"reason": reason}, level=logging.DEBUG)


async def sse_frames(adapter: StreamAdapter, retry_ms: int | None = None) -> AsyncIterator[str]:
    """Yield one SSE frame per message produced by `adapter`."""
    first = True
    try:
        async for message in adapter:
            yield encode_sse(message.to_wire(), retry_ms=retry_ms if first else None)
            first = False
    finally:
        await adapter.aclose()
