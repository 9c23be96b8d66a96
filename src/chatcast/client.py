"""HTTP client for publishing messages and following the live stream."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import httpx

from chatcast.messages import Message


class ChatClient:
    """POST messages to a chat server and read its event stream."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 5.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self.timeout_seconds = timeout_seconds
        self._client = httpx.Client(base_url=base_url, timeout=timeout_seconds, transport=transport)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> ChatClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def send(self, message: Message) -> dict[str, Any]:
        """Publish one message. Returns the server's publish outcome."""
        response = self._client.post("/message", data=message.to_wire())
        response.raise_for_status()
        return response.json()

    def listen(self) -> Iterator[Message]:
        """Yield messages from the event stream until the server ends it."""
        # Reads block until the next event, so only the connect phase is bounded.
        timeout = httpx.Timeout(None, connect=self.timeout_seconds)
        with self._client.stream("GET", "/events", timeout=timeout) as response:
            response.raise_for_status()
            for line in response.iter_lines():
                if line.startswith("data:"):
                    yield Message.model_validate_json(line[len("data:"):].strip())
