from __future__ import annotations

from urllib.parse import parse_qs

import httpx
import pytest

from chatcast.client import ChatClient
from chatcast.messages import Message


def test_send_posts_form_fields() -> None:
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["form"] = parse_qs(request.content.decode())
        return httpx.Response(200, json={"status": "delivered", "receivers": 2})

    with ChatClient("http://chat.test", transport=httpx.MockTransport(handler)) as client:
        result = client.send(Message(room="a", username="bob", message="hi there"))

    assert result == {"status": "delivered", "receivers": 2}
    assert seen["path"] == "/message"
    assert seen["form"] == {"room": ["a"], "username": ["bob"], "message": ["hi there"]}


def test_send_raises_on_rejected_message() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(422, json={"detail": []}))
    with ChatClient("http://chat.test", transport=transport) as client:
        with pytest.raises(httpx.HTTPStatusError):
            client.send(Message(room="a", username="bob", message="hi"))


def test_listen_parses_data_frames() -> None:
    body = (
        "retry: 1500\n"
        'data: {"room": "a", "username": "bob", "message": "one"}\n\n'
        ": keep-alive\n\n"
        'data: {"room": "b", "username": "amy", "message": "two"}\n\n'
    )

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/events"
        return httpx.Response(200, text=body, headers={"content-type": "text/event-stream"})

    with ChatClient("http://chat.test", transport=httpx.MockTransport(handler)) as client:
        messages = list(client.listen())

    assert messages == [
        Message(room="a", username="bob", message="one"),
        Message(room="b", username="amy", message="two"),
    ]
