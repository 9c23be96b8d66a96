"""FastAPI routes for publishing chat messages and streaming them over SSE."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, Form, Request
from fastapi.responses import StreamingResponse

from chatcast.broadcast import BroadcastHub
from chatcast.logging_setup import log_event
from chatcast.messages import ROOM_MAX_LENGTH, USERNAME_MAX_LENGTH, Message
from chatcast.stream import StreamAdapter, sse_frames

logger = logging.getLogger(__name__)

router = APIRouter()


def _hub(request: Request) -> BroadcastHub:
    return request.app.state.hub


def _shutdown(request: Request) -> asyncio.Event:
    return request.app.state.shutdown


@router.post("/message")
def post_message(
    request: Request,
    room: str = Form(..., max_length=ROOM_MAX_LENGTH),
    username: str = Form(..., max_length=USERNAME_MAX_LENGTH),
    message: str = Form(...),
) -> dict[str, Any]:
    result = _hub(request).publish(Message(room=room, username=username, message=message))
    log_event(
        logger,
        "message published",
        component="routes",
        extra={"room": room, "status": result.status, "receivers": result.receivers},
        level=logging.DEBUG,
    )
    return {"status": result.status, "receivers": result.receivers}


@router.get("/events")
async def stream_events(request: Request) -> StreamingResponse:
    adapter = StreamAdapter(_hub(request).subscribe(), _shutdown(request))
    retry_ms = request.app.state.settings.stream.retry_ms

    return StreamingResponse(
        sse_frames(adapter, retry_ms=retry_ms),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive", "X-Accel-Buffering": "no"},
    )
