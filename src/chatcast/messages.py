"""Chat message contract shared by publishers, the hub and listeners."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

ROOM_MAX_LENGTH = 30
USERNAME_MAX_LENGTH = 20


class Message(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    room: str = Field(max_length=ROOM_MAX_LENGTH)
    username: str = Field(max_length=USERNAME_MAX_LENGTH)
    body: str = Field(alias="message")

    def to_wire(self) -> dict[str, str]:
        """Payload with the wire field names (`room`, `username`, `message`)."""
        return self.model_dump(mode="json", by_alias=True)
