"""Pydantic schemas for chat messages and socket events."""

import time
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class ChatMessage(BaseModel):
    """A chat message as the frontend sees it."""

    model_config = ConfigDict(populate_by_name=True)

    content: str
    timestamp: int = Field(default_factory=now_ms)
    user_id: str = Field(..., alias="userId")
    is_user: bool = Field(default=True, alias="isUser")

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "ChatMessage":
        """Build from a `messages` table row."""
        created_at = datetime.fromisoformat(row["created_at"].replace("Z", "+00:00"))
        return cls(
            content=row["content"],
            timestamp=int(created_at.timestamp() * 1000),
            user_id=row["user_email"],
            is_user=bool(row["is_user_message"]),
        )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class ClientChatEvent(BaseModel):
    """Inbound socket frame."""
    event: Literal["chatMessage"] = "chatMessage"
    content: str = ""


class ServerChatEvent(BaseModel):
    """Outbound socket frame carrying an answer."""
    event: Literal["chatMessage"] = "chatMessage"
    message: dict[str, Any]


class ServerErrorEvent(BaseModel):
    """Outbound socket frame carrying an error string."""
    event: Literal["error"] = "error"
    error: str
