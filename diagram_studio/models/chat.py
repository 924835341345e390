"""Planning chat message model."""
from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from diagram_studio.models.documents import new_id, utc_now

ChatRole = Literal["user", "assistant"]


class ChatMessage(BaseModel):
    id: str = Field(default_factory=new_id)
    role: ChatRole
    text: str
    timestamp: datetime = Field(default_factory=utc_now)
