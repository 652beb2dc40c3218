"""Pydantic models for doctor/patient chat messages."""
from typing import Any, Dict, List, Literal

from pydantic import Field

from greedoc.models.base import CamelModel

MessageType = Literal["text", "image", "file", "prescription"]


def chat_room_id(user_a: str, user_b: str) -> str:
    """Room id shared by both participants regardless of who sends."""
    return "chat_" + "_".join(sorted([user_a, user_b]))


class ChatMessageCreate(CamelModel):
    receiver_id: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1, max_length=1000)
    message_type: MessageType = "text"
    attachments: List[Dict[str, Any]] = Field(default_factory=list)
