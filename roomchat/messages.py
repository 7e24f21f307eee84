# ============================================
#     RoomChat - Chat message records
#     text / audio / image, discriminated on "type"
# ============================================

from datetime import datetime, timezone
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from roomchat.config import (
    MAX_MESSAGE_LENGTH,
    MAX_MEDIA_LENGTH,
    MAX_USERNAME_LENGTH,
    MAX_ROOM_NAME_LENGTH,
)

# Every record goes out with all payload keys, unused ones as null
WIRE_FIELDS = ("id", "username", "room", "type", "message", "audio", "image", "timestamp")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _BaseChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: Optional[str] = None
    username: str = Field(..., min_length=1, max_length=MAX_USERNAME_LENGTH)
    room: str = Field(..., min_length=1, max_length=MAX_ROOM_NAME_LENGTH)
    timestamp: datetime = Field(default_factory=_utcnow)

    @field_validator("username", mode="before")
    @classmethod
    def _strip_username(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("room", mode="before")
    @classmethod
    def _normalize_room(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    def to_wire(self) -> dict:
        """JSON-safe dict sent over Socket.IO."""
        data = dict.fromkeys(WIRE_FIELDS)
        data.update(self.model_dump(mode="json"))
        return data


class TextMessage(_BaseChatMessage):
    type: Literal["text"] = "text"
    message: str = Field(..., max_length=MAX_MESSAGE_LENGTH)

    @field_validator("message")
    @classmethod
    def _not_blank(cls, v):
        if not v.strip():
            raise ValueError("message is empty")
        return v


class AudioMessage(_BaseChatMessage):
    type: Literal["audio"] = "audio"
    audio: str = Field(..., min_length=1, max_length=MAX_MEDIA_LENGTH)


class ImageMessage(_BaseChatMessage):
    type: Literal["image"] = "image"
    image: str = Field(..., min_length=1, max_length=MAX_MEDIA_LENGTH)
    # optional caption
    message: Optional[str] = Field(default=None, max_length=MAX_MESSAGE_LENGTH)


ChatMessage = Annotated[
    Union[TextMessage, AudioMessage, ImageMessage],
    Field(discriminator="type"),
]

_chat_message_adapter = TypeAdapter(ChatMessage)


def build_chat_message(data: dict):
    """
    Validate an inbound chat-message payload and stamp it with the current
    time. Client supplied "id" and "timestamp" are discarded.

    Raises pydantic.ValidationError on a malformed payload.
    """
    payload = {k: v for k, v in data.items() if k not in ("id", "timestamp")}
    return _chat_message_adapter.validate_python(payload)


def load_chat_message(doc: dict):
    """Rebuild a stored record (keeps its id and timestamp)."""
    return _chat_message_adapter.validate_python(doc)
