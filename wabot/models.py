"""Shared Pydantic data models for wabot."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# --- Enums ---


class MessageType(str, Enum):
    """Message kinds the Cloud API tags incoming messages with."""

    TEXT = "text"
    INTERACTIVE = "interactive"
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
    DOCUMENT = "document"
    STICKER = "sticker"
    LOCATION = "location"
    CONTACTS = "contacts"
    UNKNOWN = "unknown"
    UNSUPPORTED = "unsupported"


class ReplyMarkupType(str, Enum):
    BUTTON = "button"
    LIST = "list"
    LOCATION_REQUEST = "location_request_message"


class MediaType(str, Enum):
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    DOCUMENT = "document"
    STICKER = "sticker"


class HeaderType(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    DOCUMENT = "document"


# --- Incoming message models ---


class ButtonReply(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str


class ListReply(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str | None = None


class ExtractedData(BaseModel):
    """Normalized view of a raw message, produced by a handler.

    message_text is always set; an empty string means the message has no
    natural text representation.
    """

    model_config = ConfigDict(frozen=True)

    message_text: str = ""
    button_reply: ButtonReply | None = None
    list_reply: ListReply | None = None
    media_mime_type: str | None = None
    media_file_id: str | None = None
    media_hash: str | None = None
    media_voice: bool | None = None
    loc_address: str | None = None
    loc_name: str | None = None
    loc_latitude: float | None = None
    loc_longitude: float | None = None


# --- Client models ---


class ClientConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    number_id: str = Field(min_length=1)
    token: str = Field(min_length=1)
    mark_as_read: bool = True
    version: int = Field(default=21, ge=1)


@dataclass(frozen=True)
class QueueStatus:
    size: int
    is_processing: bool
