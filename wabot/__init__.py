"""wabot — WhatsApp Business Cloud API bot client.

This package provides:
- Webhook dispatch to registered handlers, one message at a time
- Single-use next-step overrides for multi-step conversations
- Per-user conversation context
- Interactive markup builders (buttons, lists, location requests)
- Send, mark-as-read and media calls against the Cloud API
"""

from wabot.client import WhatsApp
from wabot.context import ContextStore, UserContext
from wabot.dispatcher import DEFAULT_FALLBACK_PATTERN, Dispatcher, NextStepConfig
from wabot.handlers import (
    HandlerConfigError,
    UpdateHandler,
    audio_handler,
    build_handler,
    document_handler,
    image_handler,
    interactive_handler,
    location_handler,
    sticker_handler,
    text_handler,
    unknown_handler,
    unsupported_handler,
    video_handler,
)
from wabot.helpers import (
    format_phone_number,
    get_extension_from_mime_type,
    get_mime_type_from_extension,
    is_link,
    is_valid_phone_number,
    keys_exist,
)
from wabot.markup import (
    InlineButton,
    InlineKeyboard,
    InlineList,
    InlineLocationRequest,
    ListItem,
    ListSection,
    MarkupValidationError,
    ReplyMarkup,
)
from wabot.models import (
    ButtonReply,
    ClientConfig,
    ExtractedData,
    HeaderType,
    ListReply,
    MediaType,
    MessageType,
    QueueStatus,
    ReplyMarkupType,
)
from wabot.update import Update

__all__ = [
    # Exceptions
    "HandlerConfigError",
    "MarkupValidationError",
    # Components
    "ContextStore",
    "Dispatcher",
    "NextStepConfig",
    "Update",
    "UpdateHandler",
    "UserContext",
    "WhatsApp",
    "DEFAULT_FALLBACK_PATTERN",
    # Handler factories
    "audio_handler",
    "build_handler",
    "document_handler",
    "image_handler",
    "interactive_handler",
    "location_handler",
    "sticker_handler",
    "text_handler",
    "unknown_handler",
    "unsupported_handler",
    "video_handler",
    # Markup
    "InlineButton",
    "InlineKeyboard",
    "InlineList",
    "InlineLocationRequest",
    "ListItem",
    "ListSection",
    "ReplyMarkup",
    # Models
    "ButtonReply",
    "ClientConfig",
    "ExtractedData",
    "HeaderType",
    "ListReply",
    "MediaType",
    "MessageType",
    "QueueStatus",
    "ReplyMarkupType",
    # Helpers
    "format_phone_number",
    "get_extension_from_mime_type",
    "get_mime_type_from_extension",
    "is_link",
    "is_valid_phone_number",
    "keys_exist",
]
