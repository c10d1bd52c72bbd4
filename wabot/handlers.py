"""Update handlers: match a message kind, filter its text, run a callback.

A handler is one UpdateHandler tagged with the MessageType it accepts
and carrying the extraction function that turns a raw message of that
kind into ExtractedData. Adding a new provider message kind means adding
an extractor to _EXTRACTORS; build_handler refuses kinds without one.
"""

from __future__ import annotations

import functools
import inspect
import logging
import re
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from wabot.models import ButtonReply, ExtractedData, ListReply, MessageType

if TYPE_CHECKING:
    from wabot.context import UserContext
    from wabot.update import Update

logger = logging.getLogger(__name__)

HandlerAction = Callable[..., Awaitable[None] | None]
FilterFunction = Callable[[str], bool]
Extractor = Callable[[dict[str, Any]], ExtractedData]


class HandlerConfigError(ValueError):
    """Raised when a handler is built for a message kind it cannot extract."""


# --- Extractors ---


def _extract_text(message: dict[str, Any]) -> ExtractedData:
    text = message.get("text") or {}
    return ExtractedData(message_text=text.get("body") or "")


def _extract_interactive(
    message: dict[str, Any],
    *,
    handle_button: bool = True,
    handle_list: bool = True,
) -> ExtractedData:
    interactive = message.get("interactive")
    if not interactive:
        return ExtractedData()

    reply_type = interactive.get("type")
    button = interactive.get("button_reply")
    if reply_type == "button_reply" and handle_button and button:
        reply = ButtonReply.model_validate(button)
        return ExtractedData(message_text=reply.id, button_reply=reply)

    listed = interactive.get("list_reply")
    if reply_type == "list_reply" and handle_list and listed:
        row = ListReply.model_validate(listed)
        return ExtractedData(message_text=row.id, list_reply=row)

    return ExtractedData()


def _extract_media(message: dict[str, Any], *, kind: str, captioned: bool) -> ExtractedData:
    media = message.get(kind) or {}
    return ExtractedData(
        message_text=(media.get("caption") or "") if captioned else "",
        media_mime_type=media.get("mime_type"),
        media_file_id=media.get("id"),
        media_hash=media.get("sha256"),
    )


def _extract_audio(message: dict[str, Any]) -> ExtractedData:
    audio = message.get("audio") or {}
    data = _extract_media(message, kind="audio", captioned=False)
    return data.model_copy(update={"media_voice": audio.get("voice")})


def _extract_location(message: dict[str, Any]) -> ExtractedData:
    location = message.get("location") or {}
    name = location.get("name") or ""
    address = location.get("address") or ""
    latitude = location.get("latitude")
    longitude = location.get("longitude")

    if name or address:
        text = f"{name}\n{address}".strip()
    else:
        text = f"lat: {latitude}, long: {longitude}"

    return ExtractedData(
        message_text=text,
        loc_address=address,
        loc_name=name,
        loc_latitude=latitude,
        loc_longitude=longitude,
    )


def _extract_nothing(message: dict[str, Any]) -> ExtractedData:
    return ExtractedData()


_EXTRACTORS: dict[MessageType, Extractor] = {
    MessageType.TEXT: _extract_text,
    MessageType.INTERACTIVE: _extract_interactive,
    MessageType.IMAGE: functools.partial(_extract_media, kind="image", captioned=True),
    MessageType.AUDIO: _extract_audio,
    MessageType.VIDEO: functools.partial(_extract_media, kind="video", captioned=True),
    MessageType.DOCUMENT: functools.partial(_extract_media, kind="document", captioned=True),
    MessageType.STICKER: functools.partial(_extract_media, kind="sticker", captioned=False),
    MessageType.LOCATION: _extract_location,
    MessageType.UNKNOWN: _extract_nothing,
    MessageType.UNSUPPORTED: _extract_nothing,
}


# --- Handler ---


class UpdateHandler:
    """A registered (kind, filter, callback) triple.

    Filtering: a regex is tested with re.search against the extracted
    message text; otherwise the filter predicate is called; with neither
    every message of the kind passes. Configuring both is allowed but the
    regex takes precedence and the predicate is never called.

    With context=True (the default) the callback is called as
    action(update, context), otherwise as action(update). Callbacks may
    be plain functions or coroutine functions.
    """

    def __init__(
        self,
        message_type: MessageType | str,
        action: HandlerAction,
        extractor: Extractor,
        *,
        regex: str | re.Pattern[str] | None = None,
        filter: FilterFunction | None = None,
        context: bool = True,
        persistent: bool = False,
    ) -> None:
        self.message_type = MessageType(message_type)
        self.action = action
        self.extractor = extractor
        self.regex = re.compile(regex) if isinstance(regex, str) else regex
        self.filter = filter
        self.context = context
        self.persistent = persistent
        if self.regex is not None and self.filter is not None:
            logger.warning(
                "Handler for %s messages has both regex and filter; the filter is ignored",
                self.message_type.value,
            )

    def extract_data(self, message: dict[str, Any]) -> ExtractedData:
        return self.extractor(message)

    def filter_check(self, text: str) -> bool:
        if self.regex is not None:
            return self.regex.search(text) is not None
        if self.filter is not None:
            return bool(self.filter(text))
        return True

    async def run(self, update: Update, context: UserContext | None = None) -> None:
        if self.context and context is not None:
            result = self.action(update, context)
        else:
            result = self.action(update)
        if inspect.isawaitable(result):
            await result

    def __repr__(self) -> str:
        name = getattr(self.action, "__qualname__", repr(self.action))
        return (
            f"UpdateHandler(message_type={self.message_type.value!r}, action={name}, "
            f"persistent={self.persistent})"
        )


def build_handler(
    message_type: MessageType | str, action: HandlerAction, **options: Any,
) -> UpdateHandler:
    """Build a handler for any message kind that has an extractor."""
    kind = MessageType(message_type)
    if kind not in _EXTRACTORS:
        raise HandlerConfigError(f"No extractor for message type: {kind.value}")
    return UpdateHandler(kind, action, _EXTRACTORS[kind], **options)


def text_handler(action: HandlerAction, **options: Any) -> UpdateHandler:
    return build_handler(MessageType.TEXT, action, **options)


def interactive_handler(
    action: HandlerAction,
    *,
    handle_button: bool = True,
    handle_list: bool = True,
    **options: Any,
) -> UpdateHandler:
    """Handle button and/or list replies; each can be switched off."""
    extractor = functools.partial(
        _extract_interactive, handle_button=handle_button, handle_list=handle_list,
    )
    return UpdateHandler(MessageType.INTERACTIVE, action, extractor, **options)


def image_handler(action: HandlerAction, **options: Any) -> UpdateHandler:
    return build_handler(MessageType.IMAGE, action, **options)


def audio_handler(action: HandlerAction, **options: Any) -> UpdateHandler:
    return build_handler(MessageType.AUDIO, action, **options)


def video_handler(action: HandlerAction, **options: Any) -> UpdateHandler:
    return build_handler(MessageType.VIDEO, action, **options)


def document_handler(action: HandlerAction, **options: Any) -> UpdateHandler:
    return build_handler(MessageType.DOCUMENT, action, **options)


def sticker_handler(action: HandlerAction, **options: Any) -> UpdateHandler:
    return build_handler(MessageType.STICKER, action, **options)


def location_handler(action: HandlerAction, **options: Any) -> UpdateHandler:
    return build_handler(MessageType.LOCATION, action, **options)


def unknown_handler(action: HandlerAction, **options: Any) -> UpdateHandler:
    return build_handler(MessageType.UNKNOWN, action, **options)


def unsupported_handler(action: HandlerAction, **options: Any) -> UpdateHandler:
    return build_handler(MessageType.UNSUPPORTED, action, **options)
