"""WhatsApp client — configuration, handler registration and send helpers."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import httpx

from wabot import transport
from wabot.context import ContextStore
from wabot.dispatcher import DEFAULT_FALLBACK_PATTERN, Dispatcher, ErrorHook
from wabot.handlers import (
    HandlerAction,
    UpdateHandler,
    audio_handler,
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
from wabot.helpers import format_phone_number
from wabot.markup import ReplyMarkup
from wabot.models import ClientConfig, HeaderType, MediaType, QueueStatus
from wabot.update import Update


GRAPH_API_BASE = "https://graph.facebook.com"


class WhatsApp:
    """Client for one WhatsApp Business phone number.

    Example:
        client = WhatsApp(number_id="1234567890", token="...")

        async def greet(update, context):
            await update.reply_message("Hello!")

        client.on_message(greet, regex=r"(?i)^hi$")
        await client.process_update(webhook_payload)
    """

    def __init__(
        self,
        number_id: str,
        token: str,
        mark_as_read: bool = True,
        version: int = 21,
        context_store: ContextStore | None = None,
        on_error: ErrorHook | None = None,
    ) -> None:
        self.config = ClientConfig(
            number_id=number_id, token=token, mark_as_read=mark_as_read, version=version,
        )
        self.id = self.config.number_id
        self.token = self.config.token
        self.set_version(self.config.version)
        self.dispatcher = Dispatcher(
            self,
            mark_as_read=self.config.mark_as_read,
            context_store=context_store,
            on_error=on_error,
        )

    @classmethod
    def from_env(cls, **kwargs: Any) -> WhatsApp:
        """Create a client from WHATSAPP_* environment variables."""
        mark_as_read = os.environ.get("WHATSAPP_MARK_AS_READ", "true")
        return cls(
            number_id=os.environ["WHATSAPP_NUMBER_ID"],
            token=os.environ["WHATSAPP_TOKEN"],
            mark_as_read=mark_as_read.strip().lower() not in ("0", "false", "no"),
            version=int(os.environ.get("WHATSAPP_API_VERSION", "21")),
            **kwargs,
        )

    def set_version(self, version: int) -> None:
        self.version_number = version
        self.base_url = f"{GRAPH_API_BASE}/v{version}.0"
        self.msg_url = f"{self.base_url}/{self.id}/messages"
        self.media_url = f"{self.base_url}/{self.id}/media"

    @property
    def context_store(self) -> ContextStore:
        return self.dispatcher.context_store

    # --- Dispatch ---

    async def process_update(self, payload: dict[str, Any]) -> None:
        await self.dispatcher.process_update(payload)

    def get_queue_status(self) -> QueueStatus:
        return self.dispatcher.get_queue_status()

    def set_next_step(
        self,
        update: Update,
        handler: UpdateHandler,
        fallback: HandlerAction | None = None,
        fallback_pattern: str | re.Pattern[str] = DEFAULT_FALLBACK_PATTERN,
    ) -> None:
        self.dispatcher.set_next_step(update, handler, fallback, fallback_pattern)

    def clear_next_step(self, phone_number: str) -> None:
        self.dispatcher.clear_next_step(phone_number)

    # --- Sending ---

    async def mark_as_read(self, message: dict[str, Any]) -> httpx.Response:
        return await transport.mark_as_read(self.msg_url, self.token, message["id"])

    async def send_message(
        self,
        phone_number: str,
        text: str,
        *,
        reply_markup: ReplyMarkup | None = None,
        msg_id: str | None = None,
        header: str | None = None,
        header_type: HeaderType | str = HeaderType.TEXT,
        footer: str | None = None,
        web_page_preview: bool = True,
        tag_message: bool = True,
    ) -> httpx.Response:
        """Send text, or an interactive message when reply_markup is given."""
        phone = format_phone_number(phone_number)
        if reply_markup is not None:
            return await transport.send_interactive_message(
                self.msg_url,
                self.token,
                phone,
                text,
                reply_markup,
                msg_id=msg_id,
                header=header,
                header_type=header_type,
                footer=footer,
            )
        return await transport.send_text_message(
            self.msg_url,
            self.token,
            phone,
            text,
            msg_id=msg_id,
            web_page_preview=web_page_preview,
            tag_message=tag_message,
        )

    async def send_template_message(
        self,
        phone_number: str,
        template_name: str,
        components: list[dict[str, Any]] | None = None,
        language_code: str = "en_US",
    ) -> httpx.Response:
        return await transport.send_template_message(
            self.msg_url,
            self.token,
            format_phone_number(phone_number),
            template_name,
            components,
            language_code,
        )

    async def send_media_message(
        self,
        phone_number: str,
        media: str,
        *,
        caption: str | None = None,
        media_type: MediaType | str = MediaType.IMAGE,
    ) -> httpx.Response:
        """Send media by link or uploaded media id."""
        return await transport.send_media_message(
            self.msg_url,
            self.token,
            format_phone_number(phone_number),
            media,
            media_type,
            caption,
        )

    async def send_image(
        self, phone_number: str, image: str, caption: str | None = None,
    ) -> httpx.Response:
        return await self.send_media_message(
            phone_number, image, caption=caption, media_type=MediaType.IMAGE,
        )

    async def send_video(
        self, phone_number: str, video: str, caption: str | None = None,
    ) -> httpx.Response:
        return await self.send_media_message(
            phone_number, video, caption=caption, media_type=MediaType.VIDEO,
        )

    async def send_audio(self, phone_number: str, audio: str) -> httpx.Response:
        return await self.send_media_message(phone_number, audio, media_type=MediaType.AUDIO)

    async def send_document(
        self, phone_number: str, document: str, caption: str | None = None,
    ) -> httpx.Response:
        return await self.send_media_message(
            phone_number, document, caption=caption, media_type=MediaType.DOCUMENT,
        )

    async def send_sticker(self, phone_number: str, sticker: str) -> httpx.Response:
        return await self.send_media_message(
            phone_number, sticker, media_type=MediaType.STICKER,
        )

    async def send_location(
        self,
        phone_number: str,
        latitude: float,
        longitude: float,
        name: str | None = None,
        address: str | None = None,
    ) -> httpx.Response:
        return await transport.send_location_message(
            self.msg_url,
            self.token,
            format_phone_number(phone_number),
            latitude,
            longitude,
            name,
            address,
        )

    # --- Media ---

    async def upload_media(self, file_path: str | Path, mime_type: str) -> httpx.Response:
        return await transport.upload_media(self.media_url, self.token, file_path, mime_type)

    async def get_media_url(self, media_id: str) -> dict[str, Any]:
        return await transport.get_media_url(self.base_url, media_id, self.token)

    async def download_media(
        self, media_id: str, directory: str | Path = transport.DEFAULT_MEDIA_DIR,
    ) -> Path:
        return await transport.download_media(self.base_url, media_id, self.token, directory)

    async def download_media_data(self, media_id: str) -> bytes:
        return await transport.download_media_data(self.base_url, media_id, self.token)

    # --- Handler registration ---

    def _register(self, handler: UpdateHandler) -> UpdateHandler:
        self.dispatcher.register_handler(handler)
        return handler

    def on_message(self, action: HandlerAction, **options: Any) -> UpdateHandler:
        """Register a text message handler.

        Options: regex, filter, context (default True), persistent
        (default False).
        """
        return self._register(text_handler(action, **options))

    def on_interactive_message(
        self,
        action: HandlerAction,
        *,
        handle_button: bool = True,
        handle_list: bool = True,
        **options: Any,
    ) -> UpdateHandler:
        return self._register(
            interactive_handler(
                action, handle_button=handle_button, handle_list=handle_list, **options,
            ),
        )

    def on_image_message(self, action: HandlerAction, **options: Any) -> UpdateHandler:
        return self._register(image_handler(action, **options))

    def on_audio_message(self, action: HandlerAction, **options: Any) -> UpdateHandler:
        return self._register(audio_handler(action, **options))

    def on_video_message(self, action: HandlerAction, **options: Any) -> UpdateHandler:
        return self._register(video_handler(action, **options))

    def on_document_message(self, action: HandlerAction, **options: Any) -> UpdateHandler:
        return self._register(document_handler(action, **options))

    def on_sticker_message(self, action: HandlerAction, **options: Any) -> UpdateHandler:
        return self._register(sticker_handler(action, **options))

    def on_location_message(self, action: HandlerAction, **options: Any) -> UpdateHandler:
        return self._register(location_handler(action, **options))

    def on_unknown_message(self, action: HandlerAction, **options: Any) -> UpdateHandler:
        return self._register(unknown_handler(action, **options))

    def on_unsupported_message(self, action: HandlerAction, **options: Any) -> UpdateHandler:
        return self._register(unsupported_handler(action, **options))
