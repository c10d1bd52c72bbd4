"""A single incoming message and the replies that go back to its sender."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx

from wabot.models import ButtonReply, ExtractedData, ListReply, MediaType

if TYPE_CHECKING:
    from wabot.client import WhatsApp
    from wabot.markup import ReplyMarkup


class Update:
    """View over one webhook value plus reply helpers.

    The sender's phone number (contacts[0].wa_id) is both the reply
    destination and the conversation key. Fields extracted by the
    matching handler are merged on by the dispatcher before the handler
    runs.
    """

    message_text: str | None
    button_reply: ButtonReply | None
    list_reply: ListReply | None
    media_mime_type: str | None
    media_file_id: str | None
    media_hash: str | None
    media_voice: bool | None
    loc_address: str | None
    loc_name: str | None
    loc_latitude: float | None
    loc_longitude: float | None

    def __init__(self, bot: WhatsApp, value: dict[str, Any]) -> None:
        self.bot = bot
        self.value = value
        messages = value.get("messages") or [{}]
        contacts = value.get("contacts") or [{"profile": {"name": ""}, "wa_id": ""}]
        self.message: dict[str, Any] = messages[0]
        self.user: dict[str, Any] = contacts[0]
        profile = self.user.get("profile")
        self.user_display_name: str = profile.get("name", "") if isinstance(profile, dict) else ""
        self.user_phone_number: str = self.user.get("wa_id", "")
        self.message_id: str = self.message.get("id", "")
        for field in ExtractedData.model_fields:
            setattr(self, field, None)

    def apply(self, data: ExtractedData) -> None:
        """Copy extracted fields onto this update."""
        for field in ExtractedData.model_fields:
            setattr(self, field, getattr(data, field))

    async def reply_message(
        self,
        text: str,
        *,
        reply_markup: ReplyMarkup | None = None,
        msg_id: str | None = None,
        **options: Any,
    ) -> httpx.Response:
        """Reply in the same chat, quoting this message unless msg_id is given."""
        return await self.bot.send_message(
            self.user_phone_number,
            text,
            reply_markup=reply_markup,
            msg_id=msg_id or self.message_id,
            **options,
        )

    async def reply_media(
        self,
        media: str,
        *,
        caption: str | None = None,
        media_type: MediaType | str = MediaType.IMAGE,
    ) -> httpx.Response:
        return await self.bot.send_media_message(
            self.user_phone_number, media, caption=caption, media_type=media_type,
        )

    async def reply_template(
        self,
        template_name: str,
        components: list[dict[str, Any]] | None = None,
        language_code: str = "en_US",
    ) -> httpx.Response:
        return await self.bot.send_template_message(
            self.user_phone_number, template_name, components, language_code,
        )

    async def reply_location(
        self,
        latitude: float,
        longitude: float,
        name: str | None = None,
        address: str | None = None,
    ) -> httpx.Response:
        return await self.bot.send_location(
            self.user_phone_number, latitude, longitude, name, address,
        )

    def __repr__(self) -> str:
        return (
            f"Update(user_phone_number={self.user_phone_number!r}, "
            f"message_id={self.message_id!r}, type={self.message.get('type')!r})"
        )
