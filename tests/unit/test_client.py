"""Tests for the WhatsApp client facade."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pydantic
import pytest

from wabot.client import WhatsApp
from wabot.context import ContextStore
from wabot.handlers import UpdateHandler
from wabot.markup import InlineKeyboard
from wabot.models import MediaType, MessageType


class TestConfiguration:
    def test_urls(self, client: WhatsApp) -> None:
        assert client.base_url == "https://graph.facebook.com/v21.0"
        assert client.msg_url == "https://graph.facebook.com/v21.0/123456/messages"
        assert client.media_url == "https://graph.facebook.com/v21.0/123456/media"

    def test_set_version(self, client: WhatsApp) -> None:
        client.set_version(19)
        assert client.version_number == 19
        assert client.msg_url == "https://graph.facebook.com/v19.0/123456/messages"

    @pytest.mark.parametrize("kwargs", [{"number_id": ""}, {"token": ""}, {"version": 0}])
    def test_invalid_config_rejected(self, kwargs: dict) -> None:
        options = {"number_id": "1", "token": "t", **kwargs}
        with pytest.raises(pydantic.ValidationError):
            WhatsApp(**options)

    def test_shared_context_store(self) -> None:
        store = ContextStore()
        client = WhatsApp(number_id="1", token="t", context_store=store)
        assert client.context_store is store

    def test_mark_as_read_flag_reaches_dispatcher(self, client: WhatsApp) -> None:
        assert client.dispatcher.mark_as_read is False

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("WHATSAPP_NUMBER_ID", "999")
        monkeypatch.setenv("WHATSAPP_TOKEN", "env-token")
        monkeypatch.setenv("WHATSAPP_MARK_AS_READ", "false")
        monkeypatch.setenv("WHATSAPP_API_VERSION", "20")
        client = WhatsApp.from_env()
        assert client.id == "999"
        assert client.token == "env-token"
        assert client.dispatcher.mark_as_read is False
        assert client.base_url.endswith("/v20.0")

    def test_from_env_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("WHATSAPP_NUMBER_ID", "999")
        monkeypatch.setenv("WHATSAPP_TOKEN", "env-token")
        monkeypatch.delenv("WHATSAPP_MARK_AS_READ", raising=False)
        monkeypatch.delenv("WHATSAPP_API_VERSION", raising=False)
        client = WhatsApp.from_env()
        assert client.dispatcher.mark_as_read is True
        assert client.version_number == 21


class TestSending:
    @pytest.mark.asyncio
    async def test_send_message_text(self, client: WhatsApp) -> None:
        with patch("wabot.transport.send_text_message", new_callable=AsyncMock) as send:
            await client.send_message("+1 555 123 4567", "hi", msg_id="wamid.1")
        send.assert_awaited_once_with(
            client.msg_url, "test_token", "15551234567", "hi",
            msg_id="wamid.1", web_page_preview=True, tag_message=True,
        )

    @pytest.mark.asyncio
    async def test_send_message_with_markup_is_interactive(self, client: WhatsApp) -> None:
        markup = InlineKeyboard(["Yes", "No"])
        with patch("wabot.transport.send_interactive_message", new_callable=AsyncMock) as send, \
                patch("wabot.transport.send_text_message", new_callable=AsyncMock) as text:
            await client.send_message("15551234567", "Pick", reply_markup=markup, footer="f")
        text.assert_not_called()
        args = send.await_args
        assert args.args[3:] == ("Pick", markup)
        assert args.kwargs["footer"] == "f"

    @pytest.mark.asyncio
    async def test_send_template(self, client: WhatsApp) -> None:
        with patch("wabot.transport.send_template_message", new_callable=AsyncMock) as send:
            await client.send_template_message("15551234567", "hello_world")
        send.assert_awaited_once_with(
            client.msg_url, "test_token", "15551234567", "hello_world", None, "en_US",
        )

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("method", "media_type"),
        [
            ("send_image", MediaType.IMAGE),
            ("send_video", MediaType.VIDEO),
            ("send_document", MediaType.DOCUMENT),
        ],
    )
    async def test_captioned_media_shortcuts(
        self, client: WhatsApp, method: str, media_type: MediaType,
    ) -> None:
        with patch("wabot.transport.send_media_message", new_callable=AsyncMock) as send:
            await getattr(client, method)("15551234567", "m-1", "cap")
        send.assert_awaited_once_with(
            client.msg_url, "test_token", "15551234567", "m-1", media_type, "cap",
        )

    @pytest.mark.asyncio
    async def test_sticker_and_audio_have_no_caption(self, client: WhatsApp) -> None:
        with patch("wabot.transport.send_media_message", new_callable=AsyncMock) as send:
            await client.send_sticker("15551234567", "s-1")
            await client.send_audio("15551234567", "a-1")
        assert [c.args[4:] for c in send.await_args_list] == [
            (MediaType.STICKER, None),
            (MediaType.AUDIO, None),
        ]

    @pytest.mark.asyncio
    async def test_mark_as_read_uses_message_id(self, client: WhatsApp) -> None:
        with patch("wabot.transport.mark_as_read", new_callable=AsyncMock) as mark:
            await client.mark_as_read({"id": "wamid.9"})
        mark.assert_awaited_once_with(client.msg_url, "test_token", "wamid.9")

    @pytest.mark.asyncio
    async def test_download_media_uses_base_url(self, client: WhatsApp, tmp_path) -> None:  # noqa: ANN001
        with patch("wabot.transport.download_media", new_callable=AsyncMock) as download:
            await client.download_media("m-1", tmp_path)
        download.assert_awaited_once_with(client.base_url, "m-1", "test_token", tmp_path)


class TestRegistration:
    def test_on_message_registers_text_handler(self, client: WhatsApp) -> None:
        handler = client.on_message(lambda u, c: None, regex="hi")
        assert isinstance(handler, UpdateHandler)
        assert handler.message_type is MessageType.TEXT
        assert client.dispatcher.get_handlers() == [handler]

    @pytest.mark.parametrize(
        ("method", "message_type"),
        [
            ("on_interactive_message", MessageType.INTERACTIVE),
            ("on_image_message", MessageType.IMAGE),
            ("on_audio_message", MessageType.AUDIO),
            ("on_video_message", MessageType.VIDEO),
            ("on_document_message", MessageType.DOCUMENT),
            ("on_sticker_message", MessageType.STICKER),
            ("on_location_message", MessageType.LOCATION),
            ("on_unknown_message", MessageType.UNKNOWN),
            ("on_unsupported_message", MessageType.UNSUPPORTED),
        ],
    )
    def test_registration_methods(
        self, client: WhatsApp, method: str, message_type: MessageType,
    ) -> None:
        handler = getattr(client, method)(lambda u, c: None, persistent=True)
        assert handler.message_type is message_type
        assert handler.persistent is True

    def test_registration_order_is_kept(self, client: WhatsApp) -> None:
        first = client.on_message(lambda u, c: None)
        second = client.on_image_message(lambda u, c: None)
        assert client.dispatcher.get_handlers() == [first, second]
