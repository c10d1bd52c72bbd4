"""Shared test fixtures for wabot."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from wabot.client import WhatsApp
from wabot.context import ContextStore

NUMBER_ID = "123456"
SENDER = "15551234567"


@pytest.fixture
def client() -> WhatsApp:
    """Client with read receipts off, so no HTTP is attempted by default."""
    return WhatsApp(number_id=NUMBER_ID, token="test_token", mark_as_read=False)


@pytest.fixture
def context_store() -> ContextStore:
    return ContextStore()


@pytest.fixture
def mock_http_client():
    """Build an AsyncMock usable in place of httpx.AsyncClient(...)."""

    def _create(*responses: Any) -> AsyncMock:
        mock_client = AsyncMock()
        if len(responses) == 1:
            mock_client.post.return_value = responses[0]
            mock_client.get.return_value = responses[0]
        elif responses:
            mock_client.get.side_effect = list(responses)
        mock_client.__aenter__ = AsyncMock(return_value=mock_client)
        mock_client.__aexit__ = AsyncMock(return_value=False)
        return mock_client

    return _create


def ok_response(json_body: dict[str, Any] | None = None, content: bytes = b"") -> MagicMock:
    resp = MagicMock(status_code=200, content=content)
    resp.json.return_value = json_body or {}
    return resp


@pytest.fixture
def make_response():
    return ok_response


# --- Factory functions for webhook payloads ---


def make_message(message_type: str = "text", **fields: Any) -> dict[str, Any]:
    """Factory for a raw message; text messages get a body by default."""
    message: dict[str, Any] = {
        "from": SENDER,
        "id": "wamid.test",
        "timestamp": "1700000000",
        "type": message_type,
    }
    if message_type == "text" and "text" not in fields:
        fields["text"] = {"body": "hello"}
    message.update(fields)
    return message


def make_payload(
    message: dict[str, Any] | None = None,
    *,
    phone_number_id: str = NUMBER_ID,
    sender: str = SENDER,
    name: str = "Test User",
) -> dict[str, Any]:
    """Factory for a webhook envelope carrying one message."""
    value: dict[str, Any] = {
        "messaging_product": "whatsapp",
        "metadata": {
            "display_phone_number": "15550000000",
            "phone_number_id": phone_number_id,
        },
        "contacts": [{"profile": {"name": name}, "wa_id": sender}],
        "messages": [message if message is not None else make_message()],
    }
    return {
        "object": "whatsapp_business_account",
        "entry": [
            {
                "id": "BUSINESS_ID",
                "changes": [{"value": value, "field": "messages"}],
            }
        ],
    }


def text_payload(text: str, sender: str = SENDER, **kwargs: Any) -> dict[str, Any]:
    message = make_message("text", text={"body": text}, **{"from": sender})
    return make_payload(message, sender=sender, **kwargs)


@pytest.fixture
def payloads():
    """Expose the payload factories to tests as a namespace."""

    class _Payloads:
        message = staticmethod(make_message)
        payload = staticmethod(make_payload)
        text = staticmethod(text_payload)

    return _Payloads
