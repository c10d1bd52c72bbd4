"""Tests for shared data models."""

from __future__ import annotations

import dataclasses

import pydantic
import pytest

from wabot.models import (
    ButtonReply,
    ClientConfig,
    ExtractedData,
    MessageType,
    QueueStatus,
    ReplyMarkupType,
)


def test_message_type_values_match_api_tags() -> None:
    assert MessageType("interactive") is MessageType.INTERACTIVE
    assert MessageType.LOCATION == "location"


def test_reply_markup_type_values() -> None:
    assert [t.value for t in ReplyMarkupType] == ["button", "list", "location_request_message"]


def test_extracted_data_defaults() -> None:
    data = ExtractedData()
    assert data.message_text == ""
    assert data.button_reply is None
    assert data.media_voice is None


def test_extracted_data_is_frozen() -> None:
    data = ExtractedData(message_text="hi")
    with pytest.raises(pydantic.ValidationError):
        data.message_text = "changed"  # type: ignore[misc]


def test_button_reply_requires_id_and_title() -> None:
    with pytest.raises(pydantic.ValidationError):
        ButtonReply.model_validate({"id": "x"})


def test_client_config_defaults() -> None:
    config = ClientConfig(number_id="1", token="t")
    assert config.mark_as_read is True
    assert config.version == 21


def test_queue_status_is_immutable() -> None:
    status = QueueStatus(size=1, is_processing=True)
    with pytest.raises(dataclasses.FrozenInstanceError):
        status.size = 2  # type: ignore[misc]
