"""WhatsApp Cloud API requests: send, mark-as-read and media calls.

Every function issues exactly one HTTP request with a fixed timeout.
There are no retries: non-2xx responses raise httpx.HTTPStatusError and
network failures raise httpx.RequestError, both to the caller.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import httpx

from wabot.helpers import get_extension_from_mime_type, is_link
from wabot.markup import ReplyMarkup
from wabot.models import HeaderType, MediaType

logger = logging.getLogger(__name__)

_TIMEOUT_SECONDS = 30.0
DEFAULT_MEDIA_DIR = "tmp/media"


def _headers(token: str) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
    }


def _message_frame(phone_number: str, message_type: str) -> dict[str, Any]:
    return {
        "messaging_product": "whatsapp",
        "to": phone_number,
        "recipient_type": "individual",
        "type": message_type,
    }


async def _post(url: str, token: str, payload: dict[str, Any]) -> httpx.Response:
    async with httpx.AsyncClient(verify=True) as client:
        resp = await client.post(
            url, json=payload, headers=_headers(token), timeout=_TIMEOUT_SECONDS,
        )
    resp.raise_for_status()
    return resp


async def mark_as_read(url: str, token: str, message_id: str) -> httpx.Response:
    payload = {
        "messaging_product": "whatsapp",
        "status": "read",
        "message_id": message_id,
    }
    return await _post(url, token, payload)


async def send_text_message(
    url: str,
    token: str,
    phone_number: str,
    text: str,
    *,
    msg_id: str | None = None,
    web_page_preview: bool = True,
    tag_message: bool = True,
) -> httpx.Response:
    """Send a plain text message.

    When msg_id is given and tag_message is set, the message is sent as a
    reply quoting msg_id.
    """
    payload = _message_frame(phone_number, "text")
    payload["text"] = {"body": text, "preview_url": web_page_preview}
    if msg_id and tag_message:
        payload["context"] = {"message_id": msg_id}
    return await _post(url, token, payload)


async def send_interactive_message(
    url: str,
    token: str,
    phone_number: str,
    text: str,
    reply_markup: ReplyMarkup,
    *,
    msg_id: str | None = None,
    header: str | None = None,
    header_type: HeaderType | str = HeaderType.TEXT,
    footer: str | None = None,
) -> httpx.Response:
    """Send a message carrying buttons, a list or a location request.

    A media header (image/video/document) is referenced by link when
    header looks like a URL, otherwise by uploaded media id.
    """
    header_type = HeaderType(header_type)
    interactive: dict[str, Any] = {
        "type": reply_markup.type.value,
        "body": {"text": text},
        "action": reply_markup.markup,
    }
    if header:
        if header_type is HeaderType.TEXT:
            interactive["header"] = {"type": "text", "text": header}
        else:
            media_ref = {"link": header} if is_link(header) else {"id": header}
            interactive["header"] = {
                "type": header_type.value,
                header_type.value: media_ref,
            }
    if footer:
        interactive["footer"] = {"text": footer}

    payload = _message_frame(phone_number, "interactive")
    payload["interactive"] = interactive
    if msg_id:
        payload["context"] = {"message_id": msg_id}
    return await _post(url, token, payload)


async def send_template_message(
    url: str,
    token: str,
    phone_number: str,
    template_name: str,
    components: list[dict[str, Any]] | None = None,
    language_code: str = "en_US",
) -> httpx.Response:
    payload = _message_frame(phone_number, "template")
    payload["template"] = {
        "name": template_name,
        "language": {"code": language_code},
        "components": components or [],
    }
    return await _post(url, token, payload)


async def send_media_message(
    url: str,
    token: str,
    phone_number: str,
    media: str,
    media_type: MediaType | str = MediaType.IMAGE,
    caption: str | None = None,
) -> httpx.Response:
    """Send media by public link or by previously uploaded media id."""
    kind = MediaType(media_type).value
    media_object: dict[str, Any] = {"link": media} if is_link(media) else {"id": media}
    if caption is not None:
        media_object["caption"] = caption
    payload = _message_frame(phone_number, kind)
    payload[kind] = media_object
    return await _post(url, token, payload)


async def send_location_message(
    url: str,
    token: str,
    phone_number: str,
    latitude: float,
    longitude: float,
    name: str | None = None,
    address: str | None = None,
) -> httpx.Response:
    location: dict[str, Any] = {
        "latitude": str(latitude),
        "longitude": str(longitude),
    }
    if name:
        location["name"] = name
    if address:
        location["address"] = address
    payload = _message_frame(phone_number, "location")
    payload["location"] = location
    return await _post(url, token, payload)


async def upload_media(
    url: str, token: str, file_path: str | Path, mime_type: str,
) -> httpx.Response:
    """Upload a local file to the media endpoint (multipart form)."""
    path = Path(file_path)
    # httpx sets the multipart boundary header itself
    headers = {"Authorization": f"Bearer {token}"}
    data = {"messaging_product": "whatsapp", "type": mime_type}
    with path.open("rb") as fh:
        files = {"file": (path.name, fh, mime_type)}
        async with httpx.AsyncClient(verify=True) as client:
            resp = await client.post(
                url, data=data, files=files, headers=headers, timeout=_TIMEOUT_SECONDS,
            )
    resp.raise_for_status()
    return resp


async def get_media_url(base_url: str, media_id: str, token: str) -> dict[str, Any]:
    """Fetch media metadata (url, mime_type, sha256, file_size) by id."""
    async with httpx.AsyncClient(verify=True) as client:
        resp = await client.get(
            f"{base_url}/{media_id}", headers=_headers(token), timeout=_TIMEOUT_SECONDS,
        )
    resp.raise_for_status()
    return resp.json()


async def _fetch_media(url: str, token: str) -> bytes:
    async with httpx.AsyncClient(verify=True) as client:
        resp = await client.get(
            url,
            headers={"Authorization": f"Bearer {token}"},
            timeout=_TIMEOUT_SECONDS,
        )
    resp.raise_for_status()
    return resp.content


async def download_media(
    base_url: str,
    media_id: str,
    token: str,
    directory: str | Path = DEFAULT_MEDIA_DIR,
) -> Path:
    """Download media into directory as <media_id><ext> and return the path."""
    if not media_id:
        raise ValueError("Media ID is required")

    metadata = await get_media_url(base_url, media_id, token)
    extension = get_extension_from_mime_type(metadata.get("mime_type", ""))
    target = Path(directory) / f"{media_id}{extension}"
    target.parent.mkdir(parents=True, exist_ok=True)

    content = await _fetch_media(metadata["url"], token)
    target.write_bytes(content)
    logger.debug("Downloaded media %s to %s (%d bytes)", media_id, target, len(content))
    return target


async def download_media_data(base_url: str, media_id: str, token: str) -> bytes:
    """Download media into memory."""
    if not media_id:
        raise ValueError("Media ID is required")

    metadata = await get_media_url(base_url, media_id, token)
    return await _fetch_media(metadata["url"], token)
