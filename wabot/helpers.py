"""Validation helpers for webhook payloads, phone numbers and media types."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence

_NON_DIGIT = re.compile(r"\D")
_LINK = re.compile(r"^((https?://)|(www\.))")

# File extension to MIME type mapping for media types WhatsApp accepts
KNOWN_MIME_TYPES: dict[str, str] = {
    # Images
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    # Video
    ".mp4": "video/mp4",
    ".3gp": "video/3gpp",
    # Audio
    ".aac": "audio/aac",
    ".mp3": "audio/mpeg",
    ".mpeg": "audio/mpeg",
    ".amr": "audio/amr",
    ".ogg": "audio/ogg",
    ".opus": "audio/ogg",
    # Documents
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".ppt": "application/vnd.ms-powerpoint",
    ".pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    ".xls": "application/vnd.ms-excel",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".txt": "text/plain",
}

# Several extensions share a MIME type; these win on reverse lookup
_PREFERRED_EXTENSIONS: dict[str, str] = {
    "image/jpeg": ".jpg",
    "audio/mpeg": ".mp3",
    "audio/ogg": ".ogg",
}

DEFAULT_EXTENSION = ".bin"
DEFAULT_MIME_TYPE = "application/octet-stream"


def keys_exist(element: object, *keys: str | int) -> bool:
    """Return True if the nested path of keys exists in element.

    String keys index mappings, integer keys index sequences:

        >>> keys_exist({"entry": [{"id": 1}]}, "entry", 0, "id")
        True
    """
    if not keys:
        raise ValueError("keys_exist() expects at least one key argument")
    if not isinstance(element, (Mapping, Sequence)) or isinstance(element, str):
        return False

    current: object = element
    for key in keys:
        if isinstance(current, Mapping):
            if key not in current:
                return False
            current = current[key]
        elif isinstance(current, Sequence) and not isinstance(current, str):
            if not isinstance(key, int) or not 0 <= key < len(current):
                return False
            current = current[key]
        else:
            return False
    return True


def is_valid_phone_number(phone_number: str) -> bool:
    """A phone number is valid when it carries 10 to 15 digits."""
    digits = _NON_DIGIT.sub("", phone_number)
    return 10 <= len(digits) <= 15


def format_phone_number(phone_number: str) -> str:
    """Strip everything but digits (WhatsApp expects no '+' or spaces)."""
    return _NON_DIGIT.sub("", phone_number)


def is_link(value: str) -> bool:
    return bool(_LINK.match(value))


def get_extension_from_mime_type(mime_type: str) -> str:
    if mime_type in _PREFERRED_EXTENSIONS:
        return _PREFERRED_EXTENSIONS[mime_type]
    for extension, mime in KNOWN_MIME_TYPES.items():
        if mime == mime_type:
            return extension
    return DEFAULT_EXTENSION


def get_mime_type_from_extension(extension: str) -> str:
    """Look up a MIME type by extension, with or without the leading dot."""
    ext = extension.lower()
    if not ext.startswith("."):
        ext = f".{ext}"
    return KNOWN_MIME_TYPES.get(ext, DEFAULT_MIME_TYPE)
