"""Validation of generateContent payloads before any credit is touched."""

import base64
import binascii
import copy
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from retrosnap_gateway.errors import InvalidArgument

MIME_TYPE_PATTERN = re.compile(r"^image/[A-Za-z0-9.+-]+$")
DATA_URL_PATTERN = re.compile(r"^data:(?P<mime>[^;,]+);base64,(?P<data>.*)$", re.DOTALL)


@dataclass(frozen=True)
class ImagePart:
    mime_type: str
    data: str

    @property
    def size_bytes(self) -> int:
        return len(self.data) * 3 // 4


def split_data_url(value: str) -> Tuple[str, str]:
    """Split ``data:<mime>;base64,<data>`` into ``(mime, data)``."""
    match = DATA_URL_PATTERN.match(value.strip())
    if not match:
        raise InvalidArgument("Image data URL is malformed.")
    return match.group("mime"), match.group("data")


def _iter_parts(contents: Any) -> List[Dict]:
    if isinstance(contents, dict):
        contents = [contents]
    if not isinstance(contents, list):
        raise InvalidArgument("Request body must contain 'contents'.")

    parts: List[Dict] = []
    for content in contents:
        if not isinstance(content, dict) or not isinstance(content.get("parts"), list):
            raise InvalidArgument("Each content entry must contain a 'parts' list.")
        parts.extend(p for p in content["parts"] if isinstance(p, dict))
    return parts


def _validate_inline_data(inline: Any) -> ImagePart:
    if not isinstance(inline, dict):
        raise InvalidArgument("Image part is malformed.")

    mime_type = inline.get("mimeType") or inline.get("mime_type")
    data = inline.get("data")
    if not isinstance(data, str) or not data:
        raise InvalidArgument("Image part is missing base64 data.")

    if data.startswith("data:"):
        url_mime, data = split_data_url(data)
        mime_type = mime_type or url_mime

    if not isinstance(mime_type, str) or not MIME_TYPE_PATTERN.match(mime_type):
        raise InvalidArgument("Image part has an unrecognized MIME type.")

    try:
        base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        raise InvalidArgument("Image data is not valid base64.")

    return ImagePart(mime_type=mime_type, data=data)


def validate_generation_payload(payload: Any) -> Tuple[Dict[str, Any], List[ImagePart]]:
    """
    Check that a generateContent body carries at least one usable image.

    Returns a normalized copy of the payload (data URLs split into
    ``mimeType``/``data``) and the image parts found.

    Raises:
        InvalidArgument: the body is not an object, has no image part, or an
            image part does not decompose into (mimeType, base64 data).
    """
    if not isinstance(payload, dict):
        raise InvalidArgument("Request body must be a JSON object.")

    normalized = copy.deepcopy(payload)
    images: List[ImagePart] = []

    for part in _iter_parts(normalized.get("contents")):
        key = "inlineData" if "inlineData" in part else "inline_data" if "inline_data" in part else None
        if key is None:
            continue
        image = _validate_inline_data(part[key])
        part[key] = {"mimeType": image.mime_type, "data": image.data}
        images.append(image)

    if not images:
        raise InvalidArgument("Request must include an image part.")

    return normalized, images
