"""
Media payload helpers - decoding uploaded images and sniffing content types.
"""

import base64
import binascii
import re
from typing import Optional, Tuple

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(;[\w-]+=[^;,]+)*)(?P<b64>;base64)?,(?P<data>.*)$", re.DOTALL)

_SIGNATURES = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF8", "image/gif"),
)


def sniff_content_type(data: bytes, default: str = "application/octet-stream") -> str:
    """Best-effort content type from magic bytes."""
    for signature, mime in _SIGNATURES:
        if data.startswith(signature):
            return mime
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    if data[4:8] == b"ftyp":
        return "video/mp4"
    return default


def decode_data_url(value: str, default_mime: Optional[str] = None) -> Tuple[bytes, str]:
    """
    Decode a base64 data URL (``data:image/png;base64,...``) or bare base64 string.

    Returns:
        Tuple of (raw bytes, mime type)

    Raises:
        ValueError: If the payload is not valid base64
    """
    value = (value or "").strip()
    if not value:
        raise ValueError("Empty image payload")

    mime = None
    payload = value
    match = _DATA_URL_RE.match(value)
    if match:
        if not match.group("b64"):
            raise ValueError("Only base64 data URLs are supported")
        mime = match.group("mime")
        payload = match.group("data")

    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"Invalid base64 image payload: {exc}") from exc

    if not data:
        raise ValueError("Empty image payload")

    return data, mime or default_mime or sniff_content_type(data)
