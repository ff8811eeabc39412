"""MIME type detection: extension lookup first, magic-byte sniffing second."""

import mimetypes
from typing import Optional

from common.constants import DEFAULT_MIME_TYPE

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

# (prefix, mime type) checked in order against the first bytes of a payload.
CONTENT_SIGNATURES = (
    (b"\xff\xd8\xff", "image/jpeg"),
    (PNG_SIGNATURE, "image/png"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"%PDF", "application/pdf"),
    (b"PK\x03\x04", "application/zip"),
)


def detect_mime_from_extension(filename: str) -> Optional[str]:
    """
    Guess a MIME type from the file name alone.

    Returns:
        MIME type string, or None if the extension is unknown
    """
    mime_type, _ = mimetypes.guess_type(filename, strict=False)
    return mime_type


def detect_mime_from_content(data: bytes) -> str:
    """
    Sniff a MIME type from leading magic bytes.

    Args:
        data: The first bytes of the payload (one chunk is enough)

    Returns:
        Matching MIME type, or application/octet-stream
    """
    if not data:
        return DEFAULT_MIME_TYPE

    for signature, mime_type in CONTENT_SIGNATURES:
        if data.startswith(signature):
            return mime_type

    return DEFAULT_MIME_TYPE


def detect_mime_type(filename: str, head: bytes) -> str:
    return detect_mime_from_extension(filename) or detect_mime_from_content(head)
