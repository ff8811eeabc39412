"""Tests for MIME type detection."""

import pytest

from blobstore.mime_detection import (
    PNG_SIGNATURE,
    detect_mime_from_content,
    detect_mime_from_extension,
    detect_mime_type,
)


class TestDetectFromExtension:
    """Test extension-based lookup."""

    @pytest.mark.parametrize("filename,expected", [
        ("photo.jpg", "image/jpeg"),
        ("photo.PNG", "image/png"),
        ("doc.pdf", "application/pdf"),
        ("notes.txt", "text/plain"),
    ])
    def test_known_extensions(self, filename, expected):
        assert detect_mime_from_extension(filename) == expected

    def test_unknown_extension(self):
        assert detect_mime_from_extension("data.qqqzz") is None

    def test_no_extension(self):
        assert detect_mime_from_extension("README") is None


class TestDetectFromContent:
    """Test magic-byte sniffing."""

    @pytest.mark.parametrize("head,expected", [
        (b"\xff\xd8\xff\xe0rest", "image/jpeg"),
        (PNG_SIGNATURE + b"rest", "image/png"),
        (b"GIF87a....", "image/gif"),
        (b"GIF89a....", "image/gif"),
        (b"%PDF-1.4", "application/pdf"),
        (b"PK\x03\x04zip", "application/zip"),
    ])
    def test_signatures(self, head, expected):
        assert detect_mime_from_content(head) == expected

    def test_unrecognized(self):
        assert detect_mime_from_content(b"plain words") == "application/octet-stream"

    def test_empty(self):
        assert detect_mime_from_content(b"") == "application/octet-stream"


def test_extension_takes_precedence():
    assert detect_mime_type("image.png", b"%PDF-1.4") == "image/png"


def test_falls_back_to_content():
    assert detect_mime_type("blob", PNG_SIGNATURE) == "image/png"
