"""
Tests for studio.core.media
"""

import base64

import pytest

from studio.core import decode_data_url, sniff_content_type

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 8
JPEG = b"\xff\xd8\xff\xe0" + b"\x00" * 8


class TestSniffContentType:
    @pytest.mark.parametrize(
        "data,expected",
        [
            (PNG, "image/png"),
            (JPEG, "image/jpeg"),
            (b"GIF89a....", "image/gif"),
            (b"RIFF\x00\x00\x00\x00WEBPVP8 ", "image/webp"),
            (b"\x00\x00\x00\x18ftypmp42", "video/mp4"),
        ],
    )
    def test_known_signatures(self, data, expected):
        assert sniff_content_type(data) == expected

    def test_unknown_falls_back_to_default(self):
        assert sniff_content_type(b"hello") == "application/octet-stream"
        assert sniff_content_type(b"hello", "text/plain") == "text/plain"


class TestDecodeDataUrl:
    def test_data_url_keeps_declared_mime(self):
        url = "data:image/webp;base64," + base64.b64encode(PNG).decode()

        data, mime = decode_data_url(url)

        assert data == PNG
        assert mime == "image/webp"

    def test_bare_base64_is_sniffed(self):
        data, mime = decode_data_url(base64.b64encode(JPEG).decode())

        assert data == JPEG
        assert mime == "image/jpeg"

    def test_default_mime_used_before_sniffing(self):
        _, mime = decode_data_url(base64.b64encode(b"raw").decode(), default_mime="video/mp4")

        assert mime == "video/mp4"

    def test_rejects_non_base64_data_url(self):
        with pytest.raises(ValueError, match="base64"):
            decode_data_url("data:text/plain,hello")

    @pytest.mark.parametrize("payload", ["", "   ", "data:image/png;base64,"])
    def test_rejects_empty(self, payload):
        with pytest.raises(ValueError):
            decode_data_url(payload)

    def test_rejects_invalid_base64(self):
        with pytest.raises(ValueError, match="Invalid base64"):
            decode_data_url("data:image/png;base64,not*base64!")
