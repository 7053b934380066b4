"""Tests for QR rendering."""

import base64

import pytest

from wa_bridge.session_manager.qr import QrEncodingError, encode_qr_data_url

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def test_encodes_png_data_url():
    url = encode_qr_data_url("2@abc,def,ghi==,jkl=")
    prefix = "data:image/png;base64,"
    assert url.startswith(prefix)
    assert base64.b64decode(url[len(prefix):]).startswith(PNG_SIGNATURE)


def test_empty_code_is_rejected():
    with pytest.raises(QrEncodingError):
        encode_qr_data_url("")
