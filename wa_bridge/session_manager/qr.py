"""Render WhatsApp pairing codes as PNG data URLs."""

from __future__ import annotations

import base64
import io

import qrcode


class QrEncodingError(RuntimeError):
    """The pairing code could not be rendered as an image."""


def encode_qr_data_url(code: str) -> str:
    """Encode a raw pairing code into a ``data:image/png;base64,...`` URL.

    Raises:
        QrEncodingError: if the code is empty or rendering fails.
    """
    if not code:
        raise QrEncodingError("Empty QR payload.")

    try:
        qr = qrcode.QRCode(
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=4,
            border=4,
        )
        qr.add_data(code)
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white")
        buf = io.BytesIO()
        img.save(buf, format="PNG")
    except Exception as e:
        raise QrEncodingError(f"Failed to render QR code: {e}") from e

    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")
