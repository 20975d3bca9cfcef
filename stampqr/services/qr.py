import io
from urllib.parse import urlencode

import qrcode


def redeem_url(base_url: str, token: str) -> str:
    return f"{base_url.rstrip('/')}/redeem?{urlencode({'t': token})}"


def make_qr_bytes(data: str) -> bytes:
    """Return QR PNG bytes for the provided payload."""
    img = qrcode.make(data)
    buf = io.BytesIO()
    img.save(buf, format='PNG')
    return buf.getvalue()
