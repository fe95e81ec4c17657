from __future__ import annotations

import base64
import binascii


def b64url_encode(raw: bytes) -> str:
    """Encode bytes as unpadded base64url text."""
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def b64url_decode(segment: str) -> bytes | None:
    """Decode base64url text with optional padding; ``None`` when malformed."""
    if not segment:
        return None
    try:
        raw = segment.encode("ascii")
    except UnicodeEncodeError:
        return None
    raw += b"=" * (-len(raw) % 4)
    try:
        return base64.b64decode(raw, altchars=b"-_", validate=True)
    except (binascii.Error, ValueError):
        return None
