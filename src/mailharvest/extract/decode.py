"""Leaf payload decoding."""

import base64
import binascii


def decode_leaf(payload: str | None) -> str:
    """Decode a URL-safe Base64 leaf payload to text.

    Malformed payloads decode to "" so one bad leaf cannot abort extraction
    of the whole message.
    """
    if not payload or not isinstance(payload, str):
        return ""
    std = payload.replace("-", "+").replace("_", "/")
    std += "=" * (-len(std) % 4)
    try:
        return base64.b64decode(std).decode("utf-8")
    except (binascii.Error, ValueError):
        return ""
