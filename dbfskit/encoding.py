"""Base64 helpers for inline file contents."""

from __future__ import annotations

import base64
import binascii

from dbfskit.errors import EncodingError


def encode_bytes(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def decode_bytes(data: str) -> bytes:
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise EncodingError(f"Invalid base64 data: {e}") from e


def encode_base64(text: str, encoding: str = "utf-8") -> str:
    """Encode text as base64, e.g., for ``add-block`` requests."""
    return encode_bytes(text.encode(encoding))


def decode_base64(data: str, encoding: str = "utf-8") -> str:
    """Decode base64 data, e.g., from a ``read`` response, to text."""
    raw = decode_bytes(data)
    try:
        return raw.decode(encoding)
    except UnicodeDecodeError as e:
        raise EncodingError(
            f"Decoded data is not valid {encoding} text: {e}"
        ) from e
