"""Base64 primitives used for encoded words and the encoded message form."""

from __future__ import annotations

import base64


def encode_base64(text: str) -> str:
    """Encode UTF-8 *text* to standard base64 ASCII."""
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def decode_base64(data: str) -> str:
    """Decode standard base64 *data* back to text."""
    return base64.b64decode(data).decode("utf-8")


def encode_base64url(text: str) -> str:
    """URL-safe base64 (``-`` and ``_`` alphabet), padding kept."""
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii")


def decode_base64url(data: str) -> str:
    return base64.urlsafe_b64decode(data).decode("utf-8")


def encoded_word(text: str) -> str:
    """Wrap *text* in an RFC 2047 ``B`` encoded word."""
    return f"=?utf-8?B?{encode_base64(text)}?="
