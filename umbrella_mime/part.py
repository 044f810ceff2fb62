"""A single MIME body part: content headers plus an opaque payload."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .headers import CRLF, HeaderCollection, part_headers


class BodyPart:
    """One MIME part.

    ``data`` is emitted verbatim; encoding it to match the part's
    Content-Transfer-Encoding is the caller's job.  Classification as an
    attachment is read from ``Content-Disposition`` on every call, so
    changing that header later changes how the part is placed.
    """

    def __init__(self, data: str, headers: Mapping[str, str] | None = None) -> None:
        self.headers: HeaderCollection = part_headers()
        self.data = data
        self.set_headers(headers or {})

    def __repr__(self) -> str:
        return f"BodyPart(content_type={self.get_header('Content-Type')!r}, size={len(self.data)})"

    def is_attachment(self) -> bool:
        disposition = self.get_header("Content-Disposition")
        return isinstance(disposition, str) and "attachment" in disposition

    def is_inline_attachment(self) -> bool:
        disposition = self.get_header("Content-Disposition")
        return isinstance(disposition, str) and "inline" in disposition

    def get_header(self, name: str) -> Any:
        return self.headers.get(name)

    def set_header(self, name: str, value: str) -> str:
        self.headers.set(name, value)
        return name

    def set_headers(self, headers: Mapping[str, str]) -> list[str]:
        return [self.set_header(name, value) for name, value in headers.items()]

    def headers_dict(self) -> dict[str, Any]:
        return self.headers.to_dict()

    def render(self) -> str:
        return self.headers.render() + CRLF + CRLF + self.data
