"""Validation schemas for header values, content types, charsets and
transfer encodings.

The assembler never inspects pydantic errors directly: it calls
:func:`validate` and turns a failed :class:`ValidationResult` into one of
the errors in :mod:`umbrella_mime.errors`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any, Literal, get_args

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    TypeAdapter,
    ValidationError,
    model_validator,
)

TransferEncoding = Literal["7bit", "8bit", "binary", "quoted-printable", "base64"]
MessageContentType = Literal["text/plain", "text/html"]
Charset = Literal[
    "utf-8",
    "utf8",
    "utf-16",
    "utf16le",
    "utf-16le",
    "us-ascii",
    "iso-8859-1",
    "latin1",
]

TRANSFER_ENCODINGS: tuple[str, ...] = get_args(TransferEncoding)
MESSAGE_CONTENT_TYPES: tuple[str, ...] = get_args(MessageContentType)
CHARSETS: tuple[str, ...] = get_args(Charset)

# Header values must not smuggle extra header lines into the output.
HeaderText = Annotated[str, StringConstraints(pattern=r"^[^\r\n]*$")]


class PartHeaders(BaseModel):
    """Headers a caller may pass when adding a message or attachment."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    content_type: HeaderText | None = Field(default=None, alias="Content-Type")
    content_transfer_encoding: HeaderText | None = Field(
        default=None, alias="Content-Transfer-Encoding"
    )
    content_disposition: HeaderText | None = Field(default=None, alias="Content-Disposition")
    content_id: HeaderText | None = Field(default=None, alias="Content-ID")

    @model_validator(mode="after")
    def _extra_headers_are_text(self) -> PartHeaders:
        for name, value in (self.model_extra or {}).items():
            if not isinstance(value, str) or "\r" in value or "\n" in value:
                raise ValueError(f"header {name!r} must be a single-line string")
        return self


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of :func:`validate`: either ``ok`` with a value or an error message."""

    ok: bool
    value: Any = None
    error: str | None = None


_ADAPTERS: dict[str, TypeAdapter] = {
    "header_text": TypeAdapter(HeaderText),
    "content_type": TypeAdapter(MessageContentType),
    "charset": TypeAdapter(Charset),
    "transfer_encoding": TypeAdapter(TransferEncoding),
    "part_headers": TypeAdapter(PartHeaders),
}

# Charsets compare case-insensitively; everything else is exact.
_CASE_FOLDED = {"charset"}


def validate(kind: str, value: Any) -> ValidationResult:
    """Validate *value* against the schema registered for *kind*.

    Raises ``KeyError`` for an unknown *kind*; that is a programming error,
    not a validation failure.
    """
    adapter = _ADAPTERS[kind]
    candidate = value.lower() if kind in _CASE_FOLDED and isinstance(value, str) else value
    try:
        adapter.validate_python(candidate, strict=True)
    except ValidationError as exc:
        return ValidationResult(ok=False, error=str(exc))
    return ValidationResult(ok=True, value=value)
