"""Header field model and the ordered header collection.

A :class:`HeaderCollection` is a generic, ordered list of
:class:`HeaderField` descriptors.  The message-level and part-level header
blocks are two configurations of the same collection, built by
:func:`message_headers` and :func:`part_headers`.

Field values are stored as a tagged union (:class:`Text`,
:class:`Address`, :class:`AddressList`).  Callers work with plain Python
values (``str``, :class:`Mailbox`, ``list[Mailbox]``); conversion happens at
the collection boundary.
"""

from __future__ import annotations

import re
import uuid
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from datetime import UTC, datetime
from email.utils import format_datetime
from typing import Any

from . import schemas
from .codec import encoded_word
from .config import MimeSettings
from .errors import InvalidHeaderField, InvalidHeaderValue, MissingHeader
from .mailbox import Mailbox

CRLF = "\r\n"
MAILBOX_SEPARATOR = ",\r\n "

# RFC 5322 field name: printable ASCII except colon.
_FIELD_NAME_RE = re.compile(r"^[!-9;-~]+$")


# ------------------------------------------------------------------
# Header values
# ------------------------------------------------------------------


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class Address:
    mailbox: Mailbox


@dataclass(frozen=True)
class AddressList:
    mailboxes: tuple[Mailbox, ...]


HeaderValue = Text | Address | AddressList


def to_header_value(raw: Any) -> HeaderValue | None:
    """Convert a caller-supplied value into a :data:`HeaderValue`.

    Returns ``None`` when the value has no header representation.
    """
    if isinstance(raw, str):
        return Text(raw)
    if isinstance(raw, Mailbox):
        return Address(raw)
    if isinstance(raw, (list, tuple)) and all(isinstance(item, Mailbox) for item in raw):
        return AddressList(tuple(raw))
    return None


def from_header_value(value: HeaderValue | None) -> Any:
    """Inverse of :func:`to_header_value`; address lists come back as lists."""
    if value is None:
        return None
    if isinstance(value, Text):
        return value.value
    if isinstance(value, Address):
        return value.mailbox
    if isinstance(value, AddressList):
        return list(value.mailboxes)
    raise TypeError(f"unexpected header value {value!r}")


# ------------------------------------------------------------------
# Validators and renderers
# ------------------------------------------------------------------


def is_text(value: HeaderValue) -> bool:
    return isinstance(value, Text) and schemas.validate("header_text", value.value).ok


def is_single_mailbox(value: HeaderValue) -> bool:
    return isinstance(value, Address) and value.mailbox.is_header_safe()


def is_mailbox_list(value: HeaderValue) -> bool:
    if isinstance(value, AddressList):
        return all(mailbox.is_header_safe() for mailbox in value.mailboxes)
    return is_single_mailbox(value)


def render_mailbox(mailbox: Mailbox) -> str:
    """Encoded-word display name plus bracketed address, or just the address."""
    if not mailbox.display_name:
        return mailbox.dump()
    return f"{encoded_word(mailbox.display_name)} <{mailbox.address}>"


def render_value(value: HeaderValue) -> str:
    if isinstance(value, Text):
        return value.value
    if isinstance(value, Address):
        return render_mailbox(value.mailbox)
    if isinstance(value, AddressList):
        return MAILBOX_SEPARATOR.join(render_mailbox(m) for m in value.mailboxes)
    raise TypeError(f"unexpected header value {value!r}")


def render_encoded_text(value: HeaderValue) -> str:
    """Encoded word for any non-empty text, ASCII included."""
    text = render_value(value)
    return encoded_word(text) if text else ""


# ------------------------------------------------------------------
# Fields and the collection
# ------------------------------------------------------------------

Validator = Callable[[HeaderValue], bool]
Renderer = Callable[[HeaderValue], str]
Generator = Callable[["HeaderCollection"], HeaderValue]


@dataclass
class HeaderField:
    """One named header slot.

    ``value`` holds what the caller set.  ``generated`` memoises the
    generator's output and is only consulted while ``value`` is unset.
    """

    name: str
    value: HeaderValue | None = None
    required: bool = False
    disabled: bool = False
    validate: Validator | None = None
    render: Renderer | None = None
    generate: Generator | None = None
    custom: bool = False
    generated: HeaderValue | None = field(default=None, repr=False)

    @property
    def current(self) -> HeaderValue | None:
        return self.value if self.value is not None else self.generated

    def matches(self, name: str) -> bool:
        return self.name.lower() == name.lower()


class HeaderCollection:
    """Ordered header fields with case-insensitive lookup."""

    def __init__(self, fields: Iterable[HeaderField]) -> None:
        self._fields: list[HeaderField] = list(fields)

    def __iter__(self) -> Iterator[HeaderField]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.field(name) is not None

    def field(self, name: str) -> HeaderField | None:
        """First field whose name matches *name*, ignoring case."""
        for candidate in self._fields:
            if candidate.matches(name):
                return candidate
        return None

    def get(self, name: str) -> Any:
        found = self.field(name)
        return from_header_value(found.current) if found else None

    def set(self, name: str, value: Any) -> HeaderField:
        """Store *value* on the named field, or append a custom field."""
        found = self.field(name)
        if found is None:
            return self.set_custom(HeaderField(name=name, value=_custom_value(name, value)))

        wrapped = to_header_value(value)
        if wrapped is None or (found.validate is not None and not found.validate(wrapped)):
            raise InvalidHeaderValue(f"You specified an invalid value for the header {name}")
        found.value = wrapped
        return found

    def set_custom(self, header: HeaderField) -> HeaderField:
        """Append a caller-built field; it must carry a single-line text value."""
        if not isinstance(header.name, str) or not _FIELD_NAME_RE.match(header.name):
            raise InvalidHeaderField(f"Invalid header field name {header.name!r}.")
        if isinstance(header.value, str):
            header.value = Text(header.value)
        if not isinstance(header.value, Text) or not is_text(header.value):
            raise InvalidHeaderField("Custom header must have a value.")
        header.custom = True
        if header.validate is None:
            header.validate = is_text
        self._fields.append(header)
        return header

    def disable(self, name: str) -> None:
        self._require(name).disabled = True

    def enable(self, name: str) -> None:
        self._require(name).disabled = False

    def render(self) -> str:
        """Render enabled fields as ``Name: value`` lines joined by CRLF.

        Raises :class:`MissingHeader` for a required field that has neither a
        value nor a generator.
        """
        lines: list[str] = []
        for header in self._fields:
            if header.disabled:
                continue
            value = header.value
            if value is None:
                if header.generate is None:
                    if header.required:
                        raise MissingHeader(f'The "{header.name}" header is required.')
                    continue
                if header.generated is None:
                    header.generated = header.generate(self)
                value = header.generated
            renderer = header.render or render_value
            lines.append(f"{header.name}: {renderer(value)}")
        return CRLF.join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {header.name: from_header_value(header.current) for header in self._fields}

    def _require(self, name: str) -> HeaderField:
        found = self.field(name)
        if found is None:
            raise KeyError(name)
        return found


def _custom_value(name: str, value: Any) -> Text:
    if not isinstance(value, str):
        raise InvalidHeaderField(f'Custom header "{name}" must have a string value.')
    return Text(value)


# ------------------------------------------------------------------
# Field sets
# ------------------------------------------------------------------


def _generate_date(_: HeaderCollection) -> HeaderValue:
    return Text(format_datetime(datetime.now(UTC)))


def _message_id_generator(settings: MimeSettings) -> Generator:
    def generate(headers: HeaderCollection) -> HeaderValue:
        sender = headers.get("From")
        domain = sender.domain() if isinstance(sender, Mailbox) else ""
        return Text(f"<{uuid.uuid4().hex}@{domain or settings.message_id_domain}>")

    return generate


def message_fields(settings: MimeSettings) -> list[HeaderField]:
    """Top-level header fields, in output order."""
    return [
        HeaderField("Date", validate=is_text, generate=_generate_date),
        HeaderField("From", required=True, validate=is_single_mailbox),
        HeaderField("Sender", validate=is_single_mailbox),
        HeaderField("Reply-To", validate=is_mailbox_list),
        HeaderField("To", validate=is_mailbox_list),
        HeaderField("Cc", validate=is_mailbox_list),
        HeaderField("Bcc", validate=is_mailbox_list),
        HeaderField("Message-ID", validate=is_text, generate=_message_id_generator(settings)),
        HeaderField("Subject", required=True, validate=is_text, render=render_encoded_text),
        HeaderField(
            "MIME-Version",
            validate=is_text,
            generate=lambda _: Text(settings.mime_version),
        ),
    ]


def part_fields() -> list[HeaderField]:
    """Per-part content header fields, in output order."""
    return [
        HeaderField("Content-ID", validate=is_text),
        HeaderField("Content-Type", validate=is_text),
        HeaderField("Content-Transfer-Encoding", validate=is_text),
        HeaderField("Content-Disposition", validate=is_text),
    ]


def message_headers(settings: MimeSettings | None = None) -> HeaderCollection:
    return HeaderCollection(message_fields(settings if settings is not None else MimeSettings()))


def part_headers() -> HeaderCollection:
    return HeaderCollection(part_fields())
