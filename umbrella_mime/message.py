"""MIME message assembler.

Collects top-level headers and body parts, decides the multipart layout
at render time and emits the RFC 2045/2046 wire text::

    msg = MimeMessage()
    msg.set_sender({"name": "Lorem Ipsum", "addr": "lorem@ipsum.com"})
    msg.set_recipient("foo@test.com")
    msg.set_subject("Hi")
    msg.add_message(content_type="text/plain", data="Hi, I'm a simple text.")
    raw = msg.render()
"""

from __future__ import annotations

import secrets
import string
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

import structlog

from . import schemas
from .codec import encode_base64url
from .config import MimeSettings
from .errors import (
    InvalidHeaderValue,
    InvalidMailbox,
    InvalidMessageType,
    MissingBody,
    MissingFilename,
)
from .headers import CRLF, HeaderCollection, message_headers
from .mailbox import Mailbox, MailboxRole
from .part import BodyPart

logger = structlog.get_logger()

OCTET_STREAM = "application/octet-stream"
_BOUNDARY_ALPHABET = string.ascii_letters + string.digits


class Structure(str, Enum):
    """Top-level layout chosen for a message."""

    MIXED_RELATED = "mixed+related"
    MIXED = "mixed"
    RELATED = "related"
    ALTERNATIVE = "alternative"
    SINGLE = "single"


@dataclass(frozen=True)
class Boundaries:
    """The three multipart boundary tokens of one message."""

    mixed: str
    alternative: str
    related: str

    @classmethod
    def generate(cls, length: int = 24) -> Boundaries:
        """Three random alphanumeric tokens, pairwise distinct."""
        while True:
            tokens = [_random_token(length) for _ in range(3)]
            if len(set(tokens)) == 3:
                return cls(*tokens)

    def items(self) -> list[tuple[str, str]]:
        return [("mixed", self.mixed), ("alternative", self.alternative), ("related", self.related)]


def _random_token(length: int) -> str:
    return "".join(secrets.choice(_BOUNDARY_ALPHABET) for _ in range(length))


def _multipart_header(subtype: str, boundary: str) -> str:
    return f'Content-Type: multipart/{subtype}; boundary="{boundary}"'


def _delimited(boundary: str, parts: list[BodyPart]) -> str:
    """Each part opened by ``--boundary``; the final trailing CRLF is dropped."""
    section = "".join(f"--{boundary}{CRLF}{part.render()}{CRLF}{CRLF}" for part in parts)
    return section[: -len(CRLF)]


def _first_set(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def _bracketed(content_id: str) -> str:
    if not content_id.startswith("<"):
        content_id = f"<{content_id}"
    if not content_id.endswith(">"):
        content_id = f"{content_id}>"
    return content_id


class MimeMessage:
    """Assembles headers and body parts into a single MIME message.

    Parts are append-only.  Boundaries are generated once and reused by
    every :meth:`render` call.  Instances are not safe for concurrent
    mutation; confine each one to a single writer.
    """

    def __init__(self, settings: MimeSettings | None = None) -> None:
        self.settings = settings if settings is not None else MimeSettings()
        self.headers: HeaderCollection = message_headers(self.settings)
        self.boundaries = Boundaries.generate(self.settings.boundary_length)
        self.parts: list[BodyPart] = []

    def __repr__(self) -> str:
        return f"MimeMessage(parts={len(self.parts)}, subject={self.get_subject()!r})"

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self) -> str:
        """Return the complete message: headers, blank line, body.

        Raises :class:`MissingBody` when no text/plain or text/html part was
        added, and :class:`MissingHeader` when From or Subject is unset.
        """
        plaintext = self.get_message_by_type("text/plain")
        html = self.get_message_by_type("text/html")
        primary = html if html is not None else plaintext
        if primary is None:
            raise MissingBody("No content added to the message.")

        lines = self.headers.render()
        structure = self.structure()
        self._warn_on_boundary_collision()

        b = self.boundaries
        has_attachments = structure in (Structure.MIXED_RELATED, Structure.MIXED)
        has_inline = structure in (Structure.MIXED_RELATED, Structure.RELATED)

        if structure is Structure.MIXED_RELATED:
            body = (
                _multipart_header("mixed", b.mixed) + CRLF + CRLF
                + f"--{b.mixed}" + CRLF
                + _multipart_header("related", b.related) + CRLF + CRLF
                + self.dump_text_content(plaintext, html, b.related, has_attachments, has_inline)
                + CRLF + CRLF
                + _delimited(b.related, self.get_inline_attachments())
                + f"--{b.related}--" + CRLF
                + _delimited(b.mixed, self.get_attachments())
                + f"--{b.mixed}--"
            )
        elif structure is Structure.MIXED:
            both = plaintext is not None and html is not None
            body = (
                _multipart_header("mixed", b.mixed) + CRLF + CRLF
                + self.dump_text_content(plaintext, html, b.mixed, has_attachments, has_inline)
                + CRLF + ("" if both else CRLF)
                + _delimited(b.mixed, self.get_attachments())
                + f"--{b.mixed}--"
            )
        elif structure is Structure.RELATED:
            body = (
                _multipart_header("related", b.related) + CRLF + CRLF
                + self.dump_text_content(plaintext, html, b.related, has_attachments, has_inline)
                + CRLF + CRLF
                + _delimited(b.related, self.get_inline_attachments())
                + f"--{b.related}--"
            )
        elif structure is Structure.ALTERNATIVE:
            body = (
                _multipart_header("alternative", b.alternative) + CRLF + CRLF
                + self.dump_text_content(plaintext, html, b.alternative, has_attachments, has_inline)
                + CRLF + CRLF
                + f"--{b.alternative}--"
            )
        else:
            body = primary.render()

        logger.debug("mime_message_rendered", structure=structure.value, parts=len(self.parts))
        return lines + CRLF + body

    def render_encoded(self) -> str:
        """URL-safe base64 of :meth:`render`, e.g. for the Gmail ``raw`` field."""
        return encode_base64url(self.render())

    def structure(self) -> Structure:
        has_attachments = self.has_attachments()
        has_inline = self.has_inline_attachments()
        if has_attachments and has_inline:
            return Structure.MIXED_RELATED
        if has_attachments:
            return Structure.MIXED
        if has_inline:
            return Structure.RELATED
        plaintext = self.get_message_by_type("text/plain")
        if plaintext is not None and self.get_message_by_type("text/html") is not None:
            return Structure.ALTERNATIVE
        return Structure.SINGLE

    def dump_text_content(
        self,
        plaintext: BodyPart | None,
        html: BodyPart | None,
        boundary: str,
        has_attachments: bool | None = None,
        has_inline: bool | None = None,
    ) -> str:
        """Render the text section opened by *boundary*.

        With both renditions and only ordinary attachments, the pair is
        nested in its own multipart/alternative.  With inline attachments
        only the html is kept.  Without attachments both are placed directly
        under *boundary*.
        """
        if has_attachments is None:
            has_attachments = self.has_attachments()
        if has_inline is None:
            has_inline = self.has_inline_attachments()

        if plaintext is not None and html is not None:
            if has_attachments and not has_inline:
                alt = self.boundaries.alternative
                return (
                    f"--{boundary}" + CRLF
                    + _multipart_header("alternative", alt) + CRLF + CRLF
                    + f"--{alt}" + CRLF + plaintext.render() + CRLF + CRLF
                    + f"--{alt}" + CRLF + html.render() + CRLF + CRLF
                    + f"--{alt}--"
                )
            if has_inline:
                return f"--{boundary}" + CRLF + html.render()
            return (
                f"--{boundary}" + CRLF + plaintext.render() + CRLF + CRLF
                + f"--{boundary}" + CRLF + html.render()
            )

        primary = html if html is not None else plaintext
        if primary is None:
            raise MissingBody("No content added to the message.")
        return f"--{boundary}" + CRLF + primary.render()

    def _warn_on_boundary_collision(self) -> None:
        for part in self.parts:
            for kind, token in self.boundaries.items():
                if token in part.data:
                    logger.warning(
                        "boundary_collision",
                        boundary=kind,
                        content_type=part.get_header("Content-Type"),
                    )

    # ------------------------------------------------------------------
    # Parts
    # ------------------------------------------------------------------

    def add_message(
        self,
        data: str,
        content_type: str | None = None,
        *,
        encoding: str | None = None,
        charset: str | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> BodyPart:
        """Append a text/plain or text/html part."""
        part_headers = self._checked_headers(headers)

        content_type = _first_set(part_headers.get("Content-Type"), content_type, "none")
        if not schemas.validate("content_type", content_type).ok:
            raise InvalidMessageType(
                f"Valid content types are {', '.join(schemas.MESSAGE_CONTENT_TYPES)} "
                f'but you specified "{content_type}".'
            )

        encoding = _first_set(
            part_headers.get("Content-Transfer-Encoding"),
            encoding,
            self.settings.message_encoding,
        )
        content_type = self._type_for_encoding(content_type, encoding)

        charset = charset or self.settings.default_charset
        if not schemas.validate("charset", charset).ok:
            raise InvalidHeaderValue(f'You specified an unsupported charset "{charset}".')

        part_headers.update(
            {
                "Content-Type": f"{content_type}; charset={charset}",
                "Content-Transfer-Encoding": encoding,
            }
        )
        return self._add_part(data, part_headers)

    def add_attachment(
        self,
        data: str,
        filename: str | None = None,
        content_type: str | None = None,
        *,
        encoding: str | None = None,
        inline: bool = False,
        headers: Mapping[str, str] | None = None,
    ) -> BodyPart:
        """Append an attachment, or an inline resource when *inline* is set.

        *data* must already be encoded for the transfer encoding (base64 by
        default).  An inline part is usually referenced from the html body
        through its ``Content-ID``.
        """
        if not isinstance(filename, str) or not filename:
            raise MissingFilename("The property filename must exist while adding attachments.")
        part_headers = self._checked_headers(headers)

        content_type = _first_set(part_headers.get("Content-Type"), content_type, "none")
        if not isinstance(content_type, str) or not content_type.strip():
            raise InvalidMessageType(f'You specified an invalid content type "{content_type}".')

        encoding = _first_set(
            part_headers.get("Content-Transfer-Encoding"),
            encoding,
            self.settings.attachment_encoding,
        )
        content_type = self._type_for_encoding(content_type, encoding)

        content_id = part_headers.get("Content-ID")
        if content_id:
            part_headers["Content-ID"] = _bracketed(content_id)

        disposition = "inline" if inline else "attachment"
        part_headers.update(
            {
                "Content-Type": f'{content_type}; name="{filename}"',
                "Content-Transfer-Encoding": encoding,
                "Content-Disposition": f'{disposition}; filename="{filename}"',
            }
        )
        return self._add_part(data, part_headers)

    def get_message_by_type(self, content_type: str) -> BodyPart | None:
        """First non-attachment part whose Content-Type mentions *content_type*."""
        for part in self.parts:
            if part.is_attachment() or part.is_inline_attachment():
                continue
            if content_type in (part.get_header("Content-Type") or ""):
                return part
        return None

    def get_attachments(self) -> list[BodyPart]:
        return [part for part in self.parts if part.is_attachment()]

    def get_inline_attachments(self) -> list[BodyPart]:
        # A disposition mentioning both kinds is placed with ordinary attachments only.
        return [
            part for part in self.parts if part.is_inline_attachment() and not part.is_attachment()
        ]

    def has_attachments(self) -> bool:
        return bool(self.get_attachments())

    def has_inline_attachments(self) -> bool:
        return bool(self.get_inline_attachments())

    def _add_part(self, data: str, headers: Mapping[str, str]) -> BodyPart:
        part = BodyPart(data, headers)
        self.parts.append(part)
        logger.debug(
            "mime_part_added",
            content_type=part.get_header("Content-Type"),
            disposition=part.get_header("Content-Disposition"),
            part_count=len(self.parts),
        )
        return part

    def _checked_headers(self, headers: Mapping[str, str] | None) -> dict[str, str]:
        if headers is None:
            return {}
        if not isinstance(headers, Mapping):
            raise InvalidHeaderValue("Part headers must be a mapping of header names to strings.")
        result = schemas.validate("part_headers", dict(headers))
        if not result.ok:
            raise InvalidHeaderValue(f"You specified invalid part headers: {result.error}")
        return dict(headers)

    def _type_for_encoding(self, content_type: str, encoding: str) -> str:
        if schemas.validate("transfer_encoding", encoding).ok:
            return content_type
        logger.warning(
            "transfer_encoding_downgraded",
            encoding=encoding,
            content_type=content_type,
            downgraded_to=OCTET_STREAM,
        )
        return OCTET_STREAM

    # ------------------------------------------------------------------
    # Headers
    # ------------------------------------------------------------------

    def set_sender(self, value: Any, role: MailboxRole | str = MailboxRole.FROM) -> Mailbox:
        mailbox = Mailbox.parse(value, role)
        self.set_header("From", mailbox)
        return mailbox

    def get_sender(self) -> Mailbox | None:
        return self.get_header("From")

    def set_recipients(self, value: Any, role: MailboxRole | str = MailboxRole.TO) -> list[Mailbox]:
        """Parse one address or a list of them into the header for *role*.

        Always stores and returns a list.
        """
        role = MailboxRole(role)
        items = list(value) if isinstance(value, (list, tuple)) else [value]
        if not items:
            raise InvalidMailbox(f"At least one {role.value} address is required.")
        mailboxes = [Mailbox.parse(item, role) for item in items]
        self.set_header(role.value, mailboxes)
        return mailboxes

    def get_recipients(self, role: MailboxRole | str = MailboxRole.TO) -> list[Mailbox] | Mailbox | None:
        return self.get_header(MailboxRole(role).value)

    def set_recipient(self, value: Any) -> list[Mailbox]:
        return self.set_recipients(value, MailboxRole.TO)

    def set_to(self, value: Any) -> list[Mailbox]:
        return self.set_recipients(value, MailboxRole.TO)

    def set_cc(self, value: Any) -> list[Mailbox]:
        return self.set_recipients(value, MailboxRole.CC)

    def set_bcc(self, value: Any) -> list[Mailbox]:
        return self.set_recipients(value, MailboxRole.BCC)

    def set_reply_to(self, value: Any) -> list[Mailbox]:
        return self.set_recipients(value, MailboxRole.REPLY_TO)

    def set_subject(self, value: str) -> str:
        self.set_header("Subject", value)
        return value

    def get_subject(self) -> str | None:
        return self.get_header("Subject")

    def set_header(self, name: str, value: Any) -> str:
        self.headers.set(name, value)
        return name

    def get_header(self, name: str) -> Any:
        return self.headers.get(name)

    def set_headers(self, headers: Mapping[str, Any]) -> list[str]:
        return [self.set_header(name, value) for name, value in headers.items()]

    def get_headers(self) -> dict[str, Any]:
        return self.headers.to_dict()
