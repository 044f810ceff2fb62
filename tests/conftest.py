"""Shared test fixtures for the umbrella_mime test suite."""

from __future__ import annotations

import base64
import email
import email.message

import pytest

from umbrella_mime.config import MimeSettings
from umbrella_mime.message import MimeMessage


@pytest.fixture
def settings() -> MimeSettings:
    return MimeSettings(
        boundary_length=24,
        default_charset="UTF-8",
        message_encoding="7bit",
        attachment_encoding="base64",
    )


@pytest.fixture
def message(settings: MimeSettings) -> MimeMessage:
    """A message with sender, recipient and subject set but no body."""
    return _addressed_message(settings)


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _addressed_message(
    settings: MimeSettings | None = None,
    *,
    sender: object = "Lorem Ipsum <lorem@ipsum.com>",
    to: object = "foo@test.com",
    subject: str = "Quarterly report",
) -> MimeMessage:
    msg = MimeMessage(settings)
    msg.set_sender(sender)
    msg.set_recipient(to)
    msg.set_subject(subject)
    return msg


def _b64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def _parse(raw: str) -> email.message.Message:
    """Parse rendered output with the stdlib parser to check the structure."""
    return email.message_from_string(raw)


def _header_lines(raw: str) -> list[str]:
    """Top-level header lines of a rendered message, folded lines included."""
    head, _, _ = raw.partition("\r\n\r\n")
    return head.split("\r\n")
