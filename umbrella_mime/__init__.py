"""Umbrella MIME: in-memory assembly of RFC 2045/2046 email messages.

Public API re-exported here for convenience::

    from umbrella_mime import MimeMessage, Mailbox
"""

from .config import MimeSettings
from .errors import (
    InvalidHeaderField,
    InvalidHeaderValue,
    InvalidMailbox,
    InvalidMessageType,
    MimeError,
    MissingBody,
    MissingFilename,
    MissingHeader,
)
from .headers import (
    Address,
    AddressList,
    HeaderCollection,
    HeaderField,
    Text,
    message_headers,
    part_headers,
)
from .mailbox import Mailbox, MailboxRole
from .message import Boundaries, MimeMessage, Structure
from .part import BodyPart

__all__ = [
    "Address",
    "AddressList",
    "BodyPart",
    "Boundaries",
    "HeaderCollection",
    "HeaderField",
    "InvalidHeaderField",
    "InvalidHeaderValue",
    "InvalidMailbox",
    "InvalidMessageType",
    "Mailbox",
    "MailboxRole",
    "MimeError",
    "MimeMessage",
    "MimeSettings",
    "MissingBody",
    "MissingFilename",
    "MissingHeader",
    "Structure",
    "Text",
    "message_headers",
    "part_headers",
]
