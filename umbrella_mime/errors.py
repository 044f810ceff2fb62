"""Error taxonomy for MIME assembly.

Every failure is raised at the point of detection and propagates to the
caller unchanged.  The stable ``code`` lets callers branch on the kind of
failure without depending on the class hierarchy.
"""

from __future__ import annotations


class MimeError(Exception):
    """Base class for all MIME assembly errors."""

    code = "MIMETEXT_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


class InvalidMailbox(MimeError):
    """Address input matches none of the accepted mailbox grammars."""

    code = "MIMETEXT_INVALID_MAILBOX"


class MissingHeader(MimeError):
    """A required header has neither a value nor a generator."""

    code = "MIMETEXT_MISSING_HEADER"


class MissingBody(MimeError):
    """No text/plain or text/html part was added to the message."""

    code = "MIMETEXT_MISSING_BODY"


class InvalidMessageType(MimeError):
    """Unsupported or empty content type for a message or attachment."""

    code = "MIMETEXT_INVALID_MESSAGE_TYPE"


class MissingFilename(MimeError):
    """Attachment registered without a filename."""

    code = "MIMETEXT_MISSING_FILENAME"


class InvalidHeaderValue(MimeError):
    """A value was rejected by the header field's validator."""

    code = "MIMETEXT_INVALID_HEADER_VALUE"


class InvalidHeaderField(MimeError):
    """A custom header field is malformed."""

    code = "MIMETEXT_INVALID_HEADER_FIELD"
