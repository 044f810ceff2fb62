"""Message assembly defaults loaded from environment variables.

Uses pydantic-settings so every default can be overridden via env vars
prefixed with ``MIME_``.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class MimeSettings(BaseSettings):
    """Defaults applied by :class:`~umbrella_mime.message.MimeMessage`."""

    model_config = {"env_prefix": "MIME_"}

    boundary_length: int = Field(
        default=24,
        ge=8,
        le=70,
        description="Length of each generated multipart boundary token",
    )
    default_charset: str = Field(
        default="UTF-8",
        description="Charset for text parts added without an explicit charset",
    )
    message_encoding: str = Field(
        default="7bit",
        description="Content-Transfer-Encoding for text parts without one",
    )
    attachment_encoding: str = Field(
        default="base64",
        description="Content-Transfer-Encoding for attachments without one",
    )
    mime_version: str = Field(default="1.0", description="Value of the MIME-Version header")
    message_id_domain: str = Field(
        default="localhost",
        description="Message-ID domain used when the sender address has none",
    )
