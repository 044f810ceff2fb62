"""Single mailbox address: parsing and canonical formatting."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from . import schemas
from .errors import InvalidMailbox


class MailboxRole(str, Enum):
    """Header a mailbox is destined for."""

    FROM = "From"
    TO = "To"
    CC = "Cc"
    BCC = "Bcc"
    REPLY_TO = "Reply-To"


# Optional display name followed by a bracketed address at the end.
_NAME_ADDR_RE = re.compile(r"^([^<>\r\n]*?)\s*<([^<>\r\n]+)>$")
_QUOTES = ("'", '"')
_ANGLES = frozenset("<>")


@dataclass(frozen=True)
class Mailbox:
    """An email address with an optional display name."""

    address: str
    display_name: str = ""
    role: MailboxRole = MailboxRole.TO

    @classmethod
    def parse(cls, value: Any, role: MailboxRole | str = MailboxRole.TO) -> Mailbox:
        """Build a mailbox from a mapping, a ``Mailbox`` or address text.

        Accepted text forms are ``Name <local@domain>``, ``"Name" <local@domain>``,
        ``<local@domain>`` and a bare ``local@domain``.  Mappings carry an
        ``address`` (or ``addr``) key and optionally ``display_name`` (or
        ``name``) and ``role`` (or ``type``); a role in the mapping wins.
        """
        role = MailboxRole(role)

        if isinstance(value, Mailbox):
            return cls._checked(value.address, value.display_name, role)

        if isinstance(value, Mapping):
            return cls._from_mapping(value, role)

        if isinstance(value, str):
            text = value.strip()
            match = _NAME_ADDR_RE.match(text)
            if match:
                return cls._checked(match.group(2), _unquote(match.group(1).strip()), role)
            return cls._checked(text, "", role)

        raise InvalidMailbox(
            "The provided input does not conform to a valid mailbox address format. "
            "Pass either an address string or a mapping with an 'address' key."
        )

    @classmethod
    def _from_mapping(cls, value: Mapping[str, Any], role: MailboxRole) -> Mailbox:
        address = value.get("address", value.get("addr"))
        name = value.get("display_name", value.get("name", ""))
        mapped_role = value.get("role", value.get("type"))
        if not isinstance(address, str):
            raise InvalidMailbox("A mailbox mapping must carry a string 'address'.")
        if not isinstance(name, str):
            name = ""
        if mapped_role is not None:
            try:
                role = MailboxRole(mapped_role)
            except ValueError as exc:
                raise InvalidMailbox(f"Unknown mailbox role {mapped_role!r}.") from exc
        return cls._checked(address, name, role)

    @classmethod
    def _checked(cls, address: str, name: str, role: MailboxRole) -> Mailbox:
        if not address:
            raise InvalidMailbox("A mailbox address must not be empty.")
        if not _is_safe_address(address):
            raise InvalidMailbox(f"Invalid characters in mailbox address {address!r}.")
        if not schemas.validate("header_text", name).ok:
            raise InvalidMailbox(f"Display name must be a single line, got {name!r}.")
        return cls(address=address, display_name=name, role=role)

    def is_header_safe(self) -> bool:
        """Neither the address nor the display name can break out of a header line."""
        return _is_safe_address(self.address) and schemas.validate("header_text", self.display_name).ok

    def domain(self) -> str:
        """Part of the address after the last ``@``, or ``""``."""
        _, at, domain = self.address.rpartition("@")
        return domain if at else ""

    def dump(self) -> str:
        if self.display_name:
            return f'"{self.display_name}" <{self.address}>'
        return f"<{self.address}>"

    def __str__(self) -> str:
        return self.dump()


def _is_safe_address(address: str) -> bool:
    return schemas.validate("header_text", address).ok and not _ANGLES & set(address)


def _unquote(name: str) -> str:
    """Strip one layer of surrounding quotes."""
    if name[:1] in _QUOTES:
        name = name[1:]
    if name[-1:] in _QUOTES:
        name = name[:-1]
    return name
