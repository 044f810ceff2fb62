"""Tests for umbrella_mime.mailbox."""

from __future__ import annotations

import dataclasses

import pytest

from umbrella_mime.errors import InvalidMailbox
from umbrella_mime.mailbox import Mailbox, MailboxRole


class TestMailboxParseText:
    def test_name_and_address(self):
        mailbox = Mailbox.parse("John Doe <example@example.com>")
        assert mailbox.address == "example@example.com"
        assert mailbox.display_name == "John Doe"
        assert mailbox.role is MailboxRole.TO

    def test_quoted_name(self):
        mailbox = Mailbox.parse('"John Doe" <example@example.com>')
        assert mailbox.address == "example@example.com"
        assert mailbox.display_name == "John Doe"

    def test_single_quoted_name(self):
        mailbox = Mailbox.parse("'John Doe' <example@example.com>")
        assert mailbox.display_name == "John Doe"

    def test_only_one_layer_of_quotes_is_stripped(self):
        mailbox = Mailbox.parse('""Odd"" <odd@example.com>')
        assert mailbox.display_name == '"Odd"'

    def test_angle_brackets_only(self):
        mailbox = Mailbox.parse("<example@example.com>")
        assert mailbox.address == "example@example.com"
        assert mailbox.display_name == ""

    def test_bare_address(self):
        mailbox = Mailbox.parse("example@example.com")
        assert mailbox.address == "example@example.com"
        assert mailbox.display_name == ""

    def test_surrounding_whitespace_is_ignored(self):
        mailbox = Mailbox.parse("  Jane <jane@example.com>  ")
        assert mailbox.display_name == "Jane"
        assert mailbox.address == "jane@example.com"

    def test_no_whitespace_before_bracket(self):
        mailbox = Mailbox.parse("Jane<jane@example.com>")
        assert mailbox.display_name == "Jane"
        assert mailbox.address == "jane@example.com"

    def test_not_an_address_is_kept_as_bare_text(self):
        mailbox = Mailbox.parse("invalid-email")
        assert mailbox.address == "invalid-email"
        assert mailbox.display_name == ""

    def test_role_argument(self):
        mailbox = Mailbox.parse("a@b.com", role=MailboxRole.CC)
        assert mailbox.role is MailboxRole.CC

    def test_role_as_string(self):
        mailbox = Mailbox.parse("a@b.com", role="Reply-To")
        assert mailbox.role is MailboxRole.REPLY_TO


class TestMailboxParseStructured:
    def test_mapping_with_long_keys(self):
        mailbox = Mailbox.parse(
            {"address": "example@example.com", "display_name": "John Doe", "role": "Cc"}
        )
        assert mailbox.address == "example@example.com"
        assert mailbox.display_name == "John Doe"
        assert mailbox.role is MailboxRole.CC

    def test_mapping_with_short_keys(self):
        mailbox = Mailbox.parse({"addr": "lorem@ipsum.com", "name": "Lorem Ipsum"})
        assert mailbox.address == "lorem@ipsum.com"
        assert mailbox.display_name == "Lorem Ipsum"

    def test_mapping_role_wins(self):
        mailbox = Mailbox.parse({"addr": "a@b.com", "type": "Bcc"}, role=MailboxRole.TO)
        assert mailbox.role is MailboxRole.BCC

    def test_mapping_skips_grammar_match(self):
        mailbox = Mailbox.parse({"addr": "not an address"})
        assert mailbox.address == "not an address"

    def test_existing_mailbox_is_re_roled(self):
        original = Mailbox.parse("a@b.com")
        copy = Mailbox.parse(original, role=MailboxRole.FROM)
        assert copy.role is MailboxRole.FROM
        assert copy.address == original.address
        assert original.role is MailboxRole.TO


class TestMailboxInvalid:
    @pytest.mark.parametrize("value", [123, None, 4.5, ["a@b.com"]])
    def test_unsupported_input(self, value):
        with pytest.raises(InvalidMailbox) as exc_info:
            Mailbox.parse(value)
        assert exc_info.value.code == "MIMETEXT_INVALID_MAILBOX"

    def test_mapping_without_address(self):
        with pytest.raises(InvalidMailbox):
            Mailbox.parse({"name": "Nobody"})

    def test_empty_string(self):
        with pytest.raises(InvalidMailbox):
            Mailbox.parse("   ")

    def test_unknown_role_in_mapping(self):
        with pytest.raises(InvalidMailbox):
            Mailbox.parse({"addr": "a@b.com", "role": "Envelope-To"})


class TestMailboxFormatting:
    def test_dump_with_name(self):
        mailbox = Mailbox.parse({"addr": "example@example.com", "name": "John Doe"})
        assert mailbox.dump() == '"John Doe" <example@example.com>'

    def test_dump_without_name(self):
        assert Mailbox.parse("example@example.com").dump() == "<example@example.com>"

    @pytest.mark.parametrize(
        "text",
        ['"John Doe" <john@example.com>', "<john@example.com>"],
    )
    def test_canonical_form_round_trips(self, text):
        assert Mailbox.parse(text).dump() == text

    def test_unquoted_name_dumps_quoted(self):
        assert Mailbox.parse("John Doe <john@example.com>").dump() == '"John Doe" <john@example.com>'

    def test_str_is_dump(self):
        mailbox = Mailbox.parse("Jane <jane@example.com>")
        assert str(mailbox) == mailbox.dump()

    def test_domain(self):
        assert Mailbox.parse("example@example.com").domain() == "example.com"

    def test_domain_uses_last_at(self):
        assert Mailbox.parse({"addr": '"a@b"@c.example'}).domain() == "c.example"

    def test_domain_without_at(self):
        assert Mailbox.parse("postmaster").domain() == ""

    def test_immutable(self):
        mailbox = Mailbox.parse("a@b.com")
        with pytest.raises(dataclasses.FrozenInstanceError):
            mailbox.address = "c@d.com"  # type: ignore[misc]


class TestMailboxLineSafety:
    @pytest.mark.parametrize(
        "value",
        [
            "victim@x.com\r\nBcc: spy@evil.com",
            "victim@x.com\nBcc: spy@evil.com",
            "Name <victim@x.com\rX: 1>",
            "Name <a@b.com",
            "a@b.com>",
        ],
    )
    def test_text_address_with_line_break_or_bracket(self, value):
        with pytest.raises(InvalidMailbox):
            Mailbox.parse(value)

    @pytest.mark.parametrize(
        "address",
        [
            "a@b.com>\r\nX-Injected: 1\r\nX-Tail: <z",
            "a@b.com\r\nBcc: spy@evil.com",
            "<a@b.com>",
        ],
    )
    def test_mapping_address_with_line_break_or_bracket(self, address):
        with pytest.raises(InvalidMailbox):
            Mailbox.parse({"addr": address})

    def test_display_name_with_line_break(self):
        with pytest.raises(InvalidMailbox):
            Mailbox.parse({"addr": "a@b.com", "name": "Eve\r\nBcc: spy@evil.com"})

    def test_direct_instance_is_rechecked(self):
        unsafe = Mailbox(address="a@b.com\r\nBcc: spy@evil.com")
        assert not unsafe.is_header_safe()
        with pytest.raises(InvalidMailbox):
            Mailbox.parse(unsafe, role=MailboxRole.FROM)

    def test_safe_mailbox(self):
        assert Mailbox.parse("Jane <jane@example.com>").is_header_safe()
