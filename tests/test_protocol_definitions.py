#!/usr/bin/env python3
"""
Unit tests for common/protocol_definitions.py
"""

import unittest
from types import SimpleNamespace

from common.constants import Commands
from common.protocol_definitions import (
    encode_line, decode_line, parse_argument, create_room_list_lines,
    create_invitation_lines, create_private_room_name, create_main_menu_lines
)


class TestLineCodec(unittest.TestCase):
    """Test cases for line framing."""

    def test_encode_appends_newline(self):
        self.assertEqual(b"alice: hi\n", encode_line("alice: hi"))
        self.assertEqual("héllo\n".encode("utf-8"), encode_line("héllo"))

    def test_decode_strips_crlf(self):
        self.assertEqual("hello", decode_line(b"hello\r\n"))
        self.assertEqual("hello", decode_line(b"hello\n"))
        self.assertEqual("", decode_line(b"\n"))

    def test_decode_keeps_inner_whitespace(self):
        self.assertEqual("  spaced out  ", decode_line(b"  spaced out  \n"))

    def test_decode_replaces_invalid_bytes(self):
        self.assertEqual("bad � byte", decode_line(b"bad \xff byte\n"))


class TestParseArgument(unittest.TestCase):
    """Test cases for command argument extraction."""

    def test_matching_command(self):
        self.assertEqual("alice", parse_argument("/accept alice", Commands.ACCEPT))
        self.assertEqual("Lobby Two", parse_argument("/join   Lobby Two ", Commands.JOIN))

    def test_missing_argument(self):
        self.assertEqual("", parse_argument("/decline ", Commands.DECLINE))

    def test_other_command(self):
        self.assertIsNone(parse_argument("/decline alice", Commands.ACCEPT))
        self.assertIsNone(parse_argument("hello", Commands.JOIN))

    def test_command_prefix_is_case_sensitive(self):
        self.assertIsNone(parse_argument("/ACCEPT alice", Commands.ACCEPT))


class TestMessageBuilders(unittest.TestCase):
    """Test cases for server line builders."""

    def test_room_list(self):
        rooms = [SimpleNamespace(room_id="000042", name="Lobby"),
                 SimpleNamespace(room_id="123456", name="Games")]
        lines = create_room_list_lines(rooms)

        self.assertIn("ID: 000042 | Name: Lobby", lines)
        self.assertIn("ID: 123456 | Name: Games", lines)
        self.assertLess(lines.index("ID: 000042 | Name: Lobby"), lines.index("ID: 123456 | Name: Games"))

    def test_empty_room_list(self):
        self.assertIn("No available chatrooms at the moment.", create_room_list_lines([]))

    def test_invitation_lines_name_commands(self):
        self.assertEqual([
            "User 'bob' invites you to a private chat.",
            "Type '/accept bob' to join or '/decline bob' to decline.",
        ], create_invitation_lines("bob"))

    def test_private_room_name(self):
        self.assertEqual("bob & carol's Private Chat", create_private_room_name("bob", "carol"))

    def test_main_menu_lists_every_choice(self):
        menu = "\n".join(create_main_menu_lines())
        for choice in (Commands.CREATE_ROOM, Commands.JOIN_ROOM, Commands.LIST_USERS,
                       Commands.PRIVATE_CHAT, Commands.EXIT):
            self.assertIn(choice, menu)


if __name__ == '__main__':
    unittest.main()
