#!/usr/bin/env python3
"""
Unit tests for client/ui/chat_window.py

Tests the widget behaviour that does not need a server:
- Input forwarding and blank-line filtering
- Transcript rendering
- Window behaviour before a connection exists
"""

import os
import unittest
from unittest.mock import Mock

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication
from client.ui.chat_window import ChatWidget, ChatWindow
from client.utils.config import ClientConfig


class QtTestCase(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        """Create QApplication once for all tests."""
        if not QApplication.instance():
            cls.app = QApplication([])
        else:
            cls.app = QApplication.instance()


class TestChatWidget(QtTestCase):
    """Test cases for the chat widget."""

    def setUp(self):
        self.chat_widget = ChatWidget()
        self.sent = Mock()
        self.chat_widget.message_sent.connect(self.sent)

    def test_send_message_emits_and_clears(self):
        self.chat_widget.input_field.setText("hello room")
        self.chat_widget.send_message()

        self.sent.assert_called_once_with("hello room")
        self.assertEqual("", self.chat_widget.input_field.text())

    def test_blank_input_is_ignored(self):
        self.chat_widget.input_field.setText("   ")
        self.chat_widget.send_message()

        self.sent.assert_not_called()
        self.assertEqual("   ", self.chat_widget.input_field.text())

    def test_add_line_shows_markup_as_text(self):
        self.chat_widget.add_line("mallory: <b>bold</b> & co")
        self.assertIn("mallory: <b>bold</b> & co", self.chat_widget.transcript())

    def test_system_lines_are_timestamped(self):
        self.chat_widget.add_line("Connected to server", is_system=True)
        self.assertRegex(self.chat_widget.transcript(), r"\[\d{2}:\d{2}\] Connected to server")


class TestChatWindow(QtTestCase):
    """Test cases for the main window without a network thread."""

    def setUp(self):
        self.window = ChatWindow(ClientConfig(host='127.0.0.1', port=12345))

    def tearDown(self):
        self.window.close()

    def test_title_names_server(self):
        self.assertIn("127.0.0.1:12345", self.window.windowTitle())
        self.assertEqual("Disconnected", self.window.status_label.text())

    def test_send_without_connection(self):
        self.window.on_send_message("1")
        self.assertIn("Not connected to server", self.window.chat_widget.transcript())

    def test_server_lines_reach_transcript(self):
        self.window.handle_line("--- Chatroom ---")
        self.assertIn("--- Chatroom ---", self.window.chat_widget.transcript())

    def test_connected_updates_status(self):
        self.window.on_connected()
        self.assertEqual("Connected to 127.0.0.1:12345", self.window.status_label.text())
        self.window.on_disconnected()
        self.assertEqual("Disconnected", self.window.status_label.text())


if __name__ == '__main__':
    unittest.main()
