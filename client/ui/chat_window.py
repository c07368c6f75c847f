#!/usr/bin/env python3
"""
Chat Window - PyQt6 client for LAN Chatrooms

A graphical front end for the line protocol:
- Transcript of every line the server sends
- Input line forwarding what the user types
- Buttons for the common menu commands
"""

import asyncio
import html
import sys
import threading
from datetime import datetime
from typing import Optional

from PyQt6.QtWidgets import (
    QApplication, QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
    QPushButton, QTextBrowser, QLineEdit, QLabel
)
from PyQt6.QtCore import QThread, pyqtSignal

from common.constants import Commands, DEFAULT_HOST, DEFAULT_PORT
from common.protocol_definitions import encode_line, decode_line
from client.utils.config import ClientConfig
from client.utils.logger import logger


class ChatWidget(QWidget):
    """Chat interface with transcript and input."""

    message_sent = pyqtSignal(str)  # line text

    def __init__(self):
        super().__init__()
        self.setup_ui()

    def setup_ui(self):
        """Setup chat interface UI."""
        layout = QVBoxLayout()
        layout.setSpacing(5)
        layout.setContentsMargins(5, 5, 5, 5)

        self.chat_text = QTextBrowser()
        self.chat_text.setReadOnly(True)
        self.chat_text.setStyleSheet("""
            QTextBrowser {
                background-color: #2C2C2C;
                color: #ECF0F1;
                border: 1px solid #34495E;
                border-radius: 5px;
                padding: 5px;
                font-family: monospace;
                font-size: 10pt;
            }
        """)
        layout.addWidget(self.chat_text)

        # Shortcut buttons for the main menu
        shortcut_layout = QHBoxLayout()
        for label, command in (("Create room", Commands.CREATE_ROOM),
                               ("Join room", Commands.JOIN_ROOM),
                               ("Online users", Commands.LIST_USERS),
                               ("Private chat", Commands.PRIVATE_CHAT),
                               ("Members", Commands.MEMBERS),
                               ("Exit", Commands.EXIT)):
            button = QPushButton(label)
            button.clicked.connect(lambda _checked=False, c=command: self.message_sent.emit(c))
            shortcut_layout.addWidget(button)
        layout.addLayout(shortcut_layout)

        # Input area
        input_layout = QHBoxLayout()

        self.input_field = QLineEdit()
        self.input_field.setPlaceholderText("Type a message or command...")
        self.input_field.setStyleSheet("""
            QLineEdit {
                background-color: #34495E;
                color: #ECF0F1;
                border: 1px solid #2C3E50;
                border-radius: 5px;
                padding: 5px;
            }
        """)
        self.input_field.returnPressed.connect(self.send_message)
        input_layout.addWidget(self.input_field)

        send_btn = QPushButton("Send")
        send_btn.clicked.connect(self.send_message)
        send_btn.setStyleSheet("""
            QPushButton {
                background-color: #3498DB;
                color: white;
                border: none;
                padding: 8px 15px;
                border-radius: 5px;
                font-weight: bold;
            }
            QPushButton:hover {
                background-color: #2980B9;
            }
        """)
        input_layout.addWidget(send_btn)

        layout.addLayout(input_layout)
        self.setLayout(layout)

    def send_message(self):
        """Emit the typed line; blank lines are ignored."""
        text = self.input_field.text()
        if text.strip():
            self.message_sent.emit(text)
            self.input_field.clear()

    def add_line(self, text: str, is_system: bool = False):
        """Append one line to the transcript."""
        if is_system:
            timestamp = datetime.now().strftime("%H:%M")
            self.chat_text.append(f'<span style="color: #95A5A6;">[{timestamp}] {html.escape(text)}</span>')
        else:
            self.chat_text.append(html.escape(text) or '&nbsp;')

        scrollbar = self.chat_text.verticalScrollBar()
        scrollbar.setValue(scrollbar.maximum())

    def transcript(self) -> str:
        return self.chat_text.toPlainText()


class NetworkThread(QThread):
    """Thread for handling network communication."""

    line_received = pyqtSignal(str)
    connected = pyqtSignal()
    disconnected = pyqtSignal()

    def __init__(self, config: ClientConfig):
        super().__init__()
        self.config = config
        self.reader: Optional[asyncio.StreamReader] = None
        self.writer: Optional[asyncio.StreamWriter] = None
        self.loop: Optional[asyncio.AbstractEventLoop] = None
        self.loop_ready = threading.Event()

    def run(self):
        """Run network loop."""
        self.loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self.loop)
        self.loop_ready.set()
        try:
            self.loop.run_until_complete(self._connect_and_listen())
        finally:
            self.loop.close()

    async def _connect_and_listen(self):
        """Connect to server and emit every line it sends."""
        host, port = self.config.host, self.config.port
        try:
            self.reader, self.writer = await asyncio.wait_for(
                asyncio.open_connection(host, port),
                timeout=self.config.connect_timeout
            )
            logger.log_connection(host, port, True)
            self.connected.emit()

            if self.config.username:
                await self.send_line_async(self.config.username)

            while True:
                data = await self.reader.readline()
                if not data:
                    break
                self.line_received.emit(decode_line(data))

        except asyncio.TimeoutError:
            logger.error(f"Connection timeout: could not reach {host}:{port}")
        except (ConnectionError, OSError) as e:
            logger.log_error("network", e)
        finally:
            self.disconnected.emit()
            logger.log_disconnect(host, port)
            if self.writer:
                self.writer.close()

    async def send_line_async(self, line: str):
        """Send one line on the network loop."""
        if not self.writer:
            return
        try:
            self.writer.write(encode_line(line))
            await self.writer.drain()
            logger.log_line_sent(line)
        except (ConnectionError, OSError) as e:
            logger.log_error("send", e)

    def send_line(self, line: str):
        """Send one line from the GUI thread."""
        if not self.loop_ready.wait(timeout=5.0):
            logger.warning("Event loop not ready, line not sent")
            return
        if self.loop and not self.loop.is_closed():
            asyncio.run_coroutine_threadsafe(self.send_line_async(line), self.loop)

    def stop(self):
        """Close the connection; the listen loop then ends on its own."""
        if self.loop and self.writer and not self.loop.is_closed():
            self.loop.call_soon_threadsafe(self.writer.close)


class ChatWindow(QMainWindow):
    """Main application window."""

    def __init__(self, config: Optional[ClientConfig] = None):
        super().__init__()
        self.config = config or ClientConfig()
        self.network: Optional[NetworkThread] = None
        self.setup_ui()

    def setup_ui(self):
        self.setWindowTitle(f"LAN Chatrooms - {self.config.host}:{self.config.port}")
        self.resize(720, 520)

        central = QWidget()
        layout = QVBoxLayout()

        self.status_label = QLabel("Disconnected")
        layout.addWidget(self.status_label)

        self.chat_widget = ChatWidget()
        self.chat_widget.message_sent.connect(self.on_send_message)
        layout.addWidget(self.chat_widget)

        central.setLayout(layout)
        self.setCentralWidget(central)

    def connect_to_server(self) -> bool:
        """Start the network thread."""
        if self.network is not None:
            return False
        self.network = NetworkThread(self.config)
        self.network.line_received.connect(self.handle_line)
        self.network.connected.connect(self.on_connected)
        self.network.disconnected.connect(self.on_disconnected)
        self.network.start()
        return True

    def on_connected(self):
        self.status_label.setText(f"Connected to {self.config.host}:{self.config.port}")
        self.chat_widget.add_line("Connected to server", is_system=True)

    def on_disconnected(self):
        self.status_label.setText("Disconnected")
        self.chat_widget.add_line("Disconnected from server", is_system=True)

    def handle_line(self, line: str):
        self.chat_widget.add_line(line)

    def on_send_message(self, text: str):
        if self.network is None:
            self.chat_widget.add_line("Not connected to server", is_system=True)
            return
        self.network.send_line(text)

    def closeEvent(self, event):
        """Close the connection before the window goes away."""
        if self.network is not None:
            self.network.stop()
            self.network.wait(2000)
        super().closeEvent(event)


def main(config: Optional[ClientConfig] = None):
    """Main entry point."""
    app = QApplication(sys.argv)

    window = ChatWindow(config or ClientConfig(DEFAULT_HOST, DEFAULT_PORT))
    window.show()
    window.connect_to_server()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
