"""
Chat client module.

A console client for the line protocol: every server line is printed as it
arrives and every non-blank line typed by the user is sent to the server.
"""

import asyncio
import sys
import threading
from typing import Callable, Optional

from common.protocol_definitions import encode_line, decode_line
from client.utils.config import ClientConfig
from client.utils.logger import logger


class ChatClient:
    """Client-side chat functionality."""

    def __init__(self, config: Optional[ClientConfig] = None,
                 output: Callable[[str], None] = print):
        self.config = config or ClientConfig()
        self.output = output
        self.reader: Optional[asyncio.StreamReader] = None
        self.writer: Optional[asyncio.StreamWriter] = None

    async def connect(self) -> bool:
        """Open the connection to the server."""
        host, port = self.config.host, self.config.port
        try:
            self.reader, self.writer = await asyncio.wait_for(
                asyncio.open_connection(host, port),
                timeout=self.config.connect_timeout
            )
        except (asyncio.TimeoutError, OSError) as e:
            logger.log_connection(host, port, False)
            logger.log_error("connect", e)
            return False

        logger.log_connection(host, port, True)
        return True

    async def send_line(self, line: str) -> bool:
        """Send one line to the server."""
        if not self.writer:
            logger.error("Not connected to server")
            return False

        try:
            self.writer.write(encode_line(line))
            await self.writer.drain()
            logger.log_line_sent(line)
            return True
        except (ConnectionError, OSError) as e:
            logger.log_error("send", e)
            return False

    async def receive_loop(self):
        """Print server lines until the server closes the connection."""
        try:
            while True:
                data = await self.reader.readline()
                if not data:
                    break
                self.output(decode_line(data))
        except (ConnectionError, OSError) as e:
            logger.log_error("receive", e)
        logger.log_disconnect(self.config.host, self.config.port)

    async def relay_input(self, read_line: Callable[[], str]):
        """Forward non-blank lines from ``read_line`` until end of input."""
        loop = asyncio.get_running_loop()
        lines: asyncio.Queue = asyncio.Queue()

        # Console reads block, so they run on a daemon thread.
        def pump():
            while True:
                line = read_line()
                try:
                    loop.call_soon_threadsafe(lines.put_nowait, line)
                except RuntimeError:
                    return
                if not line:
                    return

        threading.Thread(target=pump, daemon=True).start()

        while True:
            line = await lines.get()
            if not line:
                break
            line = line.rstrip('\r\n')
            if line.strip() and not await self.send_line(line):
                break

    async def interactive_mode(self, read_line: Callable[[], str] = sys.stdin.readline):
        """Run until the user exits or the server hangs up."""
        if not await self.connect():
            self.output("Unable to connect to the server.")
            return

        receiver = asyncio.create_task(self.receive_loop())
        sender = asyncio.create_task(self.relay_input(read_line))
        await asyncio.wait({receiver, sender}, return_when=asyncio.FIRST_COMPLETED)

        if sender.done():
            # Input ended; give the server a moment to flush before hanging up.
            await asyncio.wait({receiver}, timeout=2)
        else:
            sender.cancel()
        if not receiver.done():
            receiver.cancel()
        await self.close()

    async def close(self):
        if self.writer is None:
            return
        try:
            self.writer.close()
            await self.writer.wait_closed()
        except (ConnectionError, OSError) as e:
            logger.debug(f"Error while closing: {e}")
        self.writer = None
