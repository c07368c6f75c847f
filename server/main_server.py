#!/usr/bin/env python3
"""
LAN Chatrooms Server - Main Entry Point

Accepts line-based TCP connections and runs one ClientSession task per
client. The user directory and room registry are owned here and shared by
every session.
"""

import argparse
import asyncio
import logging
from typing import Optional, Set

from common.constants import DEFAULT_SERVER_HOST, DEFAULT_PORT, DEFAULT_ROOM_PORT_START
from server.chat.room_registry import RoomRegistry
from server.chat.session import ClientSession
from server.chat.user_directory import UserDirectory
from server.utils.config import ServerConfig
from server.utils.logger import logger


class ChatRoomServer:
    """Main server class that owns the registries and the accept loop."""

    def __init__(self, host: str = DEFAULT_SERVER_HOST, port: int = DEFAULT_PORT,
                 room_port_start: int = DEFAULT_ROOM_PORT_START):
        self.config = ServerConfig(host, port, room_port_start)
        self.directory = UserDirectory()
        self.registry = RoomRegistry(self.config.room_port_start, self.config.room_id_digits)
        self.sessions: Set[ClientSession] = set()
        self._server: Optional[asyncio.AbstractServer] = None

    async def handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        """Handle individual client connection."""
        session = ClientSession(reader, writer, self.directory, self.registry,
                                self.config.outbound_queue_size)
        self.sessions.add(session)
        logger.log_connection(session.addr)

        try:
            await session.run()
        except asyncio.CancelledError:
            logger.info(f"Connection cancelled for {session.addr}")
            await session.disconnect()
        except Exception as e:
            logger.log_error(f"session {session.addr}", e)
            await session.disconnect()
        finally:
            self.sessions.discard(session)

    async def listen(self) -> asyncio.AbstractServer:
        """Bind the listening socket without serving yet."""
        self._server = await asyncio.start_server(
            self.handle_client,
            self.config.host,
            self.config.port,
            limit=self.config.max_line_length
        )
        addr = ', '.join(str(sock.getsockname()) for sock in self._server.sockets)
        logger.info(f"Chat server (Main Menu) listening on {addr}")
        logger.debug(f"Connection settings: {self.config.get_connection_info()}")
        logger.debug(f"Room settings: {self.config.get_room_settings()}")
        return self._server

    @property
    def bound_port(self) -> Optional[int]:
        if self._server is None or not self._server.sockets:
            return None
        return self._server.sockets[0].getsockname()[1]

    async def start(self):
        """Start the server and serve until cancelled."""
        if self._server is None:
            await self.listen()
        async with self._server:
            await self._server.serve_forever()

    async def stop(self):
        """Stop accepting clients and disconnect everyone still connected."""
        logger.info("Shutting down the server...")
        if self._server is not None:
            self._server.close()
        for session in list(self.sessions):
            logger.debug(f"Closing session: {session.get_status()}")
            await session.disconnect()
        if self._server is not None:
            await self._server.wait_closed()
            self._server = None


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='LAN Chatrooms Server')
    parser.add_argument('--host', type=str, default=DEFAULT_SERVER_HOST,
                        help=f'Host to bind to (default: {DEFAULT_SERVER_HOST})')
    parser.add_argument('--port', type=int, default=DEFAULT_PORT,
                        help=f'TCP port for the main menu (default: {DEFAULT_PORT})')
    parser.add_argument('--room-port-start', type=int, default=DEFAULT_ROOM_PORT_START,
                        help=f'First port slot assigned to rooms (default: {DEFAULT_ROOM_PORT_START})')
    parser.add_argument('--log-level', type=str, default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Console log level (default: INFO)')
    return parser


def main(argv=None):
    """Parse arguments and run the server until interrupted."""
    args = build_arg_parser().parse_args(argv)
    logger.set_level(getattr(logging, args.log_level))

    server = ChatRoomServer(host=args.host, port=args.port, room_port_start=args.room_port_start)
    try:
        asyncio.run(server.start())
    except KeyboardInterrupt:
        logger.info("Server shutting down...")
    except OSError as e:
        logger.log_error("server", e)
        raise


if __name__ == "__main__":
    main()
