#!/usr/bin/env python3
"""
LAN Chatrooms - Combined Launcher

Starts a server in the background when none is listening on the port yet,
then launches a client against it.
"""

import argparse
import asyncio
import socket
import threading
import time

from common.constants import DEFAULT_HOST, DEFAULT_PORT
from client.utils.config import ClientConfig
from client.utils.logger import logger
from main_client import run_cli_client, run_gui_client


def is_server_running(port: int, host: str = '') -> bool:
    """True if something is already bound to ``port``."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as probe:
        try:
            probe.bind((host, port))
        except OSError:
            return True
    return False


def start_background_server(port: int) -> threading.Thread:
    """Run a ChatRoomServer on its own event loop in a daemon thread."""
    from server.main_server import ChatRoomServer

    def serve():
        server = ChatRoomServer(port=port)
        try:
            asyncio.run(server.start())
        except OSError as e:
            if "Address already in use" not in str(e):
                logger.log_error("background server", e)

    thread = threading.Thread(target=serve, name="chat-server", daemon=True)
    thread.start()

    # Wait briefly for the listener so the client does not race it.
    for _ in range(20):
        if is_server_running(port):
            break
        time.sleep(0.1)
    return thread


def main(argv=None):
    parser = argparse.ArgumentParser(description='LAN Chatrooms - server and client in one')
    parser.add_argument('--port', type=int, default=DEFAULT_PORT,
                        help=f'Server port (default: {DEFAULT_PORT})')
    parser.add_argument('--cli', action='store_true',
                        help='Use the console client instead of the GUI')
    args = parser.parse_args(argv)

    if is_server_running(args.port):
        logger.info("Server is already running. Connecting as a client...")
    else:
        start_background_server(args.port)

    config = ClientConfig(DEFAULT_HOST, args.port)
    if args.cli:
        run_cli_client(config)
    else:
        run_gui_client(config)


if __name__ == "__main__":
    main()
