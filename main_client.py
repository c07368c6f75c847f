#!/usr/bin/env python3
"""
LAN Chatrooms Client - Main Entry Point

Usage:
    python main_client.py [--server-ip HOST] [--port PORT] [--username NAME] [--cli]

Modes:
    (default)    Launch the PyQt6 chat window
    --cli        Launch the console client
"""

import argparse
import asyncio
import sys

from common.constants import DEFAULT_HOST, DEFAULT_PORT
from client.utils.config import ClientConfig
from client.utils.logger import logger


def run_gui_client(config: ClientConfig):
    """Run the GUI client."""
    try:
        from client.ui.chat_window import main as run_window
    except ImportError:
        logger.error("PyQt6 not installed. Install with: pip install PyQt6")
        sys.exit(1)

    run_window(config)


def run_cli_client(config: ClientConfig):
    """Run the console client."""
    from client.chat.chat_client import ChatClient

    client = ChatClient(config)
    try:
        asyncio.run(client.interactive_mode())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='LAN Chatrooms Client')
    parser.add_argument('--username', type=str, default=None,
                        help='Username sent right after connecting (GUI only; default: type it in)')
    parser.add_argument('--server-ip', type=str, default=DEFAULT_HOST,
                        help=f'Server IP address (default: {DEFAULT_HOST})')
    parser.add_argument('--port', type=int, default=DEFAULT_PORT,
                        help=f'Server port (default: {DEFAULT_PORT})')
    parser.add_argument('--cli', action='store_true',
                        help='Run in command-line mode (GUI is default)')
    return parser


def main(argv=None):
    """Main entry point."""
    args = build_arg_parser().parse_args(argv)
    config = ClientConfig(args.server_ip, args.port, args.username)

    if args.cli:
        run_cli_client(config)
    else:
        run_gui_client(config)


if __name__ == "__main__":
    main()
