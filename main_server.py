#!/usr/bin/env python3
"""
LAN Chatrooms Server - Main Entry Point

Usage:
    python main_server.py

Optional arguments:
    --host HOST              Bind address (default: 0.0.0.0)
    --port PORT              Main menu TCP port (default: 12345)
    --room-port-start PORT   First port slot handed to rooms (default: 20000)
    --log-level LEVEL        Console log level (default: INFO)
"""

if __name__ == "__main__":
    from server.main_server import main

    main()
