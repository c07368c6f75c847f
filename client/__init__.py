"""
Client package for LAN Chatrooms.

This package contains all client-side functionality including:
- Console chat client
- PyQt6 chat window
- Configuration and utilities
"""
