"""
Server package for LAN Chatrooms.

This package contains all server-side functionality including:
- Online user directory
- Room registry and room membership
- Private chat invitations
- Client session handling
- Configuration and utilities
"""
