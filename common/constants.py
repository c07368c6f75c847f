"""
Shared constants for the LAN Chatrooms system.

This module contains all constants used across client and server components.
"""

# Network Configuration
DEFAULT_HOST = 'localhost'
DEFAULT_SERVER_HOST = '0.0.0.0'
DEFAULT_PORT = 12345
DEFAULT_ROOM_PORT_START = 20000

# Rooms
ROOM_ID_DIGITS = 6

# Buffer Sizes
MAX_LINE_LENGTH = 64 * 1024  # Reject input lines longer than 64 KiB
OUTBOUND_QUEUE_SIZE = 1000  # Lines buffered per session before deliveries fail

# Timeouts
CONNECT_TIMEOUT = 10  # seconds
CLOSE_FLUSH_TIMEOUT = 2  # seconds allowed to flush queued lines on disconnect

# Logging
LOG_DIR = 'logs'
ROOM_EVENTS_LOG_FILE = 'room_events.log'

# Text encoding for the line protocol
ENCODING = 'utf-8'


# Commands typed by clients
class Commands:
    # Main menu
    CREATE_ROOM = '1'
    JOIN_ROOM = '2'
    LIST_USERS = '3'
    PRIVATE_CHAT = '4'

    # Available everywhere
    ACCEPT = '/accept '
    DECLINE = '/decline '
    EXIT = '/exit'

    # Inside a room
    JOIN = '/join '
    MEMBERS = '/members'


# Prompts sent by the server before reading a reply
class Prompts:
    ROOM_NAME = 'Enter a name for your chatroom:'
    ROOM_PASSWORD = 'Set a password for your chatroom:'
    ROOM_IDENTIFIER = 'Enter the chatroom ID or name:'
    JOIN_PASSWORD = 'Enter the chatroom password:'
    PRIVATE_TARGET = 'Enter the username of the user you want to chat with:'
