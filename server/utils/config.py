"""
Server configuration module.

This module handles server-side configuration settings.
"""

from common.constants import (
    DEFAULT_SERVER_HOST, DEFAULT_PORT, DEFAULT_ROOM_PORT_START, ROOM_ID_DIGITS,
    OUTBOUND_QUEUE_SIZE, MAX_LINE_LENGTH
)


class ServerConfig:
    """Server configuration class."""

    def __init__(self, host: str = DEFAULT_SERVER_HOST, port: int = DEFAULT_PORT,
                 room_port_start: int = DEFAULT_ROOM_PORT_START):
        self.host = host
        self.port = port

        # Room settings
        self.room_port_start = room_port_start
        self.room_id_digits = ROOM_ID_DIGITS

        # Session settings
        self.outbound_queue_size = OUTBOUND_QUEUE_SIZE
        self.max_line_length = MAX_LINE_LENGTH

    def get_connection_info(self):
        """Get connection information."""
        return {
            'host': self.host,
            'port': self.port
        }

    def get_room_settings(self):
        """Get room allocation settings."""
        return {
            'room_port_start': self.room_port_start,
            'room_id_digits': self.room_id_digits
        }
