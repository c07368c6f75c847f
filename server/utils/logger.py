"""
Server logging module.

This module handles server-side logging functionality.
"""

import logging
from datetime import datetime
from pathlib import Path

from common.constants import LOG_DIR, ROOM_EVENTS_LOG_FILE


class ServerLogger:
    """Server logging class."""

    def __init__(self, logs_dir: str = LOG_DIR, log_level: int = logging.INFO):
        self.logs_dir = Path(logs_dir)
        self.logs_dir.mkdir(exist_ok=True)

        # Set up main logger
        self.logger = logging.getLogger('chatroom_server')
        self.logger.setLevel(log_level)

        # Remove existing handlers
        for handler in self.logger.handlers[:]:
            self.logger.removeHandler(handler)

        # Create console handler
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)

        # Create formatter
        formatter = logging.Formatter(
            '%(asctime)s [%(levelname)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        console_handler.setFormatter(formatter)

        # Add handler to logger
        self.logger.addHandler(console_handler)

        # Set up file paths
        self.room_events_log_path = self.logs_dir / ROOM_EVENTS_LOG_FILE

    def set_level(self, log_level: int):
        """Change the level of the logger and all of its handlers."""
        self.logger.setLevel(log_level)
        for handler in self.logger.handlers:
            handler.setLevel(log_level)

    def info(self, message: str):
        """Log info message."""
        self.logger.info(message)

    def error(self, message: str):
        """Log error message."""
        self.logger.error(message)

    def warning(self, message: str):
        """Log warning message."""
        self.logger.warning(message)

    def debug(self, message: str):
        """Log debug message."""
        self.logger.debug(message)

    def log_connection(self, addr: tuple):
        """Log client connection."""
        self.info(f"New connection from {addr}")

    def log_register(self, username: str, addr: tuple):
        """Log username registration."""
        self.info(f"User '{username}' registered from {addr}")

    def log_disconnect(self, username: str, addr: tuple):
        """Log client disconnect."""
        self.info(f"User {username or '<unregistered>'} ({addr}) disconnected")

    def log_room_created(self, room_id: str, name: str, port: int, is_private: bool):
        """Log room creation."""
        kind = "private" if is_private else "public"
        self.info(f"Created {kind} chatroom '{name}' with ID: {room_id} on port: {port}")
        self._write_to_file(self.room_events_log_path, f"{datetime.now().isoformat()} | CREATE | {room_id} | {kind} | {name} | PORT: {port}")

    def log_join(self, username: str, room_id: str, name: str):
        """Log room join."""
        self.info(f"User '{username}' joined chatroom '{name}' ({room_id})")
        self._write_to_file(self.room_events_log_path, f"{datetime.now().isoformat()} | JOIN | {room_id} | {username}")

    def log_leave(self, username: str, room_id: str, name: str):
        """Log room leave."""
        self.info(f"User '{username}' left chatroom '{name}' ({room_id})")
        self._write_to_file(self.room_events_log_path, f"{datetime.now().isoformat()} | LEAVE | {room_id} | {username}")

    def log_access_denied(self, username: str, room_id: str):
        """Log a refused join."""
        self.warning(f"User '{username}' denied access to chatroom {room_id}")

    def log_invitation(self, from_user: str, to_user: str, room_name: str, action: str):
        """Log invitation lifecycle (sent, accepted, declined)."""
        self.info(f"Invitation {action}: {from_user} -> {to_user} ('{room_name}')")

    def log_delivery_failure(self, username: str, error: Exception):
        """Log a failed delivery to a single member."""
        self.error(f"Failed to deliver to '{username}': {error}")

    def log_error(self, operation: str, error: Exception):
        """Log error with operation context."""
        self.error(f"Error in {operation}: {error}")

    def _write_to_file(self, file_path: Path, content: str):
        """Write content to log file."""
        try:
            with open(file_path, 'a', encoding='utf-8') as f:
                f.write(content + '\n')
        except OSError as e:
            self.error(f"Failed to write to log file {file_path}: {e}")


# Global logger instance
logger = ServerLogger()
