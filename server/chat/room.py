"""
Chat room module.

A Room owns its member list and access policy. Join, leave and broadcast are
serialized on the room's own lock, so every broadcast sees one consistent
member list. Deliveries never await: ``session.deliver`` only queues a line,
which keeps the time the lock is held bounded even when a peer is stalled.
"""

import asyncio
from typing import Iterable, List, Optional, Set

from common.protocol_definitions import (
    create_access_denied_notice, create_wrong_password_notice,
    create_user_joined_announcement, create_user_left_announcement
)
from server.chat.errors import AccessDenied, InvalidMessage
from server.utils.logger import logger


class Room:
    """A named broadcast group, either password-gated or allow-list-gated."""

    def __init__(self, room_id: str, name: str, port: int, is_private: bool = False,
                 password: Optional[str] = None, allowed_users: Iterable[str] = ()):
        self.room_id = room_id
        self.name = name
        self.port = port
        self.is_private = is_private
        self.password = password
        self.allowed_users: Set[str] = set(allowed_users)
        self.members: List[object] = []
        self.lock = asyncio.Lock()

    def __repr__(self):
        kind = "private" if self.is_private else "public"
        return f"<Room {self.room_id} '{self.name}' {kind} members={len(self.members)}>"

    # ---------- access control ---------- #

    def is_allowed(self, username: str) -> bool:
        """Whether ``username`` passes the allow-list (always true for public rooms)."""
        return not self.is_private or username in self.allowed_users

    def check_access(self, username: str, password: Optional[str] = None) -> None:
        """Raise AccessDenied unless ``username`` may enter with ``password``."""
        if self.is_private:
            if username not in self.allowed_users:
                logger.log_access_denied(username, self.room_id)
                raise AccessDenied(create_access_denied_notice())
        elif self.password != password:
            logger.log_access_denied(username, self.room_id)
            raise AccessDenied(create_wrong_password_notice())

    async def allow(self, username: str) -> None:
        """Add ``username`` to the allow-list."""
        async with self.lock:
            self.allowed_users.add(username)

    # ---------- membership ---------- #

    async def add_member(self, session) -> bool:
        """
        Add ``session`` to the room and announce it to the other members.

        A private room refuses users missing from its allow-list: the session
        receives a single denial notice and nothing changes. Adding a session
        that is already a member adds a second entry.
        """
        async with self.lock:
            if not self.is_allowed(session.username):
                logger.log_access_denied(session.username, self.room_id)
                self._deliver(session, create_access_denied_notice())
                return False

            self.members.append(session)
            logger.log_join(session.username, self.room_id, self.name)
            self._broadcast_locked(create_user_joined_announcement(session.username, self.name), session)
            return True

    async def remove_member(self, session) -> bool:
        """Remove one entry for ``session`` and announce the departure. No-op if absent."""
        async with self.lock:
            try:
                self.members.remove(session)
            except ValueError:
                return False

            logger.log_leave(session.username, self.room_id, self.name)
            self._broadcast_locked(create_user_left_announcement(session.username, self.name), session)
            return True

    async def list_members(self) -> List[str]:
        """Snapshot of member usernames."""
        async with self.lock:
            return [member.username for member in self.members]

    # ---------- messaging ---------- #

    async def broadcast(self, message: Optional[str], sender=None) -> int:
        """
        Deliver ``message`` to every member except ``sender``.

        With ``sender=None`` every member receives it (system announcements).
        Returns the number of successful deliveries.
        """
        if message is None:
            raise InvalidMessage()

        async with self.lock:
            return self._broadcast_locked(message, sender)

    def _broadcast_locked(self, message: str, sender) -> int:
        delivered = 0
        for member in self.members:
            if sender is not None and member is sender:
                continue
            if self._deliver(member, message):
                delivered += 1
        return delivered

    @staticmethod
    def _deliver(session, message: str) -> bool:
        try:
            session.deliver(message)
            return True
        except Exception as e:
            logger.log_delivery_failure(getattr(session, 'username', '?'), e)
            return False
