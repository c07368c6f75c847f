"""
Private chat invitations.

Each session owns one InvitationTracker holding the invitations it has
received, keyed by inviter. A second invitation from the same inviter
replaces the first; invitations never expire.
"""

import asyncio
from typing import Dict, Optional

from common.protocol_definitions import (
    create_invitation_lines, create_invitation_accepted_notice,
    create_inviter_accepted_notice, create_invitation_declined_notice,
    create_inviter_declined_notice, create_no_invitation_notice
)
from server.chat.errors import NoSuchInvitation, RoomNotFound
from server.chat.room import Room
from server.chat.room_registry import RoomRegistry
from server.chat.user_directory import UserDirectory
from server.utils.logger import logger


class InvitationTracker:
    """Pending invitations for one recipient session."""

    def __init__(self, session, registry: RoomRegistry, directory: UserDirectory):
        self.session = session
        self.registry = registry
        self.directory = directory
        self.pending: Dict[str, str] = {}  # inviter username -> room name
        self.lock = asyncio.Lock()

    async def receive_invitation(self, from_user: str, room_name: str) -> None:
        """Record an invitation from ``from_user`` and tell the recipient how to answer."""
        async with self.lock:
            self.pending[from_user] = room_name

        logger.log_invitation(from_user, self.session.username, room_name, "sent")
        for line in create_invitation_lines(from_user):
            _notify(self.session, line)

    async def accept(self, from_user: str) -> Room:
        """
        Consume the invitation from ``from_user`` and join its room.

        Raises NoSuchInvitation when there is nothing to accept and
        RoomNotFound when the room has gone away. The recipient is added to
        the room's allow-list before joining so both parties stay authorized.
        """
        async with self.lock:
            room_name = self.pending.pop(from_user, None)
        if room_name is None:
            raise NoSuchInvitation(from_user)

        room = await self.registry.get_by_name(room_name)
        if room is None:
            raise RoomNotFound(room_name)

        username = self.session.username
        await room.allow(username)
        await room.add_member(self.session)
        _notify(self.session, create_invitation_accepted_notice(room.name))
        logger.log_invitation(from_user, username, room_name, "accepted")

        inviter = await self.directory.lookup(from_user)
        if inviter is not None:
            _notify(inviter, create_inviter_accepted_notice(username))
        return room

    async def decline(self, from_user: str) -> bool:
        """Drop the invitation from ``from_user``. Returns False if there was none."""
        async with self.lock:
            room_name = self.pending.pop(from_user, None)

        if room_name is None:
            _notify(self.session, create_no_invitation_notice(from_user))
            return False

        username = self.session.username
        _notify(self.session, create_invitation_declined_notice(from_user))
        logger.log_invitation(from_user, username, room_name, "declined")

        inviter = await self.directory.lookup(from_user)
        if inviter is not None:
            _notify(inviter, create_inviter_declined_notice(username))
        return True

    def pending_from(self, from_user: str) -> Optional[str]:
        return self.pending.get(from_user)

    def __len__(self) -> int:
        return len(self.pending)


def _notify(session, text: str) -> None:
    try:
        session.deliver(text)
    except Exception as e:
        logger.log_delivery_failure(getattr(session, 'username', '?'), e)
