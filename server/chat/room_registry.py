"""
Room registry module.

Tracks every live room by its 6-digit ID and hands out the port slot each
room is associated with.
"""

import asyncio
import random
from typing import Dict, Iterable, Optional

from common.constants import DEFAULT_ROOM_PORT_START, ROOM_ID_DIGITS
from server.chat.room import Room
from server.utils.logger import logger


class RoomRegistry:
    """Coroutine-safe in-memory room registry."""

    def __init__(self, room_port_start: int = DEFAULT_ROOM_PORT_START,
                 id_digits: int = ROOM_ID_DIGITS, rng: Optional[random.Random] = None):
        self._rooms: Dict[str, Room] = {}  # room_id -> Room, in creation order
        self._room_port_start = room_port_start
        self._next_port = room_port_start
        self._id_digits = id_digits
        self._id_space = 10 ** id_digits
        self._rng = rng or random.Random()
        self.lock = asyncio.Lock()

    # ---------- public API ---------- #

    async def create_room(self, name: str, password: Optional[str] = None, is_private: bool = False,
                          allowed_users: Iterable[str] = ()) -> Room:
        """Allocate an unused ID and the next port slot, then register the room."""
        async with self.lock:
            room_id = self._fresh_id()
            port = self._next_port
            self._next_port += 1
            room = Room(room_id, name, port, is_private, password, allowed_users)
            self._rooms[room_id] = room

        logger.log_room_created(room_id, name, port, is_private)
        return room

    async def get_by_id(self, room_id: str) -> Optional[Room]:
        async with self.lock:
            return self._rooms.get(room_id)

    async def get_by_name(self, name: str) -> Optional[Room]:
        """
        First room, in creation order, whose display name equals ``name``.

        Names are not unique, so when several rooms share one this is only
        a best-effort match.
        """
        async with self.lock:
            for room in self._rooms.values():
                if room.name == name:
                    return room
            return None

    async def resolve(self, identifier: str) -> Optional[Room]:
        """Look ``identifier`` up as a room ID first, then as a display name."""
        room = await self.get_by_id(identifier)
        if room is None:
            room = await self.get_by_name(identifier)
        return room

    async def list_rooms(self) -> Dict[str, Room]:
        """Independent copy of the room_id -> Room mapping."""
        async with self.lock:
            return dict(self._rooms)

    async def reset(self) -> None:
        """Drop every room and restart port allocation. Administrative use only."""
        async with self.lock:
            self._rooms.clear()
            self._next_port = self._room_port_start
        logger.info("Room registry reset")

    def __len__(self) -> int:
        return len(self._rooms)

    # ---------- helpers ---------- #

    def _fresh_id(self) -> str:
        if len(self._rooms) >= self._id_space:
            raise RuntimeError("Room ID space exhausted")
        while True:
            room_id = f"{self._rng.randrange(self._id_space):0{self._id_digits}d}"
            if room_id not in self._rooms:
                return room_id
