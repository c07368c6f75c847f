"""
Online user directory.

Maps usernames to the sessions currently holding them. Entries are weak
references: the connection handler owns its session and the directory only
indexes it, so a session that is dropped without unregistering disappears
from the directory on its own.
"""

import asyncio
import weakref
from typing import Dict, Optional

from server.chat.errors import NameTaken


class UserDirectory:
    """Process-wide username -> session index, one session per name."""

    def __init__(self):
        self._users: "weakref.WeakValueDictionary[str, object]" = weakref.WeakValueDictionary()
        self.lock = asyncio.Lock()

    async def register(self, username: str, session) -> None:
        """Claim ``username`` for ``session``; raises NameTaken if it is held."""
        async with self.lock:
            if self._users.get(username) is not None:
                raise NameTaken(username)
            self._users[username] = session

    async def unregister(self, username: str) -> None:
        """Release ``username``. Safe to call when it is not registered."""
        async with self.lock:
            self._users.pop(username, None)

    async def is_online(self, username: str) -> bool:
        async with self.lock:
            return self._users.get(username) is not None

    async def lookup(self, username: str) -> Optional[object]:
        async with self.lock:
            return self._users.get(username)

    async def snapshot(self) -> Dict[str, object]:
        """Return an independent copy of the username -> session mapping."""
        async with self.lock:
            return dict(self._users.items())

    def __len__(self) -> int:
        return len(self._users)
