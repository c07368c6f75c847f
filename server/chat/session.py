"""
Client session module.

One ClientSession runs per connection. It reads command lines, drives the
user directory, room registry and rooms, and owns the outbound queue that
carries every line delivered to its client.
"""

import asyncio
from typing import Dict, List, Optional

from common.constants import Commands, Prompts, OUTBOUND_QUEUE_SIZE, CLOSE_FLUSH_TIMEOUT
from common.protocol_definitions import (
    encode_line, decode_line, parse_argument,
    create_welcome_lines, create_invalid_username_notice, create_main_menu_lines,
    create_invalid_choice_notice, create_goodbye_notice, create_room_created_lines,
    create_room_list_lines, create_online_users_lines, create_members_lines,
    create_joined_notice, create_chatroom_banner, create_chat_line,
    create_exit_room_lines, create_private_room_name, create_invitation_sent_notice,
    create_self_invitation_notice, create_line_too_long_notice, create_not_in_room_notice
)
from server.chat.errors import (
    ChatRejection, NameTaken, InvalidMessage, InvalidInput, RoomNotFound, UserOffline
)
from server.chat.invitations import InvitationTracker
from server.chat.room import Room
from server.chat.room_registry import RoomRegistry
from server.chat.user_directory import UserDirectory
from server.utils.logger import logger


class ClientSession:
    """Per-connection actor bridging a line-based transport and the chat core."""

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter,
                 directory: UserDirectory, registry: RoomRegistry,
                 outbound_queue_size: int = OUTBOUND_QUEUE_SIZE):
        self.reader = reader
        self.writer = writer
        self.directory = directory
        self.registry = registry
        self.addr = writer.get_extra_info('peername')

        self.username: Optional[str] = None
        self.room: Optional[Room] = None
        self.invitations = InvitationTracker(self, registry, directory)

        self.outbound: asyncio.Queue = asyncio.Queue(maxsize=outbound_queue_size)
        self._writer_task: Optional[asyncio.Task] = None
        self.closed = False
        self._disconnected = False

    def __repr__(self):
        return f"<ClientSession {self.username or '<unregistered>'} {self.addr}>"

    # ---------- transport ---------- #

    def deliver(self, text: str) -> None:
        """
        Queue one line for the client without waiting for the network.

        Raises ConnectionError once the session is closed and
        asyncio.QueueFull when the client has stopped reading.
        """
        if self.closed:
            raise ConnectionError(f"session for {self.username!r} is closed")
        self.outbound.put_nowait(text)

    def deliver_lines(self, lines: List[str]) -> None:
        for line in lines:
            self.deliver(line)

    async def _writer_loop(self):
        """Drain the outbound queue onto the socket until the close sentinel arrives."""
        try:
            while True:
                text = await self.outbound.get()
                if text is None:
                    break
                self.writer.write(encode_line(text))
                await self.writer.drain()
        except (ConnectionError, OSError) as e:
            logger.warning(f"Write to {self.addr} failed: {e}")
            self.closed = True

    async def read_line(self) -> Optional[str]:
        """Next input line without its terminator, or None at end of stream."""
        while True:
            try:
                data = await self.reader.readuntil(b'\n')
            except asyncio.IncompleteReadError as e:
                data = e.partial
            except asyncio.LimitOverrunError as e:
                logger.warning(f"Oversized line from {self.addr}")
                if not await self._skip_oversized_line(e.consumed):
                    return None
                self.deliver(create_line_too_long_notice())
                continue
            if not data:
                return None
            return decode_line(data)

    async def _skip_oversized_line(self, consumed: int) -> bool:
        """
        Drop an overlong line through its terminator, however many chunks it
        arrives in. Returns False if the stream ends first.
        """
        while True:
            try:
                await self.reader.readexactly(consumed)
                await self.reader.readuntil(b'\n')
                return True
            except asyncio.LimitOverrunError as e:
                consumed = e.consumed
            except asyncio.IncompleteReadError:
                return False

    async def prompt(self, text: str) -> str:
        """Send ``text`` and wait for the reply line."""
        self.deliver(text)
        line = await self.read_line()
        if line is None:
            raise ConnectionResetError("client closed the connection")
        return line.strip()

    async def close(self):
        """Flush what is queued (briefly) and close the transport."""
        if self.closed and self._writer_task is None:
            return
        self.closed = True

        if self._writer_task is not None:
            try:
                self.outbound.put_nowait(None)
            except asyncio.QueueFull:
                self._writer_task.cancel()
            done, _ = await asyncio.wait({self._writer_task}, timeout=CLOSE_FLUSH_TIMEOUT)
            if not done:
                self._writer_task.cancel()
            self._writer_task = None

        try:
            self.writer.close()
            await self.writer.wait_closed()
        except (ConnectionError, OSError) as e:
            logger.debug(f"Error closing connection to {self.addr}: {e}")

    # ---------- lifecycle ---------- #

    async def run(self):
        """Serve the connection until the client exits or the stream ends."""
        self._writer_task = asyncio.create_task(self._writer_loop())
        try:
            if await self._registration():
                await self._command_loop()
        except (ConnectionError, OSError) as e:
            logger.info(f"Connection with {self.addr} ended: {e}")
        finally:
            await self.disconnect()

    async def _registration(self) -> bool:
        self.deliver_lines(create_welcome_lines())
        while True:
            line = await self.read_line()
            name = line.strip() if line is not None else ''
            if not name:
                self.deliver(create_invalid_username_notice())
                return False
            try:
                await self.register(name)
                return True
            except NameTaken as e:
                self.deliver(str(e))

    async def _command_loop(self):
        self.deliver_lines(create_main_menu_lines())
        while True:
            line = await self.read_line()
            if line is None:
                return
            try:
                if not await self.handle_line(line):
                    return
            except ChatRejection as e:
                self.deliver(str(e))
            if self.room is None:
                self.deliver_lines(create_main_menu_lines())

    async def handle_line(self, line: str) -> bool:
        """Dispatch one input line. Returns False when the client asked to exit."""
        text = line.strip()

        from_user = parse_argument(text, Commands.ACCEPT)
        if from_user is not None:
            await self.accept_invitation(from_user)
            return True
        from_user = parse_argument(text, Commands.DECLINE)
        if from_user is not None:
            await self.decline_invitation(from_user)
            return True

        if self.room is not None:
            await self._handle_room_line(line, text)
            return True

        if text == Commands.CREATE_ROOM:
            await self._create_room_dialog()
        elif text == Commands.JOIN_ROOM:
            self.deliver_lines(create_room_list_lines(await self.list_rooms()))
            await self._join_room_dialog(await self.prompt(Prompts.ROOM_IDENTIFIER))
        elif text == Commands.LIST_USERS:
            self.deliver_lines(create_online_users_lines(await self.list_online_users()))
        elif text == Commands.PRIVATE_CHAT:
            await self.start_private_chat(await self.prompt(Prompts.PRIVATE_TARGET))
        elif text == Commands.EXIT:
            self.deliver(create_goodbye_notice())
            return False
        else:
            self.deliver(create_invalid_choice_notice())
        return True

    async def _handle_room_line(self, line: str, text: str):
        if text.lower() == Commands.EXIT:
            await self.leave_room()
            self.deliver_lines(create_exit_room_lines())
            return

        identifier = parse_argument(text, Commands.JOIN)
        if identifier is not None:
            await self._join_room_dialog(identifier)
        elif text == Commands.MEMBERS:
            self.deliver_lines(create_members_lines(self.room.name, await self.room.list_members()))
        elif text:
            await self.send_room_message(line)

    async def _create_room_dialog(self):
        name = await self.prompt(Prompts.ROOM_NAME)
        if not name:
            raise InvalidInput()
        password = await self.prompt(Prompts.ROOM_PASSWORD)
        room = await self.create_room(name, password)
        self.deliver_lines(create_room_created_lines(room.room_id))

    async def _join_room_dialog(self, identifier: str):
        if not identifier:
            raise InvalidInput()
        room = await self.registry.resolve(identifier)
        if room is None:
            raise RoomNotFound(identifier)
        password = None
        if not room.is_private:
            password = await self.prompt(Prompts.JOIN_PASSWORD)
        await self.join_room(room.room_id, password)

    # ---------- operations ---------- #

    async def register(self, username: str):
        """Claim ``username`` in the directory. Raises InvalidInput or NameTaken."""
        if not username or not username.strip():
            raise InvalidInput(create_invalid_username_notice())
        await self.directory.register(username, self)
        self.username = username
        logger.log_register(username, self.addr)

    async def create_room(self, name: str, password: Optional[str] = None, is_private: bool = False,
                          allowed_users=()) -> Room:
        """Create a room; a private room always admits its creator."""
        allowed = set(allowed_users)
        if is_private:
            allowed.add(self.username)
        return await self.registry.create_room(name, password, is_private, allowed)

    async def join_room(self, identifier: str, password: Optional[str] = None) -> Room:
        """
        Enter the room named by ``identifier`` (ID first, then display name).

        Raises RoomNotFound or AccessDenied without changing any state.
        """
        room = await self.registry.resolve(identifier)
        if room is None:
            raise RoomNotFound(identifier)
        room.check_access(self.username, password)
        await self.enter_room(room)
        return room

    async def enter_room(self, room: Room) -> bool:
        """Move into ``room``, leaving the current room first."""
        if self.room is not None:
            await self.leave_room()
        if not await room.add_member(self):
            return False
        self.room = room
        self.deliver(create_joined_notice(room.name, room.room_id))
        self.deliver(create_chatroom_banner())
        return True

    async def leave_room(self) -> bool:
        room, self.room = self.room, None
        if room is None:
            return False
        await room.remove_member(self)
        return True

    async def list_rooms(self) -> List[Room]:
        """Rooms this user may join: public ones and private ones that admit them."""
        rooms = await self.registry.list_rooms()
        return [room for room in rooms.values() if room.is_allowed(self.username)]

    async def list_online_users(self) -> List[str]:
        return sorted(await self.directory.snapshot())

    async def start_private_chat(self, target: str) -> Room:
        """Open a private room for this user and ``target`` and invite ``target``."""
        if not target:
            raise InvalidInput()
        if target == self.username:
            raise InvalidInput(create_self_invitation_notice())
        target_session = await self.directory.lookup(target)
        if target_session is None:
            raise UserOffline(target)

        room = await self.create_room(create_private_room_name(self.username, target), None,
                                      is_private=True, allowed_users={target})
        await self.enter_room(room)
        await target_session.invitations.receive_invitation(self.username, room.name)
        self.deliver(create_invitation_sent_notice(target))
        return room

    async def accept_invitation(self, from_user: str) -> Room:
        """Join the room ``from_user`` invited this user to. Raises NoSuchInvitation or RoomNotFound."""
        if not from_user:
            raise InvalidInput()
        room = await self.invitations.accept(from_user)
        previous, self.room = self.room, room
        if previous is not None:
            await previous.remove_member(self)
        self.deliver(create_chatroom_banner())
        return room

    async def decline_invitation(self, from_user: str) -> bool:
        if not from_user:
            raise InvalidInput()
        return await self.invitations.decline(from_user)

    async def send_room_message(self, text: Optional[str]) -> int:
        """Broadcast ``text`` to the other members. Raises InvalidMessage for None."""
        if text is None:
            raise InvalidMessage()
        if self.room is None:
            raise InvalidInput(create_not_in_room_notice())
        return await self.room.broadcast(create_chat_line(self.username, text), self)

    async def disconnect(self):
        """Leave the current room, release the username and close the connection."""
        if self._disconnected:
            return
        self._disconnected = True

        await self.leave_room()
        if self.username is not None:
            await self.directory.unregister(self.username)
        logger.log_disconnect(self.username, self.addr)
        await self.close()

    def get_status(self) -> Dict[str, object]:
        return {
            'username': self.username,
            'room': self.room.room_id if self.room else None,
            'pending_invitations': len(self.invitations),
            'queued_lines': self.outbound.qsize(),
        }
