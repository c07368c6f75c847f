#!/usr/bin/env python3
"""
Unit tests for server/chat/room.py

Covers membership, broadcasting and access control:
- Joining and leaving, including duplicate joins
- Broadcast fan-out with and without a sender
- Private room allow-list enforcement
- Isolation of failing members
"""

import asyncio
import random
import unittest
from collections import Counter

from server.chat.errors import AccessDenied, InvalidMessage
from server.chat.room import Room
from tests.fakes import BrokenSession, FakeSession

DENIAL = "You are not allowed to join this private chatroom."


class TestRoomMembership(unittest.IsolatedAsyncioTestCase):
    """Test cases for joining and leaving a room."""

    async def asyncSetUp(self):
        """Set up a public room and two clients."""
        self.room = Room("000001", "TestRoom", 12345, is_private=False, password="password123")
        self.client1 = FakeSession("J4RVIS")
        self.client2 = FakeSession("David")

    async def test_add_member(self):
        await self.room.add_member(self.client1)
        self.assertIn("J4RVIS", await self.room.list_members())

    async def test_remove_member(self):
        await self.room.add_member(self.client1)
        await self.room.remove_member(self.client1)
        self.assertNotIn("J4RVIS", await self.room.list_members())

    async def test_remove_non_member_is_noop(self):
        await self.room.add_member(self.client1)
        removed = await self.room.remove_member(self.client2)

        self.assertFalse(removed)
        self.assertEqual(["J4RVIS"], await self.room.list_members())
        self.assertEqual([], self.client1.messages)

    async def test_remove_member_from_empty_room(self):
        self.assertFalse(await self.room.remove_member(self.client1))

    async def test_add_none_member_raises(self):
        with self.assertRaises(AttributeError):
            await self.room.add_member(None)

    async def test_list_members_when_empty(self):
        self.assertEqual([], await self.room.list_members())

    async def test_add_same_member_multiple_times(self):
        """Re-adding a session keeps both entries."""
        await self.room.add_member(self.client1)
        await self.room.add_member(self.client1)
        self.assertEqual(2, len(await self.room.list_members()))

    async def test_remove_deletes_single_entry(self):
        await self.room.add_member(self.client1)
        await self.room.add_member(self.client1)
        await self.room.remove_member(self.client1)
        self.assertEqual(["J4RVIS"], await self.room.list_members())

    async def test_join_and_leave_announcements(self):
        await self.room.add_member(self.client1)
        await self.room.add_member(self.client2)
        self.assertEqual("David has joined the chatroom TestRoom", self.client1.last_message)
        self.assertEqual([], self.client2.messages)

        await self.room.remove_member(self.client2)
        self.assertEqual("David has left the chatroom TestRoom", self.client1.last_message)
        self.assertEqual([], self.client2.messages)

    async def test_list_members_is_a_snapshot(self):
        await self.room.add_member(self.client1)
        members = await self.room.list_members()
        members.append("intruder")
        self.assertEqual(["J4RVIS"], await self.room.list_members())

    async def test_membership_matches_net_adds_and_removes(self):
        """Random add/remove sequences leave exactly the net multiset."""
        rng = random.Random(1234)
        sessions = [FakeSession(name) for name in ("a", "b", "c", "d")]
        expected = Counter()

        for _ in range(200):
            session = rng.choice(sessions)
            if rng.random() < 0.6:
                await self.room.add_member(session)
                expected[session.username] += 1
            else:
                await self.room.remove_member(session)
                if expected[session.username]:
                    expected[session.username] -= 1

        self.assertEqual(+expected, Counter(await self.room.list_members()))

    async def test_concurrent_joins_all_land(self):
        sessions = [FakeSession(f"user{i}") for i in range(50)]
        await asyncio.gather(*(self.room.add_member(s) for s in sessions),
                             *(self.room.broadcast("tick") for _ in range(10)))
        self.assertEqual(50, len(await self.room.list_members()))


class TestRoomBroadcast(unittest.IsolatedAsyncioTestCase):
    """Test cases for message fan-out."""

    async def asyncSetUp(self):
        self.room = Room("000002", "TestRoom", 12345, password="password123")
        self.sender = FakeSession("sender")
        self.alice = FakeSession("alice")
        self.bob = FakeSession("bob")
        for session in (self.sender, self.alice, self.bob):
            await self.room.add_member(session)
        for session in (self.sender, self.alice, self.bob):
            session.clear()

    async def test_broadcast_skips_sender(self):
        delivered = await self.room.broadcast("Hello, everyone!", self.sender)

        self.assertEqual(2, delivered)
        self.assertEqual(["Hello, everyone!"], self.alice.messages)
        self.assertEqual(["Hello, everyone!"], self.bob.messages)
        self.assertIsNone(self.sender.last_message)

    async def test_broadcast_from_none_sender_reaches_everyone(self):
        await self.room.broadcast("System maintenance scheduled.", None)
        for session in (self.sender, self.alice, self.bob):
            self.assertEqual("System maintenance scheduled.", session.last_message)

    async def test_broadcast_with_no_members(self):
        empty = Room("000003", "Empty", 12346)
        self.assertEqual(0, await empty.broadcast("Hello!", None))

    async def test_null_message_broadcast_raises(self):
        with self.assertRaises(InvalidMessage):
            await self.room.broadcast(None, self.sender)
        with self.assertRaises(InvalidMessage):
            await Room("000004", "Empty", 12347).broadcast(None, None)
        self.assertEqual([], self.alice.messages)

    async def test_failing_member_does_not_stop_delivery(self):
        broken = BrokenSession("ghost")
        await self.room.add_member(broken)
        late = FakeSession("late")
        await self.room.add_member(late)

        delivered = await self.room.broadcast("still here", self.sender)

        self.assertEqual(3, delivered)
        self.assertEqual("still here", self.alice.last_message)
        self.assertEqual("still here", self.bob.last_message)
        self.assertEqual("still here", late.last_message)


class TestRoomAccess(unittest.IsolatedAsyncioTestCase):
    """Test cases for public and private access control."""

    async def asyncSetUp(self):
        self.client1 = FakeSession("J4RVIS")
        self.client2 = FakeSession("David")

    async def test_private_room_access(self):
        room = Room("000010", "PrivateRoom", 12346, is_private=True, allowed_users={"J4RVIS"})

        self.assertTrue(await room.add_member(self.client1))
        self.assertIn("J4RVIS", await room.list_members())

        self.assertFalse(await room.add_member(self.client2))
        self.assertNotIn("David", await room.list_members())
        self.assertEqual(DENIAL, self.client2.last_message)
        self.assertEqual(1, len(self.client2.messages))

    async def test_rejected_join_is_not_announced(self):
        room = Room("000011", "SecretRoom", 12347, is_private=True, allowed_users={"J4RVIS"})
        await room.add_member(self.client1)
        self.client1.clear()

        await room.add_member(self.client2)
        self.assertEqual([], self.client1.messages)

    async def test_allow_admits_user(self):
        room = Room("000012", "SecretRoom", 12347, is_private=True, allowed_users={"Alice"})
        await room.allow("David")
        self.assertTrue(await room.add_member(self.client2))
        self.assertEqual({"Alice", "David"}, room.allowed_users)

    async def test_allow_list_ignored_for_public_room(self):
        room = Room("000013", "TestRoom", 12345, password="password123")
        room.allowed_users.add("J4RVIS")
        await room.add_member(self.client2)
        self.assertIn("David", await room.list_members())

    async def test_public_room_attributes(self):
        room = Room("000014", "TestRoom", 12345, password="password123")
        self.assertEqual("TestRoom", room.name)
        self.assertEqual(12345, room.port)
        self.assertEqual("password123", room.password)
        self.assertFalse(room.is_private)
        self.assertEqual(set(), room.allowed_users)

    async def test_check_access_password(self):
        room = Room("000015", "TestRoom", 12345, password="password123")
        room.check_access("David", "password123")
        with self.assertRaises(AccessDenied) as ctx:
            room.check_access("David", "wrong")
        self.assertEqual("Incorrect password. Please try again.", str(ctx.exception))

    async def test_check_access_private(self):
        room = Room("000016", "SecretRoom", 12347, is_private=True, allowed_users={"Alice"})
        room.check_access("Alice")
        with self.assertRaises(AccessDenied) as ctx:
            room.check_access("Bob", "anything")
        self.assertEqual(DENIAL, str(ctx.exception))


if __name__ == '__main__':
    unittest.main()
