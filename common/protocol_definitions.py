"""
Protocol definitions for the LAN Chatrooms system.

The wire unit is a single UTF-8 text line. This module builds every line the
server sends so the exact wording lives in one place, and provides the
helpers both sides use to encode and decode lines.
"""

from typing import Iterable, List, Optional

from common.constants import ENCODING, Commands


def encode_line(text: str) -> bytes:
    """Encode one outbound line, appending the terminator."""
    return text.encode(ENCODING) + b'\n'


def decode_line(data: bytes) -> str:
    """Decode one inbound line, stripping the terminator."""
    return data.decode(ENCODING, errors='replace').rstrip('\r\n')


def parse_argument(line: str, command: str) -> Optional[str]:
    """Return the argument of ``command`` in ``line``, or None if it does not match."""
    if not line.startswith(command):
        return None
    return line[len(command):].strip()


# Registration

def create_welcome_lines() -> List[str]:
    return ["", "=== Welcome to the Main Menu ===", "", "Please enter your username:"]


def create_invalid_username_notice() -> str:
    return "Invalid username. Connection closing."


def create_name_taken_notice(username: str) -> str:
    return f"Username '{username}' is already taken. Please choose another:"


# Main menu

def create_main_menu_lines() -> List[str]:
    return [
        "",
        "----------------------------",
        "          Main Menu          ",
        "----------------------------",
        f" {Commands.CREATE_ROOM}. Create a new chatroom",
        f" {Commands.JOIN_ROOM}. Join an existing chatroom",
        f" {Commands.LIST_USERS}. List online users",
        f" {Commands.PRIVATE_CHAT}. Start a private chat with a user",
        f"{Commands.EXIT} - Exit the application",
        "----------------------------",
        "Enter your choice:",
    ]


def create_invalid_choice_notice() -> str:
    return "Invalid choice. Please try again."


def create_goodbye_notice() -> str:
    return "Goodbye!"


def create_room_created_lines(room_id: str) -> List[str]:
    return ["Chatroom created!", f"Chatroom ID: {room_id}"]


def create_room_list_lines(rooms: Iterable) -> List[str]:
    """Render the rooms a user may join, one ``ID: ... | Name: ...`` line each."""
    lines = ["--- Available Chatrooms ---"]
    listed = [f"ID: {room.room_id} | Name: {room.name}" for room in rooms]
    lines.extend(listed or ["No available chatrooms at the moment."])
    lines.append("----------------------------")
    return lines


def create_online_users_lines(usernames: Iterable[str]) -> List[str]:
    return ["--- Online Users ---", *usernames, "---------------------"]


def create_members_lines(room_name: str, usernames: Iterable[str]) -> List[str]:
    return [f"--- Members of {room_name} ---", *usernames, "---------------------"]


# Room membership

def create_joined_notice(room_name: str, room_id: str) -> str:
    return f"Successfully joined the chatroom: {room_name} (ID: {room_id})"


def create_chatroom_banner() -> str:
    return "--- Chatroom ---"


def create_access_denied_notice() -> str:
    return "You are not allowed to join this private chatroom."


def create_wrong_password_notice() -> str:
    return "Incorrect password. Please try again."


def create_room_not_found_notice() -> str:
    return "Chatroom not found. Please try again."


def create_user_joined_announcement(username: str, room_name: str) -> str:
    return f"{username} has joined the chatroom {room_name}"


def create_user_left_announcement(username: str, room_name: str) -> str:
    return f"{username} has left the chatroom {room_name}"


def create_chat_line(username: str, text: str) -> str:
    return f"{username}: {text}"


def create_exit_room_lines() -> List[str]:
    return ["Exiting the chatroom...", "You have returned to the main menu."]


# Private chat invitations

def create_private_room_name(inviter: str, target: str) -> str:
    return f"{inviter} & {target}'s Private Chat"


def create_invitation_lines(from_user: str) -> List[str]:
    return [
        f"User '{from_user}' invites you to a private chat.",
        f"Type '{Commands.ACCEPT}{from_user}' to join or '{Commands.DECLINE}{from_user}' to decline.",
    ]


def create_invitation_sent_notice(target: str) -> str:
    return f"Invitation sent to '{target}'. Waiting for their response..."


def create_user_offline_notice(username: str) -> str:
    return f"User '{username}' is not online."


def create_self_invitation_notice() -> str:
    return "You cannot start a private chat with yourself."


def create_invitation_accepted_notice(room_name: str) -> str:
    return f"You have accepted the invitation and joined the chatroom: {room_name}"


def create_inviter_accepted_notice(username: str) -> str:
    return f"User '{username}' has accepted your invitation."


def create_invitation_declined_notice(from_user: str) -> str:
    return f"You have declined the invitation from '{from_user}'."


def create_inviter_declined_notice(username: str) -> str:
    return f"User '{username}' has declined your invitation."


def create_no_invitation_notice(from_user: str) -> str:
    return f"No invitation found from '{from_user}'."


# Generic

def create_invalid_input_notice() -> str:
    return "Invalid input. Please try again."


def create_line_too_long_notice() -> str:
    return "Message too large."


def create_not_in_room_notice() -> str:
    return "You are not in a chatroom."
