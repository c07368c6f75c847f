"""
Chat error types.

``ChatRejection`` subclasses are ordinary refusals: the session turns the
exception message into a single notice for the acting user. ``InvalidMessage``
signals a programming or protocol error and is left to propagate.
"""

from common.protocol_definitions import (
    create_access_denied_notice, create_room_not_found_notice,
    create_no_invitation_notice, create_user_offline_notice,
    create_name_taken_notice, create_invalid_input_notice
)


class ChatError(Exception):
    """Base class for all chat errors."""


class InvalidMessage(ChatError):
    """A broadcast was attempted without a payload."""

    def __init__(self, message: str = "Cannot broadcast an empty (None) message"):
        super().__init__(message)


class ChatRejection(ChatError):
    """An action was refused; shared state is unchanged."""


class NameTaken(ChatRejection):
    def __init__(self, username: str):
        super().__init__(create_name_taken_notice(username))
        self.username = username


class AccessDenied(ChatRejection):
    def __init__(self, message: str = None):
        super().__init__(message or create_access_denied_notice())


class RoomNotFound(ChatRejection):
    def __init__(self, identifier: str):
        super().__init__(create_room_not_found_notice())
        self.identifier = identifier


class NoSuchInvitation(ChatRejection):
    def __init__(self, from_user: str):
        super().__init__(create_no_invitation_notice(from_user))
        self.from_user = from_user


class UserOffline(ChatRejection):
    def __init__(self, username: str):
        super().__init__(create_user_offline_notice(username))
        self.username = username


class InvalidInput(ChatRejection):
    def __init__(self, message: str = None):
        super().__init__(message or create_invalid_input_notice())
