"""
Constants and configuration for the chat module.

This module centralizes configuration values for:
- Message history paging
- Realtime group naming, event names and close codes
- Wording of generated system messages

Import example:
    from chat.constants import CHAT_CONFIG, REALTIME_EVENTS
"""

from typing import Final


# =============================================================================
# Chat Configuration
# =============================================================================


class CHAT_CONFIG:
    """Configuration for chat and message operations."""

    # Message history paging (newest first)
    MESSAGES_DEFAULT_PAGE_SIZE: Final[int] = 20
    MESSAGES_MAX_PAGE_SIZE: Final[int] = 100

    # Roles allowed to act on chats they are not a member of
    PRIVILEGED_ROLES: Final[tuple] = ("admin",)

    # Placeholder shown in chat lists before the first message
    NO_MESSAGES_PLACEHOLDER: Final[str] = "No messages yet"


# =============================================================================
# Realtime Configuration
# =============================================================================


class REALTIME_CONFIG:
    """
    Configuration for the WebSocket transport.

    Channels group names may only contain ASCII alphanumerics, hyphens,
    underscores and periods, so rooms are "user.<id>" / "chat.<id>".
    """

    USER_GROUP_PREFIX: Final[str] = "user"
    CHAT_GROUP_PREFIX: Final[str] = "chat"

    # Channel layer message type handled by ChatConsumer.chat_event()
    EVENT_HANDLER_TYPE: Final[str] = "chat.event"

    # Subprotocol name that precedes the token in Sec-WebSocket-Protocol
    TOKEN_SUBPROTOCOL: Final[str] = "jwt"

    # Close code for handshakes without a valid token
    CLOSE_CODE_UNAUTHORIZED: Final[int] = 4001


class REALTIME_EVENTS:
    """Event names carried in the "event" field of WebSocket frames."""

    # Client -> server
    JOIN_CHAT: Final[str] = "join-chat"
    LEAVE_CHAT: Final[str] = "leave-chat"
    SEND_MESSAGE: Final[str] = "send-message"
    TYPING: Final[str] = "typing"

    # Server -> client
    USER_JOINED: Final[str] = "user-joined"
    USER_LEFT: Final[str] = "user-left"
    NEW_MESSAGE: Final[str] = "new-message"
    USER_TYPING: Final[str] = "user-typing"
    NOTIFICATION: Final[str] = "notification"
    ERROR: Final[str] = "error"


class NOTIFICATION_TYPES:
    """Values of the "type" field inside notification frames."""

    NEW_CHAT: Final[str] = "new-chat"
    PARTICIPANT_ADDED: Final[str] = "participant-added"
    ADDED_TO_CHAT: Final[str] = "added-to-chat"
    PARTICIPANT_REMOVED: Final[str] = "participant-removed"
    REMOVED_FROM_CHAT: Final[str] = "removed-from-chat"
    PARTICIPANT_LEFT: Final[str] = "participant-left"


# =============================================================================
# System Message Templates
# =============================================================================


class SYSTEM_MESSAGES:
    """Templates for generated membership notices."""

    PARTICIPANT_ADDED: Final[str] = "{actor} added {user} to the chat"
    PARTICIPANT_REMOVED: Final[str] = "{actor} removed {user} from the chat"
    PARTICIPANT_LEFT: Final[str] = "{actor} left the chat"
    DIRECT_CHAT_NAME: Final[str] = "Chat with {first_name}"
    DIRECT_CHAT_GREETING: Final[str] = "Hello {first_name}, how can I help you today?"
