"""
WebSocket consumers for the chat application.

This module implements the WebSocket consumer for real-time chat,
handling connection management, room membership for the session and
integration with the chat service layer.

Consumers:
    ChatConsumer: One connection per client, multiplexing all chats

Authentication:
    JWTAuthMiddleware resolves the handshake token and attaches the user to
    self.scope["user"]. A failed handshake leaves scope["auth_error"] set
    and the connection is closed with 4001 before it is accepted.

Channel Groups:
    user.<id>: Joined on connect; receives notifications for the user
    chat.<id>: Joined by an explicit join-chat event for this session only

Events (from client), JSON frames {"event": <name>, ...}:
    - join-chat {chat_id}
    - leave-chat {chat_id}
    - send-message {chat_id, content}
    - typing {chat_id, is_typing}

Events (to client), JSON frames {"event": <name>, "data": {...}}:
    - user-joined, user-left, user-typing: Ephemeral room events
    - new-message: Message persisted by MessageService
    - notification: Lifecycle notifications {type, data, timestamp}
    - error {message}: Failure of the caller's own request
"""

from __future__ import annotations

import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer
from django.apps import apps

from chat.constants import REALTIME_CONFIG, REALTIME_EVENTS
from chat.realtime import NotificationDispatcher, chat_group, user_group
from chat.services import ChatService, MessageService

logger = logging.getLogger(__name__)


class ChatConsumer(AsyncJsonWebsocketConsumer):
    """
    WebSocket consumer for real-time chat functionality.

    Handles:
        - Handshake rejection for unauthenticated users
        - Joining/leaving chat groups for the session
        - Sending messages through MessageService
        - Typing indicators

    Attributes:
        user: Authenticated user (after connect)
        joined_chat_ids: Chats joined during this session
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.user = None
        self.joined_chat_ids: set[int] = set()

    @property
    def gateway(self):
        return apps.get_app_config("chat").gateway

    def _dispatcher(self) -> NotificationDispatcher:
        return NotificationDispatcher(self.gateway)

    async def connect(self):
        """
        Handle WebSocket connection.

        Rejects the handshake with 4001 when no valid token was supplied.
        Otherwise joins the user's personal group and accepts.
        """
        user = self.scope.get("user")
        auth_error = self.scope.get("auth_error")

        if auth_error is not None or user is None or not user.is_authenticated:
            logger.warning(
                f"Rejected WebSocket connection: "
                f"{getattr(auth_error, 'error_code', 'NOT_AUTHENTICATED')}"
            )
            await self.close(code=REALTIME_CONFIG.CLOSE_CODE_UNAUTHORIZED)
            return

        self.user = user
        await self.channel_layer.group_add(user_group(user.id), self.channel_name)

        subprotocols = self.scope.get("subprotocols") or []
        if REALTIME_CONFIG.TOKEN_SUBPROTOCOL in subprotocols:
            await self.accept(subprotocol=REALTIME_CONFIG.TOKEN_SUBPROTOCOL)
        else:
            await self.accept()
        logger.info(f"User {user.id} connected")

    async def disconnect(self, close_code):
        """Leave every group joined by this connection."""
        if self.user is None:
            return

        await self.channel_layer.group_discard(user_group(self.user.id), self.channel_name)
        for chat_id in self.joined_chat_ids:
            await self.channel_layer.group_discard(chat_group(chat_id), self.channel_name)
        self.joined_chat_ids.clear()
        logger.info(f"User {self.user.id} disconnected ({close_code})")

    async def receive_json(self, content, **kwargs):
        """
        Route an inbound frame by its "event" field.

        Expected formats:
            {"event": "join-chat", "chat_id": 1}
            {"event": "send-message", "chat_id": 1, "content": "Hello!"}
            {"event": "typing", "chat_id": 1, "is_typing": true}
        """
        if not isinstance(content, dict):
            await self._send_error("Invalid payload")
            return

        event = content.get("event")
        handlers = {
            REALTIME_EVENTS.JOIN_CHAT: self._handle_join,
            REALTIME_EVENTS.LEAVE_CHAT: self._handle_leave,
            REALTIME_EVENTS.SEND_MESSAGE: self._handle_send_message,
            REALTIME_EVENTS.TYPING: self._handle_typing,
        }
        handler = handlers.get(event)
        if handler is None:
            await self._send_error(f"Unknown event: {event}")
            return

        try:
            await handler(content)
        except Exception:
            logger.exception(f"Failed to handle {event} from user {self.user.id}")
            await self._send_error("Internal error")

    # -------------------------------------------------------------------------
    # Inbound handlers
    # -------------------------------------------------------------------------

    async def _handle_join(self, content):
        chat_id = self._chat_id(content)
        if chat_id is None:
            await self._send_error("Chat ID is required")
            return

        if not await self._is_participant(chat_id):
            await self._send_error("You are not a participant in this chat")
            return

        await self.channel_layer.group_add(chat_group(chat_id), self.channel_name)
        self.joined_chat_ids.add(chat_id)
        logger.debug(f"User {self.user.id} joined room for chat {chat_id}")

        await self.gateway.abroadcast(
            chat_group(chat_id),
            REALTIME_EVENTS.USER_JOINED,
            {
                "chat_id": chat_id,
                "user": {
                    "id": self.user.id,
                    "first_name": self.user.first_name,
                    "last_name": self.user.last_name,
                },
            },
            exclude_channel=self.channel_name,
        )

    async def _handle_leave(self, content):
        chat_id = self._chat_id(content)
        if chat_id is None:
            await self._send_error("Chat ID is required")
            return

        await self.channel_layer.group_discard(chat_group(chat_id), self.channel_name)
        self.joined_chat_ids.discard(chat_id)

        await self.gateway.abroadcast(
            chat_group(chat_id),
            REALTIME_EVENTS.USER_LEFT,
            {"chat_id": chat_id, "user_id": self.user.id},
            exclude_channel=self.channel_name,
        )

    async def _handle_send_message(self, content):
        chat_id = self._chat_id(content)
        text = content.get("content")
        if chat_id is None or not isinstance(text, str) or not text.strip():
            await self._send_error("Chat ID and content are required")
            return

        result = await self._send_message(chat_id, text)
        if not result.success:
            await self._send_error(result.error)

    async def _handle_typing(self, content):
        # Relayed without a membership check
        chat_id = self._chat_id(content)
        if chat_id is None:
            await self._send_error("Chat ID is required")
            return

        await self.gateway.abroadcast(
            chat_group(chat_id),
            REALTIME_EVENTS.USER_TYPING,
            {
                "chat_id": chat_id,
                "user_id": self.user.id,
                "is_typing": bool(content.get("is_typing", False)),
            },
            exclude_channel=self.channel_name,
        )

    # -------------------------------------------------------------------------
    # Channel layer handlers
    # -------------------------------------------------------------------------

    async def chat_event(self, event):
        """
        Handle chat.event messages from the channel layer.

        Forwards {"event", "data"} to the client unless this connection is
        the excluded sender.
        """
        if event.get("exclude_channel") == self.channel_name:
            return

        await self.send_json({"event": event["event"], "data": event["data"]})

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _chat_id(content) -> int | None:
        try:
            chat_id = int(content.get("chat_id"))
        except (TypeError, ValueError):
            return None
        return chat_id if chat_id > 0 else None

    async def _send_error(self, message: str):
        await self.send_json({"event": REALTIME_EVENTS.ERROR, "data": {"message": message}})

    @database_sync_to_async
    def _is_participant(self, chat_id: int) -> bool:
        return ChatService.is_participant(chat_id, self.user.id)

    @database_sync_to_async
    def _send_message(self, chat_id: int, content: str):
        return MessageService(self._dispatcher()).send_message(
            requester=self.user,
            chat_id=chat_id,
            content=content,
        )
