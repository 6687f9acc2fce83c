"""
Realtime fan-out for the chat application.

Two small pieces sit between the service layer and Django Channels:

    RealtimeGateway: Wraps the channel layer and knows how to address
        groups. One instance is created in ChatConfig.ready().
    NotificationDispatcher: What services call. Sends notification
        envelopes to a user's personal group or a chat's group, and
        publishes first-class chat events such as new-message.

Channel Groups:
    user.<id>  Personal group, joined on connect
    chat.<id>  Chat group, joined by the join-chat event

Frame shapes delivered to clients (see ChatConsumer.chat_event):
    {"event": "notification", "data": {"type", "data", "timestamp"}}
    {"event": "new-message", "data": {...message...}}

Usage:
    dispatcher = build_dispatcher()
    dispatcher.notify_user(user.id, "added-to-chat", {"chat_id": chat.id})
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.apps import apps
from django.core.serializers.json import DjangoJSONEncoder
from django.utils import timezone

from chat.constants import REALTIME_CONFIG, REALTIME_EVENTS
from core.exceptions import GatewayNotInitializedError

if TYPE_CHECKING:
    from typing import Any

    from channels.layers import BaseChannelLayer

logger = logging.getLogger(__name__)


def user_group(user_id: int) -> str:
    """Channels group for a user's personal room."""
    return f"{REALTIME_CONFIG.USER_GROUP_PREFIX}.{user_id}"


def chat_group(chat_id: int) -> str:
    """Channels group for a chat room."""
    return f"{REALTIME_CONFIG.CHAT_GROUP_PREFIX}.{chat_id}"


def to_wire(data: Any) -> Any:
    """
    Reduce a payload to JSON-native types.

    Serializer output can hold datetimes and ReturnDicts; the Redis channel
    layer msgpacks messages, so everything is normalized up front.
    """
    return json.loads(json.dumps(data, cls=DjangoJSONEncoder))


class RealtimeGateway:
    """
    Thin wrapper around a Channels channel layer.

    The layer is looked up lazily so settings can be swapped (tests use
    the in-memory layer) after the gateway is constructed.
    """

    def __init__(self, alias: str = "default"):
        self.alias = alias

    @property
    def channel_layer(self) -> BaseChannelLayer | None:
        return get_channel_layer(self.alias)

    def _require_layer(self) -> BaseChannelLayer:
        layer = self.channel_layer
        if layer is None:
            raise GatewayNotInitializedError(
                "Realtime gateway not initialized: no channel layer configured"
            )
        return layer

    @staticmethod
    def _event(event: str, data: Any, exclude_channel: str | None = None) -> dict:
        message = {
            "type": REALTIME_CONFIG.EVENT_HANDLER_TYPE,
            "event": event,
            "data": to_wire(data),
        }
        if exclude_channel:
            message["exclude_channel"] = exclude_channel
        return message

    def broadcast(self, group: str, event: str, data: Any) -> None:
        """Send an event to every connection in a group (sync callers)."""
        layer = self._require_layer()
        async_to_sync(layer.group_send)(group, self._event(event, data))

    async def abroadcast(
        self,
        group: str,
        event: str,
        data: Any,
        exclude_channel: str | None = None,
    ) -> None:
        """
        Send an event to a group from async code.

        Args:
            exclude_channel: Channel name that should not receive the
                event (the sender's own connection)
        """
        layer = self._require_layer()
        await layer.group_send(group, self._event(event, data, exclude_channel))


class NotificationDispatcher:
    """
    Fan-out helper used by ChatService and MessageService.

    Every method raises GatewayNotInitializedError when no gateway was
    started. Callers in the service layer log and drop dispatch failures;
    the database write they follow has already happened.
    """

    def __init__(self, gateway: RealtimeGateway | None):
        self.gateway = gateway

    def _require_gateway(self) -> RealtimeGateway:
        if self.gateway is None:
            raise GatewayNotInitializedError("Realtime gateway not initialized")
        return self.gateway

    @staticmethod
    def _notification(notification_type: str, payload: Any) -> dict:
        return {
            "type": notification_type,
            "data": payload,
            "timestamp": timezone.now(),
        }

    def notify_user(self, user_id: int, notification_type: str, payload: Any) -> None:
        """Deliver a notification to every connection of one user."""
        self._require_gateway().broadcast(
            user_group(user_id),
            REALTIME_EVENTS.NOTIFICATION,
            self._notification(notification_type, payload),
        )
        logger.debug(f"Notified user {user_id}: {notification_type}")

    def notify_chat(self, chat_id: int, notification_type: str, payload: Any) -> None:
        """Deliver a notification to every connection joined to a chat."""
        self._require_gateway().broadcast(
            chat_group(chat_id),
            REALTIME_EVENTS.NOTIFICATION,
            self._notification(notification_type, payload),
        )
        logger.debug(f"Notified chat {chat_id}: {notification_type}")

    def publish_chat(self, chat_id: int, event: str, payload: Any) -> None:
        """Deliver a first-class event (e.g. new-message) to a chat's group."""
        self._require_gateway().broadcast(chat_group(chat_id), event, payload)


def build_dispatcher() -> NotificationDispatcher:
    """Dispatcher bound to the gateway started by ChatConfig.ready()."""
    config = apps.get_app_config("chat")
    return NotificationDispatcher(getattr(config, "gateway", None))
