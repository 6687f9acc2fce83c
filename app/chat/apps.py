"""
Chat application configuration.

This app provides the chat system with:
- Direct (1:1) and group chats
- Membership management with owner transfer on departure
- Message history
- Realtime delivery over WebSockets
"""

from django.apps import AppConfig


class ChatConfig(AppConfig):
    """
    Configuration for the chat application.

    Attributes:
        gateway: RealtimeGateway shared by views and consumers. It is None
            until ready() runs.
    """

    default_auto_field = "django.db.models.BigAutoField"
    name = "chat"
    verbose_name = "Chat"

    gateway = None

    def ready(self):
        from chat.realtime import RealtimeGateway

        self.gateway = RealtimeGateway()
