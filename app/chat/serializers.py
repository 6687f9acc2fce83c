"""
Serializers for chat API.

This module provides serializers for the chat system:
- Chat serializers (presentation, create)
- Participant serializers (add)
- Message serializers (read, create)

Serializer Hierarchy:
    ChatSerializer: Chat as shown in a user's chat list and detail view
    ChatCreateSerializer: Direct/group chat creation input

    ParticipantAddSerializer: Add participant to group input

    MessageSerializer: Message with sender info
    MessageCreateSerializer: Send new message input

Design Decisions:
    - Read and write serializers are separate for clarity
    - ChatSerializer is viewer-relative: the name fallback and the `user`
      block describe the other participant, so pass `current_user` (or a
      request) in the context
    - Write serializers only check shape; membership and ownership rules
      live in chat.services
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rest_framework import serializers

from authentication.serializers import UserSummarySerializer
from chat.constants import CHAT_CONFIG, SYSTEM_MESSAGES
from chat.models import Chat, Message

if TYPE_CHECKING:
    from authentication.models import User


# =============================================================================
# Message Serializers
# =============================================================================


class MessageSerializer(serializers.ModelSerializer):
    """
    Message with the sender's display data.

    Used for history pages, the send-message response and the payload of
    realtime new-message events.
    """

    chat_id = serializers.IntegerField(read_only=True)
    sender_id = serializers.IntegerField(read_only=True)
    sender = UserSummarySerializer(read_only=True)

    class Meta:
        model = Message
        fields = [
            "id",
            "chat_id",
            "sender_id",
            "sender",
            "content",
            "is_system_message",
            "created_at",
        ]
        read_only_fields = fields


class MessageCreateSerializer(serializers.Serializer):
    """
    Input for sending a message.

    Whitespace is trimmed, so a blank message fails validation here
    before any store access.
    """

    content = serializers.CharField(
        allow_blank=False,
        trim_whitespace=True,
        help_text="Message text",
    )


# =============================================================================
# Chat Serializers
# =============================================================================


class ChatSerializer(serializers.ModelSerializer):
    """
    Chat as presented to one viewer.

    Computed fields:
        name: Stored name, or "Chat with <other first name>"
        user: The other participant {id, name, avatar, role}
        last_message: Most recent message, or a "No messages yet" placeholder
        participants: Members in join order
        creator: Current owner

    Expects chats loaded through chat.services.chat_queryset() so
    memberships and the latest message are prefetched.
    """

    name = serializers.SerializerMethodField()
    creator = UserSummarySerializer(source="created_by", read_only=True)
    participants = serializers.SerializerMethodField()
    user = serializers.SerializerMethodField()
    last_message = serializers.SerializerMethodField()

    class Meta:
        model = Chat
        fields = [
            "id",
            "name",
            "is_group",
            "created_by",
            "creator",
            "participants",
            "user",
            "last_message",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def _viewer_id(self) -> int | None:
        viewer = self.context.get("current_user")
        if viewer is None and "request" in self.context:
            viewer = self.context["request"].user
        return getattr(viewer, "id", None)

    def _members(self, obj: Chat) -> list[User]:
        return [membership.user for membership in obj.memberships.all()]

    def _other_member(self, obj: Chat) -> User | None:
        viewer_id = self._viewer_id()
        return next(
            (member for member in self._members(obj) if member.id != viewer_id),
            None,
        )

    def get_name(self, obj: Chat) -> str | None:
        if obj.name:
            return obj.name
        other = self._other_member(obj)
        if other is None:
            return None
        return SYSTEM_MESSAGES.DIRECT_CHAT_NAME.format(first_name=other.get_short_name())

    def get_participants(self, obj: Chat) -> list[dict]:
        return UserSummarySerializer(self._members(obj), many=True).data

    def get_user(self, obj: Chat) -> dict | None:
        other = self._other_member(obj)
        if other is None:
            return None
        return {
            "id": other.id,
            "name": other.display_name,
            "avatar": other.profile_image,
            "role": other.role,
        }

    def get_last_message(self, obj: Chat) -> dict:
        latest = getattr(obj, "latest_messages", None)
        if latest is None:
            latest = list(obj.messages.order_by("-created_at", "-id")[:1])

        if not latest:
            return {
                "content": CHAT_CONFIG.NO_MESSAGES_PLACEHOLDER,
                "timestamp": serializers.DateTimeField().to_representation(obj.created_at),
                "is_read": True,
            }

        message = latest[0]
        return {
            "id": message.id,
            "content": message.content,
            "sender_id": message.sender_id,
            "timestamp": serializers.DateTimeField().to_representation(message.created_at),
            # Read receipts are not tracked
            "is_read": True,
        }


class ChatCreateSerializer(serializers.Serializer):
    """
    Input for creating a chat.

    For direct chats (is_group=false) participant_ids must name exactly one
    other user and `name` is ignored. Group chats need a name. Those rules,
    the duplicate check and user existence are enforced by ChatService.
    """

    name = serializers.CharField(
        max_length=255,
        required=False,
        allow_blank=True,
        allow_null=True,
    )
    is_group = serializers.BooleanField(default=False)
    participant_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        required=False,
        default=list,
        help_text="Users to add besides the creator",
    )
    initial_message = serializers.CharField(
        required=False,
        allow_blank=True,
        allow_null=True,
        help_text="Optional first message, sent by the creator",
    )


# =============================================================================
# Participant Serializers
# =============================================================================


class ParticipantAddSerializer(serializers.Serializer):
    """Input for adding a user to a group chat."""

    user_id = serializers.IntegerField(min_value=1)
