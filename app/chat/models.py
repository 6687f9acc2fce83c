"""
Chat system models.

This module is the membership store for the chat system:
- Direct (1:1) chats between exactly two users
- Group chats with a creator (owner) and any number of participants

Models:
    Chat: Container for messages between participants
    ChatParticipant: Membership of one user in one chat
    Message: A user-authored or system-generated entry in a chat
    DirectChatPair: Helper enforcing one direct chat per user pair

Design Decisions:
    - Direct chats never change membership after creation
    - The creator of a group is its owner; when the owner leaves, ownership
      passes to the earliest-joined remaining participant
    - Membership rows are deleted on leave/remove; rejoining creates a new row
    - Deleting a chat cascades to its participants, messages and pair row
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import F, Q

from core.models import BaseModel


class Chat(BaseModel):
    """
    A conversation between two or more users.

    Chat kinds:
        Direct (is_group=False): Exactly 2 participants, fixed membership,
            optional name. Unique per user pair (see DirectChatPair).
        Group (is_group=True): Named, mutable membership, owned by
            created_by.

    Fields:
        name: Display name (required for groups, optional for direct chats)
        is_group: Whether this is a group chat
        created_by: Owner of the chat; changes on ownership transfer
        updated_at: Bumped whenever a message is sent (list ordering)

    Relationships:
        memberships: ChatParticipant rows for this chat
        participants: Users in this chat (through ChatParticipant)
        messages: Message rows for this chat
        direct_pair: DirectChatPair for direct chats
    """

    name = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Display name (required for group chats)",
    )

    is_group = models.BooleanField(
        default=False,
        db_index=True,
        help_text="Group chats allow membership changes",
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="created_chats",
        help_text="Current owner of the chat",
    )

    participants = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        through="ChatParticipant",
        related_name="chats",
    )

    class Meta:
        db_table = "chats"
        ordering = ["-updated_at"]

    def __str__(self) -> str:
        if self.is_group:
            return f"Group: {self.name}" if self.name else f"Group({self.pk})"
        return f"Direct({self.pk})"

    def has_participant(self, user_id: int) -> bool:
        return self.memberships.filter(user_id=user_id).exists()


class ChatParticipant(BaseModel):
    """
    Membership of a user in a chat.

    created_at doubles as the join time; ownership transfer picks the
    earliest-joined remaining participant.

    Constraints:
        - UniqueConstraint(chat, user): A user is in a chat at most once
    """

    chat = models.ForeignKey(
        Chat,
        on_delete=models.CASCADE,
        related_name="memberships",
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="chat_memberships",
    )

    class Meta:
        db_table = "chat_participants"
        ordering = ["created_at", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["chat", "user"],
                name="unique_chat_participant",
            ),
        ]

    def __str__(self) -> str:
        return f"ChatParticipant(chat={self.chat_id}, user={self.user_id})"


class Message(models.Model):
    """
    A message within a chat.

    Messages are immutable. System messages record membership changes and
    are attributed to the user who caused them.

    Fields:
        chat: Chat this message belongs to
        sender: Author (the acting user for system messages)
        content: Message text, never empty
        is_system_message: True for generated membership notices
        created_at: Send time; history is ordered by it
    """

    chat = models.ForeignKey(
        Chat,
        on_delete=models.CASCADE,
        related_name="messages",
    )

    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_messages",
    )

    content = models.TextField()

    is_system_message = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = "messages"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(
                fields=["chat", "-created_at"],
                name="messages_chat_recent_idx",
            ),
        ]

    def __str__(self) -> str:
        preview = self.content[:50] + "..." if len(self.content) > 50 else self.content
        return f"Message({self.pk}): {preview}"


class DirectChatPair(models.Model):
    """
    Enforces uniqueness of direct chats between two users.

    Stores the pair in canonical order (lower user id first) so that
    regardless of who starts the chat there is at most one row per pair.

    Constraints:
        - UniqueConstraint(user_low, user_high): One direct chat per pair
        - CheckConstraint(user_low_id < user_high_id): Canonical order
    """

    chat = models.OneToOneField(
        Chat,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name="direct_pair",
    )

    user_low = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="+",
    )

    user_high = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="+",
    )

    class Meta:
        db_table = "chat_direct_pairs"
        constraints = [
            models.UniqueConstraint(
                fields=["user_low", "user_high"],
                name="unique_direct_chat_pair",
            ),
            models.CheckConstraint(
                condition=Q(user_low_id__lt=F("user_high_id")),
                name="direct_pair_low_less_than_high",
            ),
        ]

    def __str__(self) -> str:
        return f"DirectPair({self.user_low_id}, {self.user_high_id})"

    @staticmethod
    def canonical(user_a_id: int, user_b_id: int) -> tuple[int, int]:
        """Return the pair as (low, high)."""
        return (user_a_id, user_b_id) if user_a_id < user_b_id else (user_b_id, user_a_id)
