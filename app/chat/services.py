"""
Chat system service layer.

This module owns every business rule of the chat system. REST views and the
WebSocket consumer both call into it; neither re-implements a rule.

Services:
    ChatService: Chat lifecycle (create, membership changes, leave, reads)
    MessageService: Message send and history

Design Principles:
    - Services are built with a NotificationDispatcher (see chat.realtime)
    - Expected failures return ServiceResult.failure()
    - Unexpected failures (database errors) raise
    - Each state change commits in one transaction before any notification
      is dispatched; dispatch failures are logged and never undo a write
    - Membership is re-read from the database on every call

Usage:
    from chat.realtime import build_dispatcher
    from chat.services import ChatService, MessageService

    chats = ChatService(build_dispatcher())
    result = chats.create_chat(
        requester=user,
        participant_ids=[other_user.id],
        initial_message="hi",
    )
    if not result.success and result.error_code == "DUPLICATE_CHAT":
        existing_id = result.details["chat_id"]

    messages = MessageService(build_dispatcher())
    result = messages.send_message(requester=user, chat_id=chat.id, content="Hello!")
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.db import IntegrityError
from django.db.models import Prefetch
from django.utils import timezone

from authentication.models import User
from authentication.serializers import UserSummarySerializer
from chat.constants import (
    CHAT_CONFIG,
    NOTIFICATION_TYPES,
    REALTIME_EVENTS,
    SYSTEM_MESSAGES,
)
from chat.models import Chat, ChatParticipant, DirectChatPair, Message
from chat.serializers import ChatSerializer, MessageSerializer
from core.services import BaseService, ServiceResult

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from chat.realtime import NotificationDispatcher


def is_privileged(user: User) -> bool:
    """Privileged roles may act on chats they do not belong to."""
    return getattr(user, "role", None) in CHAT_CONFIG.PRIVILEGED_ROLES


def chat_queryset() -> QuerySet[Chat]:
    """
    Chats with everything ChatSerializer reads.

    Prefetches memberships (with users, in join order) and the single most
    recent message as `latest_messages`.
    """
    return Chat.objects.select_related("created_by").prefetch_related(
        Prefetch(
            "memberships",
            queryset=ChatParticipant.objects.select_related("user"),
        ),
        Prefetch(
            "messages",
            queryset=Message.objects.order_by("-created_at", "-id")[:1],
            to_attr="latest_messages",
        ),
    )


def user_ref(user: User) -> dict:
    return dict(UserSummarySerializer(user).data)


@dataclass
class MembershipChange:
    """
    Outcome of a remove or leave.

    Attributes:
        chat_id: Chat the membership belonged to
        user_id: User whose membership ended
        new_owner_id: Set when ownership moved to another participant
        chat_deleted: True when the last participant left and the chat
            was destroyed
    """

    chat_id: int
    user_id: int
    new_owner_id: int | None = None
    chat_deleted: bool = False


@dataclass
class DirectChatResult:
    """Outcome of find_or_create_direct_chat."""

    chat: Chat
    created: bool


class NotifyingService(BaseService):
    """Base for services that fan out realtime notifications after writes."""

    def __init__(self, dispatcher: NotificationDispatcher):
        self.dispatcher = dispatcher

    def _dispatch(self, send: Callable, *args) -> None:
        """Call a dispatcher method; delivery is best-effort."""
        try:
            send(*args)
        except Exception:
            self.get_logger().error(
                f"Notification dispatch failed: {getattr(send, '__name__', send)}{args[:2]}",
                exc_info=True,
            )


class ChatService(NotifyingService):
    """
    Service for chat lifecycle operations.

    Methods:
        create_chat: Create a direct or group chat
        list_chats: Chats the requester belongs to
        get_chat: One chat, for members and privileged users
        add_participant: Add a user to a group chat
        remove_participant: Remove a user from a group chat
        leave_chat: Leave a group chat (hands off or deletes if owner)
        find_or_create_direct_chat: Privileged shortcut to a direct chat
        mark_as_read: Acknowledge reading a chat
        is_participant: Membership check used by the realtime layer

    Group chat invariant:
        A group chat always has an owner who is a participant, and never
        exists with zero participants.
    """

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @staticmethod
    def is_participant(chat_id: int, user_id: int) -> bool:
        return ChatParticipant.objects.filter(chat_id=chat_id, user_id=user_id).exists()

    @staticmethod
    def _find_direct_chat_id(user_a_id: int, user_b_id: int) -> int | None:
        low, high = DirectChatPair.canonical(user_a_id, user_b_id)
        return (
            DirectChatPair.objects.filter(user_low_id=low, user_high_id=high)
            .values_list("chat_id", flat=True)
            .first()
        )

    def list_chats(self, requester: User) -> ServiceResult[QuerySet[Chat]]:
        """Chats the requester belongs to, most recently active first."""
        chats = chat_queryset().filter(memberships__user=requester).order_by("-updated_at", "-id")
        return ServiceResult.success(chats, message="Chats retrieved successfully")

    def get_chat(self, requester: User, chat_id: int) -> ServiceResult[Chat]:
        """
        Load one chat.

        Error codes:
            CHAT_NOT_FOUND: No chat with this id
            NOT_PARTICIPANT: Requester is not a member and not privileged
        """
        chat = chat_queryset().filter(pk=chat_id).first()
        if chat is None:
            return ServiceResult.failure("Chat not found", error_code="CHAT_NOT_FOUND")

        member_ids = {membership.user_id for membership in chat.memberships.all()}
        if requester.id not in member_ids and not is_privileged(requester):
            return ServiceResult.failure(
                "You are not a participant in this chat",
                error_code="NOT_PARTICIPANT",
            )
        return ServiceResult.success(chat, message="Chat retrieved successfully")

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    def create_chat(
        self,
        requester: User,
        participant_ids: list[int],
        name: str | None = None,
        is_group: bool = False,
        initial_message: str | None = None,
    ) -> ServiceResult[Chat]:
        """
        Create a direct or group chat.

        The requester is always a member and becomes the owner. The chat,
        every membership and the optional first message are written in a
        single transaction.

        Args:
            requester: User creating the chat
            participant_ids: Other members; the requester's own id is ignored
            name: Group name (required for groups, dropped for direct chats)
            is_group: Whether to create a group chat
            initial_message: Optional first message from the requester

        Returns:
            ServiceResult with the Chat, reloaded with participants

        Error codes:
            PARTICIPANTS_REQUIRED: participant_ids is empty
            VALIDATION_ERROR: Group without a name, or a direct chat that
                does not name exactly one other user
            DUPLICATE_CHAT: A direct chat between the pair already exists
                (details.chat_id holds its id)
            USER_NOT_FOUND: A listed user does not exist
        """
        if not participant_ids:
            return ServiceResult.failure(
                "Participants are required",
                error_code="PARTICIPANTS_REQUIRED",
                errors={"participant_ids": ["At least one participant is required."]},
            )

        target_ids = list(dict.fromkeys(pid for pid in participant_ids if pid != requester.id))
        name = name.strip() if name else None

        if is_group:
            if not name:
                return ServiceResult.failure(
                    "Group chats require a name",
                    error_code="VALIDATION_ERROR",
                    errors={"name": ["This field is required for group chats."]},
                )
        else:
            name = None
            if len(target_ids) != 1:
                return ServiceResult.failure(
                    "A direct chat needs exactly one other participant",
                    error_code="VALIDATION_ERROR",
                    errors={"participant_ids": ["Provide exactly one other user."]},
                )
            existing_id = self._find_direct_chat_id(requester.id, target_ids[0])
            if existing_id is not None:
                return self._duplicate(existing_id)

        initial_message = initial_message.strip() if initial_message else ""

        try:
            with self.atomic():
                found_ids = set(
                    User.objects.filter(pk__in=target_ids).values_list("pk", flat=True)
                )
                missing = [user_id for user_id in target_ids if user_id not in found_ids]
                if missing:
                    return ServiceResult.failure(
                        f"User with ID {missing[0]} not found",
                        error_code="USER_NOT_FOUND",
                        details={"user_id": missing[0]},
                    )

                chat = Chat.objects.create(name=name, is_group=is_group, created_by=requester)
                ChatParticipant.objects.bulk_create(
                    [ChatParticipant(chat=chat, user=requester)]
                    + [ChatParticipant(chat=chat, user_id=user_id) for user_id in target_ids]
                )
                if not is_group:
                    low, high = DirectChatPair.canonical(requester.id, target_ids[0])
                    DirectChatPair.objects.create(chat=chat, user_low_id=low, user_high_id=high)
                if initial_message:
                    Message.objects.create(chat=chat, sender=requester, content=initial_message)
        except IntegrityError:
            # Lost a race with a concurrent create for the same pair
            existing_id = None if is_group else self._find_direct_chat_id(requester.id, target_ids[0])
            if existing_id is None:
                raise
            return self._duplicate(existing_id)

        chat = chat_queryset().get(pk=chat.pk)
        self.get_logger().info(
            f"User {requester.id} created {'group' if is_group else 'direct'} chat {chat.id} "
            f"with users {target_ids}"
        )

        initiator = user_ref(requester)
        for membership in chat.memberships.all():
            if membership.user_id == requester.id:
                continue
            payload = {
                "chat": ChatSerializer(chat, context={"current_user": membership.user}).data,
                "initiator": initiator,
            }
            self._dispatch(
                self.dispatcher.notify_user,
                membership.user_id,
                NOTIFICATION_TYPES.NEW_CHAT,
                payload,
            )

        return ServiceResult.success(chat, message="Chat created successfully")

    @staticmethod
    def _duplicate(chat_id: int) -> ServiceResult[Chat]:
        return ServiceResult.failure(
            "Chat already exists",
            error_code="DUPLICATE_CHAT",
            details={"chat_id": chat_id},
        )

    def find_or_create_direct_chat(
        self,
        requester: User,
        user_id: int,
    ) -> ServiceResult[DirectChatResult]:
        """
        Privileged shortcut: open (or reopen) a direct chat with any user.

        A new chat is named "Chat with <first name>" and starts with a
        greeting from the requester. An existing direct chat for the pair
        is returned unchanged.

        Error codes:
            FORBIDDEN: Requester is not privileged
            USER_NOT_FOUND: Target user does not exist
            VALIDATION_ERROR: Target is the requester
        """
        if not is_privileged(requester):
            return ServiceResult.failure(
                "Only admins can start direct chats with users",
                error_code="FORBIDDEN",
            )

        target = User.objects.filter(pk=user_id).first()
        if target is None:
            return ServiceResult.failure(
                f"User with ID {user_id} not found",
                error_code="USER_NOT_FOUND",
                details={"user_id": user_id},
            )
        if target.id == requester.id:
            return ServiceResult.failure(
                "Cannot start a chat with yourself",
                error_code="VALIDATION_ERROR",
                errors={"user_id": ["Choose another user."]},
            )

        existing_id = self._find_direct_chat_id(requester.id, target.id)
        if existing_id is not None:
            return ServiceResult.success(
                DirectChatResult(chat=chat_queryset().get(pk=existing_id), created=False),
                message="Chat retrieved successfully",
            )

        first_name = target.get_short_name()
        try:
            with self.atomic():
                chat = Chat.objects.create(
                    name=SYSTEM_MESSAGES.DIRECT_CHAT_NAME.format(first_name=first_name),
                    is_group=False,
                    created_by=requester,
                )
                ChatParticipant.objects.bulk_create(
                    [
                        ChatParticipant(chat=chat, user=requester),
                        ChatParticipant(chat=chat, user=target),
                    ]
                )
                low, high = DirectChatPair.canonical(requester.id, target.id)
                DirectChatPair.objects.create(chat=chat, user_low_id=low, user_high_id=high)
                Message.objects.create(
                    chat=chat,
                    sender=requester,
                    content=SYSTEM_MESSAGES.DIRECT_CHAT_GREETING.format(first_name=first_name),
                )
        except IntegrityError:
            existing_id = self._find_direct_chat_id(requester.id, target.id)
            if existing_id is None:
                raise
            return ServiceResult.success(
                DirectChatResult(chat=chat_queryset().get(pk=existing_id), created=False),
                message="Chat retrieved successfully",
            )

        chat = chat_queryset().get(pk=chat.pk)
        self.get_logger().info(f"Admin {requester.id} opened direct chat {chat.id} with user {target.id}")

        self._dispatch(
            self.dispatcher.notify_user,
            target.id,
            NOTIFICATION_TYPES.NEW_CHAT,
            {
                "chat": ChatSerializer(chat, context={"current_user": target}).data,
                "initiator": user_ref(requester),
            },
        )
        return ServiceResult.success(
            DirectChatResult(chat=chat, created=True),
            message="Chat created successfully",
        )

    # -------------------------------------------------------------------------
    # Membership
    # -------------------------------------------------------------------------

    def add_participant(
        self,
        requester: User,
        chat_id: int,
        user_id: int,
    ) -> ServiceResult[ChatParticipant]:
        """
        Add a user to a group chat.

        Any current member may add people; privileged users may add people
        to chats they are not in.

        Error codes:
            CHAT_NOT_FOUND, NOT_GROUP_CHAT, NOT_PARTICIPANT,
            USER_NOT_FOUND, ALREADY_PARTICIPANT
        """
        with self.atomic():
            chat = Chat.objects.select_for_update().filter(pk=chat_id).first()
            if chat is None:
                return ServiceResult.failure("Chat not found", error_code="CHAT_NOT_FOUND")
            if not chat.is_group:
                return ServiceResult.failure(
                    "Can only add participants to group chats",
                    error_code="NOT_GROUP_CHAT",
                )
            if not is_privileged(requester) and not chat.has_participant(requester.id):
                return ServiceResult.failure(
                    "You are not a participant in this chat",
                    error_code="NOT_PARTICIPANT",
                )

            user = User.objects.filter(pk=user_id).first()
            if user is None:
                return ServiceResult.failure(
                    f"User with ID {user_id} not found",
                    error_code="USER_NOT_FOUND",
                    details={"user_id": user_id},
                )
            if chat.has_participant(user.id):
                return ServiceResult.failure(
                    "User is already a participant in this chat",
                    error_code="ALREADY_PARTICIPANT",
                )

            try:
                with self.atomic():
                    membership = ChatParticipant.objects.create(chat=chat, user=user)
            except IntegrityError:
                return ServiceResult.failure(
                    "User is already a participant in this chat",
                    error_code="ALREADY_PARTICIPANT",
                )

            Message.objects.create(
                chat=chat,
                sender=requester,
                content=SYSTEM_MESSAGES.PARTICIPANT_ADDED.format(
                    actor=requester.display_name,
                    user=user.display_name,
                ),
                is_system_message=True,
            )

        self.get_logger().info(f"User {requester.id} added user {user.id} to chat {chat.id}")

        added_by = user_ref(requester)
        self._dispatch(
            self.dispatcher.notify_chat,
            chat.id,
            NOTIFICATION_TYPES.PARTICIPANT_ADDED,
            {"chat_id": chat.id, "user": user_ref(user), "added_by": added_by},
        )
        self._dispatch(
            self.dispatcher.notify_user,
            user.id,
            NOTIFICATION_TYPES.ADDED_TO_CHAT,
            {"chat_id": chat.id, "chat_name": chat.name, "added_by": added_by},
        )
        return ServiceResult.success(membership, message="Participant added successfully")

    def remove_participant(
        self,
        requester: User,
        chat_id: int,
        user_id: int,
    ) -> ServiceResult[MembershipChange]:
        """
        Remove a user from a group chat.

        Only the owner or a privileged user may remove people, and only a
        privileged user may remove the owner. Removing the owner hands
        ownership to the earliest-joined remaining participant; removing
        the last participant deletes the chat.

        Error codes:
            CHAT_NOT_FOUND, NOT_GROUP_CHAT, FORBIDDEN, USER_NOT_FOUND,
            TARGET_NOT_PARTICIPANT, CANNOT_REMOVE_OWNER
        """
        privileged = is_privileged(requester)

        with self.atomic():
            chat = Chat.objects.select_for_update().filter(pk=chat_id).first()
            if chat is None:
                return ServiceResult.failure("Chat not found", error_code="CHAT_NOT_FOUND")
            if not chat.is_group:
                return ServiceResult.failure(
                    "Can only remove participants from group chats",
                    error_code="NOT_GROUP_CHAT",
                )
            if chat.created_by_id != requester.id and not privileged:
                return ServiceResult.failure(
                    "Only the chat owner or an admin can remove participants",
                    error_code="FORBIDDEN",
                )

            user = User.objects.filter(pk=user_id).first()
            if user is None:
                return ServiceResult.failure(
                    f"User with ID {user_id} not found",
                    error_code="USER_NOT_FOUND",
                    details={"user_id": user_id},
                )

            membership = ChatParticipant.objects.filter(chat=chat, user=user).first()
            if membership is None:
                return ServiceResult.failure(
                    "User is not a participant in this chat",
                    error_code="TARGET_NOT_PARTICIPANT",
                )
            if user.id == chat.created_by_id and not privileged:
                return ServiceResult.failure(
                    "Cannot remove the chat owner",
                    error_code="CANNOT_REMOVE_OWNER",
                )

            change = self._end_membership(chat, membership)
            if not change.chat_deleted:
                Message.objects.create(
                    chat=chat,
                    sender=requester,
                    content=SYSTEM_MESSAGES.PARTICIPANT_REMOVED.format(
                        actor=requester.display_name,
                        user=user.display_name,
                    ),
                    is_system_message=True,
                )

        self.get_logger().info(f"User {requester.id} removed user {user.id} from chat {chat_id}")

        removed_by = user_ref(requester)
        if not change.chat_deleted:
            self._dispatch(
                self.dispatcher.notify_chat,
                chat_id,
                NOTIFICATION_TYPES.PARTICIPANT_REMOVED,
                {
                    "chat_id": chat_id,
                    "user_id": user.id,
                    "removed_by": removed_by,
                    "new_owner_id": change.new_owner_id,
                },
            )
        self._dispatch(
            self.dispatcher.notify_user,
            user.id,
            NOTIFICATION_TYPES.REMOVED_FROM_CHAT,
            {"chat_id": chat_id, "chat_name": chat.name, "removed_by": removed_by},
        )
        return ServiceResult.success(change, message="Participant removed successfully")

    def leave_chat(self, requester: User, chat_id: int) -> ServiceResult[MembershipChange]:
        """
        Leave a group chat.

        An owner who leaves hands ownership to the earliest-joined remaining
        participant. The last participant to leave deletes the chat along
        with its memberships and messages; nothing is broadcast for a chat
        that no longer exists.

        Error codes:
            CHAT_NOT_FOUND, NOT_GROUP_CHAT, NOT_PARTICIPANT
        """
        with self.atomic():
            chat = Chat.objects.select_for_update().filter(pk=chat_id).first()
            if chat is None:
                return ServiceResult.failure("Chat not found", error_code="CHAT_NOT_FOUND")
            if not chat.is_group:
                return ServiceResult.failure(
                    "Can only leave group chats",
                    error_code="NOT_GROUP_CHAT",
                )

            membership = ChatParticipant.objects.filter(chat=chat, user=requester).first()
            if membership is None:
                return ServiceResult.failure(
                    "You are not a participant in this chat",
                    error_code="NOT_PARTICIPANT",
                )

            change = self._end_membership(chat, membership)
            if not change.chat_deleted:
                Message.objects.create(
                    chat=chat,
                    sender=requester,
                    content=SYSTEM_MESSAGES.PARTICIPANT_LEFT.format(actor=requester.display_name),
                    is_system_message=True,
                )

        if change.chat_deleted:
            self.get_logger().info(f"Chat {chat_id} deleted: last participant {requester.id} left")
            return ServiceResult.success(
                change,
                message="You were the last participant. Chat has been deleted.",
            )

        self.get_logger().info(f"User {requester.id} left chat {chat_id}")
        self._dispatch(
            self.dispatcher.notify_chat,
            chat_id,
            NOTIFICATION_TYPES.PARTICIPANT_LEFT,
            {
                "chat_id": chat_id,
                "user": user_ref(requester),
                "new_owner_id": change.new_owner_id,
            },
        )
        return ServiceResult.success(change, message="You have left the chat")

    def _end_membership(self, chat: Chat, membership: ChatParticipant) -> MembershipChange:
        """
        Delete a membership, keeping the group invariant.

        Must run inside the caller's transaction with the chat row locked.
        If the departing user owns the chat, ownership moves to the
        earliest-joined other participant; with nobody left the chat is
        deleted instead.
        """
        change = MembershipChange(chat_id=chat.id, user_id=membership.user_id)

        successor = (
            ChatParticipant.objects.filter(chat=chat)
            .exclude(pk=membership.pk)
            .order_by("created_at", "id")
            .first()
        )
        if successor is None:
            chat.delete()
            change.chat_deleted = True
            return change

        if chat.created_by_id == membership.user_id:
            chat.created_by_id = successor.user_id
            chat.save(update_fields=["created_by", "updated_at"])
            change.new_owner_id = successor.user_id
            self.get_logger().info(
                f"Transferred ownership of chat {chat.id} from user {membership.user_id} "
                f"to user {successor.user_id}"
            )

        membership.delete()
        return change

    # -------------------------------------------------------------------------
    # Read state
    # -------------------------------------------------------------------------

    def mark_as_read(self, requester: User, chat_id: int) -> ServiceResult[None]:
        """
        Acknowledge that the requester has read a chat.

        Read receipts are not persisted; this only validates access.

        Error codes:
            CHAT_NOT_FOUND, NOT_PARTICIPANT
        """
        if not Chat.objects.filter(pk=chat_id).exists():
            return ServiceResult.failure("Chat not found", error_code="CHAT_NOT_FOUND")
        if not is_privileged(requester) and not self.is_participant(chat_id, requester.id):
            return ServiceResult.failure(
                "You are not a participant in this chat",
                error_code="NOT_PARTICIPANT",
            )
        return ServiceResult.success(None, message="Messages marked as read")


class MessageService(NotifyingService):
    """
    Service for message operations.

    Methods:
        send_message: Persist a message and publish it to the chat group
        get_history: Messages of a chat, newest first
    """

    def send_message(
        self,
        requester: User,
        chat_id: int,
        content: str | None,
    ) -> ServiceResult[Message]:
        """
        Send a message to a chat.

        Membership is checked against the database on every call, under the
        chat row lock, so a user removed after joining the realtime room can
        no longer post.

        Returns:
            ServiceResult with the new Message (sender loaded)

        Error codes:
            EMPTY_CONTENT: Content is missing or blank
            NOT_PARTICIPANT: Requester is not a member of the chat
        """
        content = content.strip() if content else ""
        if not content:
            return ServiceResult.failure(
                "Message content cannot be empty",
                error_code="EMPTY_CONTENT",
                errors={"content": ["This field may not be blank."]},
            )

        with self.atomic():
            # Serializes with add/remove/leave on the chat row
            Chat.objects.select_for_update().filter(pk=chat_id).first()
            if not ChatService.is_participant(chat_id, requester.id):
                return ServiceResult.failure(
                    "You are not a participant in this chat",
                    error_code="NOT_PARTICIPANT",
                )

            message = Message.objects.create(chat_id=chat_id, sender=requester, content=content)
            # update() skips auto_now, so the timestamp is set explicitly
            Chat.objects.filter(pk=chat_id).update(updated_at=timezone.now())

        message = Message.objects.select_related("sender").get(pk=message.pk)
        self.get_logger().debug(f"User {requester.id} sent message {message.id} to chat {chat_id}")

        self._dispatch(
            self.dispatcher.publish_chat,
            chat_id,
            REALTIME_EVENTS.NEW_MESSAGE,
            MessageSerializer(message).data,
        )
        return ServiceResult.success(message, message="Message sent successfully")

    def get_history(self, requester: User, chat_id: int) -> ServiceResult[QuerySet[Message]]:
        """
        Messages of a chat, newest first, for paging by the caller.

        Error codes:
            NOT_PARTICIPANT: Requester is not a member and not privileged
            CHAT_NOT_FOUND: Privileged requester asked for a missing chat
        """
        if not is_privileged(requester):
            if not ChatService.is_participant(chat_id, requester.id):
                return ServiceResult.failure(
                    "You are not a participant in this chat",
                    error_code="NOT_PARTICIPANT",
                )
        elif not Chat.objects.filter(pk=chat_id).exists():
            return ServiceResult.failure("Chat not found", error_code="CHAT_NOT_FOUND")

        messages = (
            Message.objects.filter(chat_id=chat_id)
            .select_related("sender")
            .order_by("-created_at", "-id")
        )
        return ServiceResult.success(messages, message="Messages retrieved successfully")
