"""
Tests for chat service layer business logic.

This module tests:
- ChatService: Chat lifecycle (create, membership, leave, direct shortcut)
- MessageService: Message send and history

Test Organization:
    - Each service method has its own test class
    - Each test validates ONE specific behavior
    - Tests use descriptive names following: test_<scenario>_<expected_outcome>

Testing Philosophy:
    Tests focus on observable behavior:
    - ServiceResult success/failure states and error codes
    - Database state changes
    - Notifications captured by RecordingDispatcher
"""

from unittest import mock

import pytest
from django.db import IntegrityError

from authentication.models import User
from authentication.tests.factories import UserFactory
from chat.models import Chat, ChatParticipant, DirectChatPair, Message
from chat.services import ChatService, MessageService, is_privileged
from chat.tests.conftest import FailingDispatcher
from chat.tests.factories import MessageFactory, make_direct_chat, make_group_chat


def member_ids(chat_id):
    return set(ChatParticipant.objects.filter(chat_id=chat_id).values_list("user_id", flat=True))


# =============================================================================
# ChatService.create_chat
# =============================================================================


class TestCreateChatDirect:
    """
    Tests for ChatService.create_chat() with is_group=False.

    Verifies:
    - Both users become members and the requester owns the chat
    - A second chat for the same pair is rejected with its id
    - The other user is notified
    """

    def test_creates_direct_chat_with_both_members(self, chat_service, owner_user, member_user):
        result = chat_service.create_chat(owner_user, [member_user.id])

        assert result.success is True
        chat = result.data
        assert chat.is_group is False
        assert chat.name is None
        assert chat.created_by_id == owner_user.id
        assert member_ids(chat.id) == {owner_user.id, member_user.id}
        assert DirectChatPair.objects.filter(chat=chat).exists()

    def test_duplicate_pair_returns_existing_chat_id(self, chat_service, owner_user, member_user):
        """
        Creating a second direct chat for the same pair fails.

        Why it matters: Both users must always land in the same chat, and
        the client needs the existing id to navigate there.
        """
        first = chat_service.create_chat(owner_user, [member_user.id])

        second = chat_service.create_chat(member_user, [owner_user.id])

        assert second.success is False
        assert second.error_code == "DUPLICATE_CHAT"
        assert second.error == "Chat already exists"
        assert second.details == {"chat_id": first.data.id}
        assert Chat.objects.count() == 1

    def test_name_is_ignored_for_direct_chats(self, chat_service, owner_user, member_user):
        result = chat_service.create_chat(owner_user, [member_user.id], name="Ignored")

        assert result.data.name is None

    def test_requester_id_in_participants_is_ignored(self, chat_service, owner_user, member_user):
        result = chat_service.create_chat(owner_user, [owner_user.id, member_user.id])

        assert result.success is True
        assert member_ids(result.data.id) == {owner_user.id, member_user.id}

    def test_direct_chat_with_two_targets_fails(self, chat_service, owner_user, member_user, outsider):
        result = chat_service.create_chat(owner_user, [member_user.id, outsider.id])

        assert result.success is False
        assert result.error_code == "VALIDATION_ERROR"

    def test_direct_chat_with_only_self_fails(self, chat_service, owner_user):
        result = chat_service.create_chat(owner_user, [owner_user.id])

        assert result.success is False
        assert result.error_code == "VALIDATION_ERROR"

    def test_notifies_other_user_with_their_view_of_chat(self, chat_service, dispatcher, owner_user, member_user):
        result = chat_service.create_chat(owner_user, [member_user.id])

        calls = dispatcher.named("new-chat")
        assert len(calls) == 1
        method, user_id, _, payload = calls[0]
        assert method == "notify_user"
        assert user_id == member_user.id
        assert payload["chat"]["id"] == result.data.id
        assert payload["chat"]["name"] == f"Chat with {owner_user.first_name}"
        assert payload["initiator"]["id"] == owner_user.id

    def test_integrity_error_on_race_reports_duplicate(self, chat_service, owner_user, member_user):
        """
        Given a concurrent request created the pair between the pre-check
        and the insert
        When the insert hits the unique constraint
        Then DUPLICATE_CHAT is returned with the winner's id
        """
        winner = make_direct_chat(owner_user, member_user)

        with mock.patch.object(ChatService, "_find_direct_chat_id", side_effect=[None, winner.id]):
            result = chat_service.create_chat(owner_user, [member_user.id])

        assert result.success is False
        assert result.error_code == "DUPLICATE_CHAT"
        assert result.details == {"chat_id": winner.id}
        assert Chat.objects.count() == 1


class TestCreateChatGroup:
    """Tests for ChatService.create_chat() with is_group=True."""

    def test_creates_group_with_all_members(self, chat_service, owner_user, member_user, second_member):
        result = chat_service.create_chat(
            owner_user,
            [member_user.id, second_member.id],
            name="Algebra",
            is_group=True,
        )

        assert result.success is True
        assert result.data.name == "Algebra"
        assert result.data.created_by_id == owner_user.id
        assert member_ids(result.data.id) == {owner_user.id, member_user.id, second_member.id}

    def test_notifies_every_participant_except_requester(
        self, chat_service, dispatcher, owner_user, member_user, second_member
    ):
        chat_service.create_chat(owner_user, [member_user.id, second_member.id], name="G", is_group=True)

        notified = {call[1] for call in dispatcher.named("new-chat")}
        assert notified == {member_user.id, second_member.id}

    def test_group_requires_name(self, chat_service, owner_user, member_user):
        result = chat_service.create_chat(owner_user, [member_user.id], name="  ", is_group=True)

        assert result.success is False
        assert result.error_code == "VALIDATION_ERROR"
        assert "name" in result.errors

    def test_groups_with_same_members_are_allowed(self, chat_service, owner_user, member_user):
        chat_service.create_chat(owner_user, [member_user.id], name="A", is_group=True)
        result = chat_service.create_chat(owner_user, [member_user.id], name="B", is_group=True)

        assert result.success is True
        assert Chat.objects.filter(is_group=True).count() == 2


class TestCreateChatValidation:
    """Failure modes shared by direct and group creation."""

    def test_empty_participants_fails(self, chat_service, owner_user):
        result = chat_service.create_chat(owner_user, [])

        assert result.success is False
        assert result.error_code == "PARTICIPANTS_REQUIRED"
        assert result.error == "Participants are required"

    def test_unknown_user_fails_without_writing(self, chat_service, owner_user, member_user):
        """
        One missing user aborts the whole create.

        Why it matters: A chat must never exist with only part of its
        requested membership.
        """
        result = chat_service.create_chat(owner_user, [member_user.id, 999999], name="G", is_group=True)

        assert result.success is False
        assert result.error_code == "USER_NOT_FOUND"
        assert result.error == "User with ID 999999 not found"
        assert result.details == {"user_id": 999999}
        assert Chat.objects.count() == 0
        assert ChatParticipant.objects.count() == 0

    def test_initial_message_is_saved_from_requester(self, chat_service, owner_user, member_user):
        result = chat_service.create_chat(owner_user, [member_user.id], initial_message="  hi  ")

        message = Message.objects.get(chat=result.data)
        assert message.content == "hi"
        assert message.sender_id == owner_user.id
        assert message.is_system_message is False

    def test_blank_initial_message_is_skipped(self, chat_service, owner_user, member_user):
        result = chat_service.create_chat(owner_user, [member_user.id], initial_message="   ")

        assert not Message.objects.filter(chat=result.data).exists()

    def test_failed_message_insert_rolls_back_chat(self, chat_service, owner_user, member_user):
        with (
            mock.patch.object(Message.objects, "create", side_effect=IntegrityError("boom")),
            pytest.raises(IntegrityError),
        ):
            chat_service.create_chat(owner_user, [member_user.id], name="G", is_group=True, initial_message="x")

        assert Chat.objects.count() == 0
        assert ChatParticipant.objects.count() == 0


# =============================================================================
# ChatService queries
# =============================================================================


class TestListAndGetChat:
    """Tests for list_chats() and get_chat()."""

    def test_lists_only_requesters_chats_most_recent_first(
        self, chat_service, message_service, owner_user, member_user, outsider
    ):
        older = make_group_chat(owner_user, member_user, name="Older")
        newer = make_group_chat(owner_user, name="Newer")
        make_group_chat(outsider, name="Not mine")
        message_service.send_message(owner_user, older.id, "bump")

        chats = list(chat_service.list_chats(owner_user).data)

        assert [chat.id for chat in chats] == [older.id, newer.id]

    def test_get_chat_for_member(self, chat_service, group_chat, member_user):
        result = chat_service.get_chat(member_user, group_chat.id)

        assert result.success is True
        assert result.data.id == group_chat.id

    def test_get_chat_for_outsider_fails(self, chat_service, group_chat, outsider):
        result = chat_service.get_chat(outsider, group_chat.id)

        assert result.error_code == "NOT_PARTICIPANT"

    def test_get_chat_for_admin_outsider_succeeds(self, chat_service, group_chat, admin_user):
        assert chat_service.get_chat(admin_user, group_chat.id).success is True

    def test_get_missing_chat(self, chat_service, owner_user):
        assert chat_service.get_chat(owner_user, 424242).error_code == "CHAT_NOT_FOUND"


# =============================================================================
# ChatService.add_participant
# =============================================================================


class TestAddParticipant:
    """Tests for ChatService.add_participant()."""

    def test_member_adds_user(self, chat_service, group_chat, member_user, outsider):
        result = chat_service.add_participant(member_user, group_chat.id, outsider.id)

        assert result.success is True
        assert outsider.id in member_ids(group_chat.id)

    def test_writes_system_message_from_actor(self, chat_service, group_chat, member_user, outsider):
        chat_service.add_participant(member_user, group_chat.id, outsider.id)

        message = Message.objects.get(chat=group_chat, is_system_message=True)
        assert message.sender_id == member_user.id
        assert message.content == f"{member_user.display_name} added {outsider.display_name} to the chat"

    def test_notifies_chat_and_added_user(self, chat_service, dispatcher, group_chat, member_user, outsider):
        chat_service.add_participant(member_user, group_chat.id, outsider.id)

        (room_call,) = dispatcher.named("participant-added")
        assert room_call[0] == "notify_chat"
        assert room_call[1] == group_chat.id
        assert room_call[3]["user"]["id"] == outsider.id
        assert room_call[3]["added_by"]["id"] == member_user.id

        (user_call,) = dispatcher.named("added-to-chat")
        assert user_call[0] == "notify_user"
        assert user_call[1] == outsider.id
        assert user_call[3]["chat_id"] == group_chat.id
        assert user_call[3]["chat_name"] == group_chat.name

    def test_admin_outsider_can_add(self, chat_service, group_chat, admin_user, outsider):
        assert chat_service.add_participant(admin_user, group_chat.id, outsider.id).success is True

    def test_non_member_cannot_add(self, chat_service, group_chat, outsider):
        other = UserFactory()

        result = chat_service.add_participant(outsider, group_chat.id, other.id)

        assert result.error_code == "NOT_PARTICIPANT"
        assert other.id not in member_ids(group_chat.id)

    def test_direct_chat_rejects_add(self, chat_service, direct_chat, owner_user, outsider):
        result = chat_service.add_participant(owner_user, direct_chat.id, outsider.id)

        assert result.error_code == "NOT_GROUP_CHAT"
        assert len(member_ids(direct_chat.id)) == 2

    def test_already_member(self, chat_service, dispatcher, group_chat, owner_user, member_user):
        result = chat_service.add_participant(owner_user, group_chat.id, member_user.id)

        assert result.error_code == "ALREADY_PARTICIPANT"
        assert dispatcher.calls == []

    def test_missing_chat_and_user(self, chat_service, group_chat, owner_user):
        assert chat_service.add_participant(owner_user, 424242, owner_user.id).error_code == "CHAT_NOT_FOUND"
        assert chat_service.add_participant(owner_user, group_chat.id, 424242).error_code == "USER_NOT_FOUND"


# =============================================================================
# ChatService.remove_participant
# =============================================================================


class TestRemoveParticipant:
    """Tests for ChatService.remove_participant()."""

    def test_owner_removes_member(self, chat_service, group_chat, owner_user, member_user):
        result = chat_service.remove_participant(owner_user, group_chat.id, member_user.id)

        assert result.success is True
        assert member_user.id not in member_ids(group_chat.id)
        message = Message.objects.get(chat=group_chat, is_system_message=True)
        assert message.content == f"{owner_user.display_name} removed {member_user.display_name} from the chat"

    def test_notifies_chat_and_removed_user(self, chat_service, dispatcher, group_chat, owner_user, member_user):
        chat_service.remove_participant(owner_user, group_chat.id, member_user.id)

        (room_call,) = dispatcher.named("participant-removed")
        assert room_call[1] == group_chat.id
        assert room_call[3]["user_id"] == member_user.id
        assert room_call[3]["removed_by"]["id"] == owner_user.id

        (user_call,) = dispatcher.named("removed-from-chat")
        assert user_call[1] == member_user.id

    def test_member_cannot_remove(self, chat_service, group_chat, member_user, second_member):
        result = chat_service.remove_participant(member_user, group_chat.id, second_member.id)

        assert result.error_code == "FORBIDDEN"
        assert second_member.id in member_ids(group_chat.id)

    def test_owner_cannot_remove_self(self, chat_service, group_chat, owner_user):
        result = chat_service.remove_participant(owner_user, group_chat.id, owner_user.id)

        assert result.error_code == "CANNOT_REMOVE_OWNER"
        assert owner_user.id in member_ids(group_chat.id)

    def test_target_not_member(self, chat_service, group_chat, owner_user, outsider):
        result = chat_service.remove_participant(owner_user, group_chat.id, outsider.id)

        assert result.error_code == "TARGET_NOT_PARTICIPANT"

    def test_admin_removing_owner_hands_off_ownership(
        self, chat_service, group_chat, admin_user, owner_user, member_user
    ):
        """
        Given an admin removes the owner
        Then the earliest-joined remaining member becomes owner

        Why it matters: A group must never be left without an owner.
        """
        result = chat_service.remove_participant(admin_user, group_chat.id, owner_user.id)

        group_chat.refresh_from_db()
        assert result.success is True
        assert result.data.new_owner_id == member_user.id
        assert group_chat.created_by_id == member_user.id
        assert owner_user.id not in member_ids(group_chat.id)

    def test_direct_chat_rejects_remove(self, chat_service, direct_chat, owner_user, member_user):
        result = chat_service.remove_participant(owner_user, direct_chat.id, member_user.id)

        assert result.error_code == "NOT_GROUP_CHAT"


# =============================================================================
# ChatService.leave_chat
# =============================================================================


class TestLeaveChat:
    """Tests for ChatService.leave_chat()."""

    def test_member_leaves(self, chat_service, dispatcher, group_chat, member_user, owner_user):
        result = chat_service.leave_chat(member_user, group_chat.id)

        group_chat.refresh_from_db()
        assert result.success is True
        assert result.message == "You have left the chat"
        assert member_user.id not in member_ids(group_chat.id)
        assert group_chat.created_by_id == owner_user.id
        message = Message.objects.get(chat=group_chat, is_system_message=True)
        assert message.content == f"{member_user.display_name} left the chat"

        (call,) = dispatcher.named("participant-left")
        assert call[0] == "notify_chat"
        assert call[3]["user"]["id"] == member_user.id
        assert call[3]["new_owner_id"] is None

    def test_owner_leaving_transfers_to_earliest_joined(
        self, chat_service, dispatcher, group_chat, owner_user, member_user
    ):
        result = chat_service.leave_chat(owner_user, group_chat.id)

        group_chat.refresh_from_db()
        assert result.data.new_owner_id == member_user.id
        assert group_chat.created_by_id == member_user.id
        assert dispatcher.named("participant-left")[0][3]["new_owner_id"] == member_user.id

    def test_last_participant_deletes_chat(self, chat_service, dispatcher, owner_user):
        """
        Given a group with a single member
        When that member leaves
        Then the chat and all its rows are gone and nothing is broadcast
        """
        chat = make_group_chat(owner_user, name="Solo")
        MessageFactory(chat=chat, sender=owner_user)

        result = chat_service.leave_chat(owner_user, chat.id)

        assert result.success is True
        assert result.data.chat_deleted is True
        assert result.message == "You were the last participant. Chat has been deleted."
        assert not Chat.objects.filter(pk=chat.id).exists()
        assert not Message.objects.filter(chat_id=chat.id).exists()
        assert dispatcher.calls == []

    def test_leaving_twice_fails(self, chat_service, group_chat, member_user):
        chat_service.leave_chat(member_user, group_chat.id)

        result = chat_service.leave_chat(member_user, group_chat.id)

        assert result.error_code == "NOT_PARTICIPANT"

    def test_cannot_leave_direct_chat(self, chat_service, direct_chat, owner_user):
        result = chat_service.leave_chat(owner_user, direct_chat.id)

        assert result.error_code == "NOT_GROUP_CHAT"
        assert owner_user.id in member_ids(direct_chat.id)

    def test_missing_chat(self, chat_service, owner_user):
        assert chat_service.leave_chat(owner_user, 424242).error_code == "CHAT_NOT_FOUND"


# =============================================================================
# ChatService.find_or_create_direct_chat / mark_as_read
# =============================================================================


class TestFindOrCreateDirectChat:
    """Tests for the admin direct-chat shortcut."""

    def test_admin_creates_named_chat_with_greeting(self, chat_service, dispatcher, admin_user, member_user):
        result = chat_service.find_or_create_direct_chat(admin_user, member_user.id)

        assert result.success is True
        assert result.data.created is True
        chat = result.data.chat
        assert chat.name == f"Chat with {member_user.first_name}"
        assert member_ids(chat.id) == {admin_user.id, member_user.id}
        greeting = Message.objects.get(chat=chat)
        assert greeting.content == f"Hello {member_user.first_name}, how can I help you today?"
        assert greeting.sender_id == admin_user.id
        assert dispatcher.named("new-chat")[0][1] == member_user.id

    def test_returns_existing_chat(self, chat_service, admin_user, member_user):
        first = chat_service.find_or_create_direct_chat(admin_user, member_user.id)

        second = chat_service.find_or_create_direct_chat(admin_user, member_user.id)

        assert second.data.created is False
        assert second.data.chat.id == first.data.chat.id
        assert Chat.objects.count() == 1

    def test_non_admin_is_forbidden(self, chat_service, owner_user, member_user):
        assert chat_service.find_or_create_direct_chat(owner_user, member_user.id).error_code == "FORBIDDEN"

    def test_unknown_user(self, chat_service, admin_user):
        assert chat_service.find_or_create_direct_chat(admin_user, 424242).error_code == "USER_NOT_FOUND"

    def test_self(self, chat_service, admin_user):
        assert chat_service.find_or_create_direct_chat(admin_user, admin_user.id).error_code == "VALIDATION_ERROR"


class TestMarkAsRead:
    def test_member_succeeds(self, chat_service, group_chat, member_user):
        result = chat_service.mark_as_read(member_user, group_chat.id)

        assert result.success is True
        assert result.message == "Messages marked as read"

    def test_outsider_and_missing(self, chat_service, group_chat, outsider):
        assert chat_service.mark_as_read(outsider, group_chat.id).error_code == "NOT_PARTICIPANT"
        assert chat_service.mark_as_read(outsider, 424242).error_code == "CHAT_NOT_FOUND"


# =============================================================================
# MessageService
# =============================================================================


class TestSendMessage:
    """Tests for MessageService.send_message()."""

    def test_member_sends_message(self, message_service, dispatcher, group_chat, member_user):
        result = message_service.send_message(member_user, group_chat.id, "  Hello!  ")

        assert result.success is True
        assert result.data.content == "Hello!"
        assert result.data.sender_id == member_user.id

        (call,) = dispatcher.named("new-message")
        assert call[0] == "publish_chat"
        assert call[1] == group_chat.id
        assert call[3]["id"] == result.data.id
        assert call[3]["sender"]["id"] == member_user.id

    def test_bumps_chat_updated_at(self, message_service, group_chat, member_user):
        before = group_chat.updated_at

        message_service.send_message(member_user, group_chat.id, "bump")

        group_chat.refresh_from_db()
        assert group_chat.updated_at > before

    def test_blank_content_fails(self, message_service, dispatcher, group_chat, member_user):
        for content in ["", "   ", None]:
            result = message_service.send_message(member_user, group_chat.id, content)
            assert result.error_code == "EMPTY_CONTENT"
            assert result.error == "Message content cannot be empty"

        assert not Message.objects.exists()
        assert dispatcher.calls == []

    def test_non_member_cannot_send(self, message_service, group_chat, outsider):
        result = message_service.send_message(outsider, group_chat.id, "hi")

        assert result.error_code == "NOT_PARTICIPANT"
        assert not Message.objects.exists()

    def test_removed_member_cannot_send(self, chat_service, message_service, group_chat, owner_user, member_user):
        """
        Membership is re-read on every send.

        Why it matters: A removed user may still hold an open socket.
        """
        chat_service.remove_participant(owner_user, group_chat.id, member_user.id)

        result = message_service.send_message(member_user, group_chat.id, "still here?")

        assert result.error_code == "NOT_PARTICIPANT"

    def test_removal_committed_while_waiting_for_lock_blocks_send(
        self, monkeypatch, message_service, dispatcher, group_chat, member_user
    ):
        """
        Membership is checked after the chat row lock is taken.

        Why it matters: A leave or removal that commits while the sender
        waits on the lock must still keep the message out.
        """
        lock = Chat.objects.select_for_update

        def lock_after_removal():
            ChatParticipant.objects.filter(chat=group_chat, user=member_user).delete()
            return lock()

        monkeypatch.setattr(Chat.objects, "select_for_update", lock_after_removal)

        result = message_service.send_message(member_user, group_chat.id, "sneaky")

        assert result.error_code == "NOT_PARTICIPANT"
        assert not Message.objects.filter(content="sneaky").exists()
        assert dispatcher.calls == []

    def test_dispatch_failure_keeps_message(self, group_chat, member_user):
        service = MessageService(FailingDispatcher())

        result = service.send_message(member_user, group_chat.id, "persisted anyway")

        assert result.success is True
        assert Message.objects.filter(content="persisted anyway").exists()

    def test_unstarted_gateway_keeps_message(self, group_chat, member_user):
        from chat.realtime import NotificationDispatcher

        result = MessageService(NotificationDispatcher(None)).send_message(member_user, group_chat.id, "x")

        assert result.success is True


def failing_dispatcher():
    return FailingDispatcher()


def unstarted_dispatcher():
    from chat.realtime import NotificationDispatcher

    return NotificationDispatcher(None)


@pytest.mark.parametrize("make_dispatcher", [failing_dispatcher, unstarted_dispatcher])
class TestDispatchFailureKeepsWrite:
    """
    Lifecycle writes survive a broken notification path.

    Why it matters: Notifications go out after commit; losing them must
    never undo or fail the change itself.
    """

    def test_create_chat(self, make_dispatcher, owner_user, member_user, second_member):
        service = ChatService(make_dispatcher())

        result = service.create_chat(
            owner_user,
            [member_user.id, second_member.id],
            name="Study group",
            is_group=True,
            initial_message="welcome",
        )

        assert result.success is True
        assert member_ids(result.data.id) == {owner_user.id, member_user.id, second_member.id}
        assert Message.objects.filter(chat=result.data, content="welcome").exists()

    def test_add_participant(self, make_dispatcher, group_chat, owner_user, outsider):
        result = ChatService(make_dispatcher()).add_participant(owner_user, group_chat.id, outsider.id)

        assert result.success is True
        assert outsider.id in member_ids(group_chat.id)

    def test_remove_participant(self, make_dispatcher, group_chat, owner_user, member_user):
        result = ChatService(make_dispatcher()).remove_participant(owner_user, group_chat.id, member_user.id)

        assert result.success is True
        assert member_user.id not in member_ids(group_chat.id)

    def test_leave_chat(self, make_dispatcher, group_chat, owner_user, member_user):
        result = ChatService(make_dispatcher()).leave_chat(owner_user, group_chat.id)

        assert result.success is True
        assert result.data.new_owner_id == member_user.id
        assert owner_user.id not in member_ids(group_chat.id)
        assert Chat.objects.get(pk=group_chat.id).created_by_id == member_user.id


class TestGetHistory:
    """Tests for MessageService.get_history()."""

    def test_newest_first(self, message_service, group_chat, owner_user):
        first = MessageFactory(chat=group_chat, sender=owner_user)
        second = MessageFactory(chat=group_chat, sender=owner_user)

        result = message_service.get_history(owner_user, group_chat.id)

        assert list(result.data) == [second, first]

    def test_outsider_cannot_read(self, message_service, group_chat, outsider):
        assert message_service.get_history(outsider, group_chat.id).error_code == "NOT_PARTICIPANT"

    def test_admin_reads_any_chat(self, message_service, group_chat, admin_user):
        assert message_service.get_history(admin_user, group_chat.id).success is True
        assert message_service.get_history(admin_user, 424242).error_code == "CHAT_NOT_FOUND"


class TestIsPrivileged:
    def test_only_admin_role_is_privileged(self, admin_user, owner_user):
        assert is_privileged(admin_user) is True
        assert is_privileged(owner_user) is False

    def test_superuser_is_privileged_through_admin_role(self, db):
        superuser = User.objects.create_superuser(email="root@example.com", password="x")

        assert is_privileged(superuser) is True
