"""
Test configuration and fixtures for chat tests.

This module provides:
- User fixtures (owner, members, outsider, admin)
- Chat fixtures (direct and group)
- RecordingDispatcher, a NotificationDispatcher double
- API client helpers for authenticated requests

Usage:
    def test_example(group_chat, owner_client):
        response = owner_client.get(f"/api/v1/chat/chats/{group_chat.id}/")
        assert response.status_code == 200
"""

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from authentication.models import User
from authentication.tests.factories import UserFactory
from chat.services import ChatService, MessageService
from chat.tests.factories import make_direct_chat, make_group_chat


class RecordingDispatcher:
    """
    Stand-in for NotificationDispatcher that records every call.

    Attributes:
        calls: (method, target_id, name, payload) tuples in call order
    """

    def __init__(self):
        self.calls = []

    def notify_user(self, user_id, notification_type, payload):
        self.calls.append(("notify_user", user_id, notification_type, payload))

    def notify_chat(self, chat_id, notification_type, payload):
        self.calls.append(("notify_chat", chat_id, notification_type, payload))

    def publish_chat(self, chat_id, event, payload):
        self.calls.append(("publish_chat", chat_id, event, payload))

    def named(self, name):
        """Calls whose notification type or event equals `name`."""
        return [call for call in self.calls if call[2] == name]


class FailingDispatcher:
    """Dispatcher whose every delivery raises, like a dead channel layer."""

    def notify_user(self, *args):
        raise ConnectionError("channel layer down")

    notify_chat = notify_user
    publish_chat = notify_user


def client_for(user):
    client = APIClient()
    token = RefreshToken.for_user(user).access_token
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    return client


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def owner_user(db):
    """User who owns the group chat fixture."""
    return UserFactory(first_name="Olivia", last_name="Owner")


@pytest.fixture
def member_user(db):
    """First member to join the group chat after the owner."""
    return UserFactory(first_name="Mia", last_name="Member")


@pytest.fixture
def second_member(db):
    """Second member to join the group chat."""
    return UserFactory(first_name="Sol", last_name="Second")


@pytest.fixture
def outsider(db):
    """User who is not a participant in any fixture chat."""
    return UserFactory(first_name="Otto", last_name="Outsider")


@pytest.fixture
def admin_user(db):
    """Privileged user."""
    return UserFactory(first_name="Ana", last_name="Admin", role=User.Role.ADMIN)


# =============================================================================
# Chat Fixtures
# =============================================================================


@pytest.fixture
def group_chat(owner_user, member_user, second_member):
    """Group chat: owner, then member_user, then second_member."""
    return make_group_chat(owner_user, member_user, second_member)


@pytest.fixture
def direct_chat(owner_user, member_user):
    """Direct chat between owner_user and member_user."""
    return make_direct_chat(owner_user, member_user)


# =============================================================================
# Service Fixtures
# =============================================================================


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def chat_service(dispatcher):
    return ChatService(dispatcher)


@pytest.fixture
def message_service(dispatcher):
    return MessageService(dispatcher)


@pytest.fixture
def recorded(monkeypatch, dispatcher):
    """Route views' dispatchers to the recording double."""
    monkeypatch.setattr("chat.views.build_dispatcher", lambda: dispatcher)
    return dispatcher


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def owner_client(owner_user):
    return client_for(owner_user)


@pytest.fixture
def member_client(member_user):
    return client_for(member_user)


@pytest.fixture
def outsider_client(outsider):
    return client_for(outsider)


@pytest.fixture
def admin_client(admin_user):
    return client_for(admin_user)
