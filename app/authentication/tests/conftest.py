"""
Test configuration and fixtures for authentication tests.

This module provides:
- User fixtures
- API client helpers for authenticated requests

Usage:
    def test_example(user, authenticated_client):
        response = authenticated_client.get('/api/v1/auth/me/')
        assert response.status_code == 200
"""

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from authentication.tests.factories import UserFactory


@pytest.fixture
def user(db):
    """Create a basic active student."""
    return UserFactory(first_name="Sam", last_name="Student")


@pytest.fixture
def inactive_user(db):
    """Create a deactivated user."""
    return UserFactory(is_active=False)


@pytest.fixture
def access_token(user):
    """Raw JWT access token for `user`."""
    return str(RefreshToken.for_user(user).access_token)


@pytest.fixture
def api_client():
    """Unauthenticated API client."""
    return APIClient()


@pytest.fixture
def authenticated_client(api_client, access_token):
    """API client sending `user`'s bearer token."""
    api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {access_token}")
    return api_client
