"""
Authentication services.

TokenAuthService turns a bearer credential into a User. It is used by the
WebSocket handshake middleware; HTTP requests go through simplejwt's
JWTAuthentication class, which reads the same tokens.

Related files:
    - chat/middleware.py: Calls resolve_user() during the handshake
"""

from __future__ import annotations

from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken

from authentication.models import User
from core.exceptions import AuthenticationError
from core.services import BaseService


class TokenAuthService(BaseService):
    """
    Resolves JWT access tokens to active users.

    Usage:
        try:
            user = TokenAuthService.resolve_user(token)
        except AuthenticationError as e:
            # e.error_code is TOKEN_MISSING or TOKEN_INVALID
            ...
    """

    @classmethod
    def resolve_user(cls, token: str | None) -> User:
        """
        Validate a raw access token and load its user.

        Raises:
            AuthenticationError: TOKEN_MISSING when no token was supplied,
                TOKEN_INVALID when it fails signature/expiry checks or
                names an unknown or inactive user.
        """
        if not token:
            raise AuthenticationError(
                "Authentication token required",
                error_code="TOKEN_MISSING",
            )

        try:
            access_token = AccessToken(token)
        except TokenError as e:
            cls.get_logger().info(f"Rejected token: {e}")
            raise AuthenticationError(
                "Invalid token",
                error_code="TOKEN_INVALID",
            ) from e

        user_id = access_token.get(api_settings.USER_ID_CLAIM)
        user = User.objects.filter(pk=user_id, is_active=True).first()
        if user is None:
            cls.get_logger().info(f"Token for unknown or inactive user {user_id}")
            raise AuthenticationError(
                "Invalid token",
                error_code="TOKEN_INVALID",
            )
        return user
