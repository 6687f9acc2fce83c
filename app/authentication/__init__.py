"""
Authentication application.

Owns user identity and bearer-token resolution. The chat app only reads
users (id, display name, role, avatar); it never creates or edits them.

Key components:
    - User model: Custom email-based user with a chat role
    - TokenAuthService: Resolves a JWT access token to an active user

Usage:
    from authentication.models import User
    from authentication.services import TokenAuthService
"""
