"""
Serializers for authentication models.

- UserSerializer: Current-user payload for /api/v1/auth/me/
- UserSummarySerializer: Compact identity embedded in chat payloads
"""

from rest_framework import serializers

from authentication.models import User


class UserSerializer(serializers.ModelSerializer):
    """Serializer for the authenticated user's own record (read-only)."""

    full_name = serializers.CharField(source="get_full_name", read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "first_name",
            "last_name",
            "full_name",
            "role",
            "profile_image",
            "date_joined",
        ]
        read_only_fields = fields


class UserSummarySerializer(serializers.ModelSerializer):
    """
    Compact user representation used inside chat and message payloads.

    The email field is omitted; it only surfaces through `name` for users
    who never set a first or last name.
    """

    name = serializers.CharField(source="display_name", read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "first_name",
            "last_name",
            "name",
            "profile_image",
            "role",
        ]
        read_only_fields = fields
