"""
Authentication views.

Token issuance is handled by simplejwt:
    - Obtain pair: /api/v1/auth/token/
    - Refresh: /api/v1/auth/token/refresh/

This module adds the current-user endpoint clients use to learn their
own id and role after logging in.
"""

from drf_spectacular.utils import extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.serializers import UserSerializer


class MeView(APIView):
    """
    Return the authenticated user.

    URL: /api/v1/auth/me/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Get current user",
        description="Identity and chat role of the bearer of the access token.",
        tags=["Auth"],
        responses={200: UserSerializer},
    )
    def get(self, request):
        serializer = UserSerializer(request.user)
        return Response(
            {
                "success": True,
                "message": "User retrieved successfully",
                "data": serializer.data,
            }
        )
