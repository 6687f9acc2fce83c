"""
ViewSets for chat API.

This module provides REST API endpoints for the chat system:
- ChatViewSet: Chat lifecycle, membership and message history

URL Structure:
    /api/v1/chat/chats/                               GET, POST
    /api/v1/chat/chats/{id}/                          GET
    /api/v1/chat/chats/{id}/messages/                 GET, POST
    /api/v1/chat/chats/{id}/participants/             POST
    /api/v1/chat/chats/{id}/participants/{user_id}/   DELETE
    /api/v1/chat/chats/{id}/leave/                    POST
    /api/v1/chat/chats/{id}/read/                     POST
    /api/v1/chat/chats/direct/{user_id}/              POST

Design Decisions:
    - Views only parse input and render results; every rule lives in
      ChatService / MessageService
    - Services are built per request around the app's realtime gateway
    - Responses use the {success, message, data} envelope; failures are
      rendered from ServiceResult.to_response() with a status chosen by
      error_code
"""

from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
    extend_schema_view,
)
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from chat.pagination import MessagePagination
from chat.realtime import build_dispatcher
from chat.serializers import (
    ChatCreateSerializer,
    ChatSerializer,
    MessageCreateSerializer,
    MessageSerializer,
    ParticipantAddSerializer,
)
from chat.services import ChatService, MessageService
from core.services import ServiceResult

# HTTP status for each service error code
ERROR_STATUS = {
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "EMPTY_CONTENT": status.HTTP_400_BAD_REQUEST,
    "PARTICIPANTS_REQUIRED": status.HTTP_400_BAD_REQUEST,
    "DUPLICATE_CHAT": status.HTTP_400_BAD_REQUEST,
    "NOT_GROUP_CHAT": status.HTTP_400_BAD_REQUEST,
    "TARGET_NOT_PARTICIPANT": status.HTTP_400_BAD_REQUEST,
    "ALREADY_PARTICIPANT": status.HTTP_400_BAD_REQUEST,
    "CHAT_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "USER_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "NOT_PARTICIPANT": status.HTTP_403_FORBIDDEN,
    "FORBIDDEN": status.HTTP_403_FORBIDDEN,
    "CANNOT_REMOVE_OWNER": status.HTTP_403_FORBIDDEN,
}


def failure_response(result: ServiceResult, overrides: dict | None = None) -> Response:
    """Render a failed ServiceResult with the status for its error code."""
    statuses = {**ERROR_STATUS, **(overrides or {})}
    return Response(
        result.to_response(),
        status=statuses.get(result.error_code, status.HTTP_400_BAD_REQUEST),
    )


def envelope(message: str, data) -> dict:
    return {"success": True, "message": message, "data": data}


@extend_schema_view(
    list=extend_schema(
        operation_id="list_chats",
        summary="List chats",
        description="Chats the current user belongs to, most recently active first.",
        responses={200: ChatSerializer(many=True)},
        tags=["Chat"],
    ),
    create=extend_schema(
        operation_id="create_chat",
        summary="Create chat",
        description=(
            "Create a direct chat (exactly one other participant) or a named "
            "group chat. A second direct chat for the same pair is rejected "
            "with DUPLICATE_CHAT and the existing chat id in details."
        ),
        request=ChatCreateSerializer,
        responses={
            201: ChatSerializer,
            400: OpenApiResponse(description="Validation failed or chat already exists"),
        },
        tags=["Chat"],
    ),
    retrieve=extend_schema(
        operation_id="get_chat",
        summary="Get chat",
        responses={
            200: ChatSerializer,
            403: OpenApiResponse(description="Not a participant in this chat"),
            404: OpenApiResponse(description="Chat not found"),
        },
        tags=["Chat"],
    ),
)
class ChatViewSet(viewsets.ViewSet):
    """
    ViewSet for chat operations.

    list:
        Get all chats for the current user.

    create:
        Create a new chat (direct or group), optionally with a first message.

    retrieve:
        Get one chat. Members and admins only.

    messages:
        GET pages history newest first; POST sends a message.

    add_participant / remove_participant:
        Group membership changes.

    leave:
        Leave a group chat. Ownership moves to the earliest-joined member;
        the last member out deletes the chat.

    read:
        Acknowledge reading a chat.

    direct:
        Admin shortcut that opens (or reopens) a direct chat with a user.
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    def chat_service(self) -> ChatService:
        return ChatService(build_dispatcher())

    def message_service(self) -> MessageService:
        return MessageService(build_dispatcher())

    def _chat_data(self, chat):
        return ChatSerializer(chat, context={"request": self.request}).data

    def list(self, request):
        result = self.chat_service().list_chats(request.user)
        data = ChatSerializer(result.data, many=True, context={"request": request}).data
        return Response(envelope(result.message, data))

    def create(self, request):
        serializer = ChatCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = self.chat_service().create_chat(
            requester=request.user,
            participant_ids=data["participant_ids"],
            name=data.get("name"),
            is_group=data["is_group"],
            initial_message=data.get("initial_message"),
        )
        if not result.success:
            return failure_response(
                result, {"USER_NOT_FOUND": status.HTTP_400_BAD_REQUEST}
            )

        return Response(
            envelope(result.message, self._chat_data(result.data)),
            status=status.HTTP_201_CREATED,
        )

    def retrieve(self, request, pk=None):
        result = self.chat_service().get_chat(request.user, int(pk))
        if not result.success:
            return failure_response(result)
        return Response(envelope(result.message, self._chat_data(result.data)))

    @extend_schema(
        methods=["GET"],
        operation_id="list_chat_messages",
        summary="List messages",
        description="Message history, newest first.",
        parameters=[
            OpenApiParameter("page", OpenApiTypes.INT, description="1-based page number"),
            OpenApiParameter("limit", OpenApiTypes.INT, description="Page size (max 100)"),
        ],
        responses={200: MessageSerializer(many=True)},
        tags=["Chat - Messages"],
    )
    @extend_schema(
        methods=["POST"],
        operation_id="send_chat_message",
        summary="Send message",
        request=MessageCreateSerializer,
        responses={
            201: MessageSerializer,
            400: OpenApiResponse(description="Empty content"),
            403: OpenApiResponse(description="Not a participant in this chat"),
        },
        tags=["Chat - Messages"],
    )
    @action(detail=True, methods=["get", "post"])
    def messages(self, request, pk=None):
        if request.method == "POST":
            return self._send_message(request, int(pk))

        result = self.message_service().get_history(request.user, int(pk))
        if not result.success:
            return failure_response(result)

        paginator = MessagePagination()
        page = paginator.paginate_queryset(result.data, request, view=self)
        return paginator.get_paginated_response(MessageSerializer(page, many=True).data)

    def _send_message(self, request, chat_id: int):
        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = self.message_service().send_message(
            requester=request.user,
            chat_id=chat_id,
            content=serializer.validated_data["content"],
        )
        if not result.success:
            return failure_response(result)

        return Response(
            envelope(result.message, MessageSerializer(result.data).data),
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(
        operation_id="add_chat_participant",
        summary="Add participant",
        request=ParticipantAddSerializer,
        tags=["Chat - Participants"],
    )
    @action(detail=True, methods=["post"], url_path="participants")
    def add_participant(self, request, pk=None):
        serializer = ParticipantAddSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = self.chat_service().add_participant(
            requester=request.user,
            chat_id=int(pk),
            user_id=serializer.validated_data["user_id"],
        )
        if not result.success:
            return failure_response(result)

        membership = result.data
        return Response(
            envelope(
                result.message,
                {"chat_id": membership.chat_id, "user_id": membership.user_id},
            )
        )

    @extend_schema(
        operation_id="remove_chat_participant",
        summary="Remove participant",
        description="Chat owner or admin only. Only an admin may remove the owner.",
        tags=["Chat - Participants"],
    )
    @action(
        detail=True,
        methods=["delete"],
        url_path=r"participants/(?P<user_id>\d+)",
    )
    def remove_participant(self, request, pk=None, user_id=None):
        result = self.chat_service().remove_participant(
            requester=request.user,
            chat_id=int(pk),
            user_id=int(user_id),
        )
        if not result.success:
            return failure_response(result)

        change = result.data
        return Response(
            envelope(
                result.message,
                {
                    "chat_id": change.chat_id,
                    "user_id": change.user_id,
                    "new_owner_id": change.new_owner_id,
                    "chat_deleted": change.chat_deleted,
                },
            )
        )

    @extend_schema(
        operation_id="leave_chat",
        summary="Leave chat",
        request=None,
        tags=["Chat"],
    )
    @action(detail=True, methods=["post"])
    def leave(self, request, pk=None):
        result = self.chat_service().leave_chat(request.user, int(pk))
        if not result.success:
            return failure_response(
                result, {"NOT_PARTICIPANT": status.HTTP_400_BAD_REQUEST}
            )

        change = result.data
        return Response(
            envelope(
                result.message,
                {
                    "chat_id": change.chat_id,
                    "new_owner_id": change.new_owner_id,
                    "chat_deleted": change.chat_deleted,
                },
            )
        )

    @extend_schema(
        operation_id="mark_chat_read",
        summary="Mark chat as read",
        request=None,
        tags=["Chat"],
    )
    @action(detail=True, methods=["post"])
    def read(self, request, pk=None):
        result = self.chat_service().mark_as_read(request.user, int(pk))
        if not result.success:
            return failure_response(result)
        return Response(envelope(result.message, None))

    @extend_schema(
        operation_id="open_direct_chat",
        summary="Find or create direct chat",
        description=(
            "Admin only. Returns the existing direct chat with the user, or "
            "creates one with a greeting message (201)."
        ),
        request=None,
        responses={201: ChatSerializer, 200: ChatSerializer},
        tags=["Chat"],
    )
    @action(detail=False, methods=["post"], url_path=r"direct/(?P<user_id>\d+)")
    def direct(self, request, user_id=None):
        result = self.chat_service().find_or_create_direct_chat(request.user, int(user_id))
        if not result.success:
            return failure_response(result)

        outcome = result.data
        return Response(
            envelope(result.message, self._chat_data(outcome.chat)),
            status=status.HTTP_201_CREATED if outcome.created else status.HTTP_200_OK,
        )
