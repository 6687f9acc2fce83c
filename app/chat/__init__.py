"""
Chat app for real-time messaging.

This app handles:
- Direct (1:1) and group chats
- Membership changes with owner hand-off
- Message sending and history
- WebSocket real-time delivery

Related apps:
    - authentication: User model for participants, token resolution
    - core: ServiceResult, BaseModel, exception handling

WebSocket Support:
    Uses Django Channels for real-time communication.
    See consumers.py for WebSocket handlers.
    See routing.py for WebSocket URL patterns.
    See realtime.py for the gateway services use to fan out events.

Usage:
    from chat.realtime import build_dispatcher
    from chat.services import ChatService, MessageService

    # Create chat
    result = ChatService(build_dispatcher()).create_chat(
        requester=user,
        participant_ids=[other_user.id],
    )

    # Send message
    result = MessageService(build_dispatcher()).send_message(
        requester=user,
        chat_id=result.data.id,
        content="Hello!",
    )
"""
