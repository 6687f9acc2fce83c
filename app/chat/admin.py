"""
Django admin configuration for chat models.

Provides admin interfaces for:
- Chat management with inline participants
- Message moderation
"""

from django.contrib import admin

from chat.models import Chat, ChatParticipant, DirectChatPair, Message


class ChatParticipantInline(admin.TabularInline):
    """Inline display of participants in chat admin, in join order."""

    model = ChatParticipant
    extra = 0
    readonly_fields = ["created_at"]
    raw_id_fields = ["user"]


class DirectChatPairInline(admin.StackedInline):
    model = DirectChatPair
    extra = 0
    can_delete = False
    raw_id_fields = ["user_low", "user_high"]


@admin.register(Chat)
class ChatAdmin(admin.ModelAdmin):
    """Admin interface for Chat model."""

    list_display = ["id", "name", "is_group", "created_by", "created_at", "updated_at"]
    list_filter = ["is_group", "created_at"]
    search_fields = ["name", "id"]
    readonly_fields = ["created_at", "updated_at"]
    raw_id_fields = ["created_by"]
    inlines = [ChatParticipantInline, DirectChatPairInline]
    ordering = ["-updated_at"]


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    """Admin interface for Message model."""

    list_display = ["id", "chat", "sender", "short_content", "is_system_message", "created_at"]
    list_filter = ["is_system_message", "created_at"]
    search_fields = ["content", "sender__email"]
    readonly_fields = ["created_at"]
    raw_id_fields = ["chat", "sender"]
    ordering = ["-created_at"]

    @admin.display(description="Content")
    def short_content(self, obj):
        """Truncated content for list display."""
        if len(obj.content) > 50:
            return obj.content[:50] + "..."
        return obj.content
