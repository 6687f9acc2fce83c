"""
URL configuration for the chat service.

URL Structure:
    /                              - ReDoc API documentation
    /admin/                        - Django admin interface
    /health/                       - Health check endpoint (load balancers, Docker)
    /schema/                       - OpenAPI schema (YAML)
    /api/v1/auth/                  - Token endpoints (simplejwt)
        token/                     - Obtain access/refresh pair
        token/refresh/             - Refresh access token
        me/                        - Current user
    /api/v1/chat/                  - Chat endpoints
        chats/                     - Chat list/create
        chats/{id}/                - Chat detail
        chats/{id}/messages/       - Message history/send
        chats/{id}/participants/   - Add participant
        chats/{id}/participants/{user_id}/ - Remove participant
        chats/{id}/leave/          - Leave chat
        chats/{id}/read/           - Mark chat as read
        chats/direct/{user_id}/    - Find or create direct chat
    ws/chat/                       - WebSocket endpoint (see chat.routing)
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

from core.views import health_check

# All routes here are prefixed with /api/v1/
api_v1_patterns = [
    path("auth/", include("authentication.urls")),
    path("chat/", include("chat.urls")),
]

urlpatterns = [
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("admin/", admin.site.urls),
    path("health/", health_check, name="health_check"),
    path("api/v1/", include(api_v1_patterns)),
]

admin.site.site_header = "Chat Admin"
admin.site.site_title = "Chat Admin Portal"
admin.site.index_title = "Chat administration"
