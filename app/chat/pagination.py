"""
Pagination classes for chat API.

MessagePagination pages message history newest first, using page and
limit query parameters, and returns the page inside the standard success
envelope with explicit metadata:

    {
        "success": true,
        "message": "...",
        "data": {
            "messages": [...],
            "pagination": {"total", "page", "limit", "total_pages"}
        }
    }

A page past the end is an empty page, not an error.
"""

from django.core.paginator import Page
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response

from chat.constants import CHAT_CONFIG


class MessagePagination(PageNumberPagination):
    """
    Page-number pagination for message history.

    Default: 20 messages per page
    Maximum: 100 messages per page

    Query parameters:
        page: 1-based page number (invalid values fall back to 1)
        limit: Number of messages (optional override)
    """

    page_size = CHAT_CONFIG.MESSAGES_DEFAULT_PAGE_SIZE
    max_page_size = CHAT_CONFIG.MESSAGES_MAX_PAGE_SIZE
    page_size_query_param = "limit"
    page_query_param = "page"

    def paginate_queryset(self, queryset, request, view=None):
        self.request = request
        paginator = self.django_paginator_class(queryset, self.get_page_size(request))

        page_number = self.get_page_number(request, paginator)
        if page_number in self.last_page_strings:
            page_number = paginator.num_pages
        try:
            page_number = max(int(page_number), 1)
        except (TypeError, ValueError):
            page_number = 1

        if page_number > paginator.num_pages:
            self.page = Page([], page_number, paginator)
        else:
            self.page = paginator.page(page_number)
        return list(self.page)

    def get_paginated_response(self, data, message="Messages retrieved successfully"):
        paginator = self.page.paginator
        return Response(
            {
                "success": True,
                "message": message,
                "data": {
                    "messages": data,
                    "pagination": {
                        "total": paginator.count,
                        "page": self.page.number,
                        "limit": paginator.per_page,
                        "total_pages": paginator.num_pages,
                    },
                },
            }
        )
