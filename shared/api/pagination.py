"""Pagination used by every list endpoint."""

from __future__ import annotations

from rest_framework.pagination import PageNumberPagination  # type: ignore
from rest_framework.response import Response  # type: ignore


class PageLimitPagination(PageNumberPagination):
    """``?page=&limit=`` pagination with the limit capped at 50."""

    page_size = 10
    page_query_param = "page"
    page_size_query_param = "limit"
    max_page_size = 50

    def get_paginated_response(self, data):  # type: ignore
        return Response(
            {
                "results": data,
                "pagination": {
                    "current_page": self.page.number,
                    "total_pages": self.page.paginator.num_pages,
                    "total_items": self.page.paginator.count,
                    "items_per_page": self.get_page_size(self.request),
                },
            }
        )


def paginate(view, queryset, serializer_class, **extra):
    """Paginate ``queryset`` for a plain APIView or a viewset action."""

    paginator = PageLimitPagination()
    page = paginator.paginate_queryset(queryset, view.request, view=view)
    serializer = serializer_class(page, many=True, context={"request": view.request})
    response = paginator.get_paginated_response(serializer.data)
    response.data.update(extra)
    return response
