"""
Cursor-paginated collection traversal.

Example:
    >>> from helixsub.pagination import PageRequest, fetch_all
    >>> collection = await fetch_all(gateway, PageRequest(path="subscriptions"), mapper)
"""

from helixsub.pagination.page import EntityMapper, Page, decode_page
from helixsub.pagination.paginator import (
    PaginatedCollection,
    PaginatedRequest,
    PaginatedRequestWithTotal,
    PageRequest,
    Paginator,
    fetch_all,
    fetch_next,
    fetch_page,
)

__all__ = [
    "EntityMapper",
    "Page",
    "decode_page",
    "PageRequest",
    "Paginator",
    "PaginatedCollection",
    "PaginatedRequest",
    "PaginatedRequestWithTotal",
    "fetch_page",
    "fetch_next",
    "fetch_all",
]
