"""
Cursor-paginated collection traversal.

Two ways to walk a collection:

- ``fetch_all`` materializes the whole collection, following cursors until
  the server reports the last page.
- ``fetch_next`` advances a caller-owned ``Paginator`` by one page.

``PaginatedRequest`` bundles a request, a gateway and an entity mapper with
its own paginator, and supports ``async for`` iteration over all items.

Traversal ends when a page has no cursor OR no items. A page with a cursor
but no items still ends the traversal, so a server that keeps handing out
cursors for empty pages cannot make a traversal loop forever.

Example:
    >>> request = PageRequest(path="subscriptions", scope="channel:read:subscriptions",
    ...                       query={"broadcaster_id": "61369223"})
    >>> collection = await fetch_all(gateway, request, HelixSubscription.from_data)
    >>> len(collection.items), collection.total
    (42, 42)
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from helixsub.observability import SpanKindEnum, Tracer, create_tracer
from helixsub.observability.attributes import (
    ATTR_API_PATH,
    ATTR_API_SCOPE,
    ATTR_HAS_CURSOR,
    ATTR_ITEM_COUNT,
    ATTR_PAGE_COUNT,
    ATTR_TOTAL,
)
from helixsub.pagination.page import EntityMapper, Page, decode_page
from helixsub.types import QueryValue

if TYPE_CHECKING:
    from helixsub.gateway.interface import ApiGateway

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class PageRequest:
    """
    Description of a paginated API call.

    Attributes:
        path: API path (e.g., "subscriptions")
        scope: Permission scope the endpoint requires, if any
        query: Query parameters sent with every page
        method: HTTP method (paginated endpoints are almost always GET)
        page_size: Requested number of items per page (``first``), if set
    """

    path: str
    scope: str | None = None
    query: Mapping[str, QueryValue] = field(default_factory=dict)
    method: str = "GET"
    page_size: int | None = None

    def query_for(self, cursor: str | None) -> dict[str, QueryValue]:
        """Build the query for the page following ``cursor``."""
        query = dict(self.query)
        if self.page_size is not None:
            query["first"] = str(self.page_size)
        if cursor is not None:
            query["after"] = cursor
        return query


@dataclass
class Paginator:
    """
    Mutable traversal state for one paginated collection.

    A paginator belongs to the caller that created it and must not be
    advanced from two tasks at once; create one paginator per concurrent
    traversal.

    Attributes:
        last_cursor: Cursor returned by the most recent page
        done: True once a page without cursor or items was seen
        current_count: Running number of items observed
        total: Last server-reported collection size, if any
        pages_fetched: Number of pages fetched so far
    """

    last_cursor: str | None = None
    done: bool = False
    current_count: int = 0
    total: int | None = None
    pages_fetched: int = 0

    def advance(self, page: Page[Any]) -> None:
        """
        Record a successfully fetched page.

        If pages disagree on the total, the last reported value wins.

        Args:
            page: The page that was just fetched
        """
        if page.total is not None:
            if self.total is not None and self.total != page.total:
                logger.warning(
                    "Server reported a different total mid-traversal",
                    extra={
                        "previous_total": self.total,
                        "total": page.total,
                        "pages_fetched": self.pages_fetched,
                    },
                )
            self.total = page.total

        self.current_count += len(page.items)
        self.pages_fetched += 1
        self.last_cursor = page.cursor
        self.done = page.is_last

    def reset(self) -> None:
        """Return to the initial state so the next fetch starts over."""
        self.last_cursor = None
        self.done = False
        self.current_count = 0
        self.total = None
        self.pages_fetched = 0

    @property
    def has_started(self) -> bool:
        """True if at least one page was fetched."""
        return self.pages_fetched > 0


@dataclass(frozen=True)
class PaginatedCollection(Generic[T]):
    """
    A fully materialized collection.

    Attributes:
        items: All items, in page-arrival order
        total: Last total reported by the server, or None if never reported
    """

    items: list[T]
    total: int | None = None

    def __len__(self) -> int:
        return len(self.items)


async def fetch_page(
    gateway: ApiGateway,
    request: PageRequest,
    mapper: EntityMapper[T],
    cursor: str | None = None,
    *,
    tracer: Tracer | None = None,
) -> Page[T]:
    """
    Fetch and decode the page following ``cursor``.

    Does not touch any paginator. Gateway errors propagate unchanged.

    Args:
        gateway: Gateway performing the call
        request: The paginated request
        mapper: Entity mapper for the items
        cursor: Cursor of the previous page, or None for the first page
        tracer: Optional tracer

    Returns:
        The decoded page
    """
    tracer = tracer or create_tracer(__name__, enable_tracing=False)
    with tracer.span_with_kind(
        "helixsub.pagination.fetch_page",
        SpanKindEnum.CLIENT,
        {ATTR_API_PATH: request.path, ATTR_API_SCOPE: request.scope or ""},
    ) as span:
        body = await gateway.call(
            request.method,
            request.path,
            query=request.query_for(cursor),
            scope=request.scope,
        )
        page = decode_page(body, mapper, gateway)

        if span:
            span.set_attribute(ATTR_ITEM_COUNT, len(page.items))
            span.set_attribute(ATTR_HAS_CURSOR, page.cursor is not None)
            if page.total is not None:
                span.set_attribute(ATTR_TOTAL, page.total)

    logger.debug(
        "Fetched page",
        extra={
            "path": request.path,
            "item_count": len(page.items),
            "has_cursor": page.cursor is not None,
            "total": page.total,
        },
    )
    return page


async def fetch_next(
    paginator: Paginator,
    gateway: ApiGateway,
    request: PageRequest,
    mapper: EntityMapper[T],
    *,
    tracer: Tracer | None = None,
) -> list[T]:
    """
    Advance a paginator by one page.

    Once the paginator is done this returns an empty list without calling
    the gateway. On a gateway error the paginator is left unchanged, so the
    same page can be requested again.

    Args:
        paginator: Traversal state, updated in place
        gateway: Gateway performing the call
        request: The paginated request
        mapper: Entity mapper for the items
        tracer: Optional tracer

    Returns:
        The items of the fetched page
    """
    if paginator.done:
        return []

    page = await fetch_page(gateway, request, mapper, paginator.last_cursor, tracer=tracer)
    paginator.advance(page)
    return list(page.items)


async def fetch_all(
    gateway: ApiGateway,
    request: PageRequest,
    mapper: EntityMapper[T],
    *,
    tracer: Tracer | None = None,
) -> PaginatedCollection[T]:
    """
    Fetch every page of a collection.

    Args:
        gateway: Gateway performing the calls
        request: The paginated request
        mapper: Entity mapper for the items
        tracer: Optional tracer

    Returns:
        All items in page order, with the last reported total
    """
    tracer = tracer or create_tracer(__name__, enable_tracing=False)
    paginator = Paginator()
    items: list[T] = []

    with tracer.span(
        "helixsub.pagination.fetch_all",
        {ATTR_API_PATH: request.path},
    ) as span:
        while not paginator.done:
            items.extend(await fetch_next(paginator, gateway, request, mapper, tracer=tracer))

        if span:
            span.set_attribute(ATTR_PAGE_COUNT, paginator.pages_fetched)
            span.set_attribute(ATTR_ITEM_COUNT, paginator.current_count)

    logger.debug(
        "Fetched collection",
        extra={
            "path": request.path,
            "pages": paginator.pages_fetched,
            "item_count": len(items),
            "total": paginator.total,
        },
    )
    return PaginatedCollection(items=items, total=paginator.total)


class PaginatedRequest(Generic[T]):
    """
    A paginated request with its own step-by-step paginator.

    ``get_next`` advances the request's paginator; ``get_all`` and
    ``async for`` each walk the collection with a fresh paginator and leave
    the step-by-step state alone.

    Example:
        >>> request = api.subscriptions.get_subscription_events_for_broadcaster_paginated(
        ...     "61369223"
        ... )
        >>> first_page = await request.get_next()
        >>> async for event in request:
        ...     print(event.event_type)
    """

    def __init__(
        self,
        gateway: ApiGateway,
        request: PageRequest,
        mapper: EntityMapper[T],
        *,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        self._gateway = gateway
        self._request = request
        self._mapper = mapper
        self._tracer = tracer or create_tracer(__name__, enable_tracing)
        self._paginator = Paginator()

    @property
    def request(self) -> PageRequest:
        """The underlying request description."""
        return self._request

    @property
    def paginator(self) -> Paginator:
        """Step-by-step traversal state used by ``get_next``."""
        return self._paginator

    @property
    def current_cursor(self) -> str | None:
        """Cursor of the most recently fetched page."""
        return self._paginator.last_cursor

    @property
    def is_done(self) -> bool:
        """True once ``get_next`` reached the last page."""
        return self._paginator.done

    async def get_next(self) -> list[T]:
        """
        Fetch the next page.

        Returns:
            Items of the next page, or an empty list once done
        """
        return await fetch_next(
            self._paginator, self._gateway, self._request, self._mapper, tracer=self._tracer
        )

    async def fetch_all(self) -> PaginatedCollection[T]:
        """Fetch the whole collection together with the reported total."""
        return await fetch_all(self._gateway, self._request, self._mapper, tracer=self._tracer)

    async def get_all(self) -> list[T]:
        """Fetch the whole collection."""
        return (await self.fetch_all()).items

    def reset(self) -> None:
        """Rewind ``get_next`` to the first page."""
        self._paginator.reset()

    async def __aiter__(self) -> AsyncIterator[T]:
        paginator = Paginator()
        while not paginator.done:
            for item in await fetch_next(
                paginator, self._gateway, self._request, self._mapper, tracer=self._tracer
            ):
                yield item


class PaginatedRequestWithTotal(PaginatedRequest[T]):
    """Paginated request for endpoints that report the collection's total size."""

    async def get_total_count(self) -> int | None:
        """
        Get the server-reported total.

        Uses the total already seen by ``get_next`` if any; otherwise fetches
        the first page without advancing the paginator.

        Returns:
            The collection's total size, or None if the server omitted it
        """
        if self._paginator.total is not None:
            return self._paginator.total

        page = await fetch_page(
            self._gateway, self._request, self._mapper, None, tracer=self._tracer
        )
        return page.total


__all__ = [
    "PageRequest",
    "Paginator",
    "PaginatedCollection",
    "PaginatedRequest",
    "PaginatedRequestWithTotal",
    "fetch_page",
    "fetch_next",
    "fetch_all",
]
