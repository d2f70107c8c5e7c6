"""
Unit tests for cursor-paginated traversal.

Tests for:
- fetch_all() termination and ordering
- fetch_next() on fresh, advancing and exhausted paginators
- Total count reconciliation across pages
- PaginatedRequest step-by-step and async iteration
- PaginatedRequestWithTotal.get_total_count()
"""

import logging
from typing import Any

import pytest

from helixsub.exceptions import GatewayError
from helixsub.observability import MockTracer, SpanKindEnum
from helixsub.pagination import (
    PaginatedRequest,
    PaginatedRequestWithTotal,
    PageRequest,
    Paginator,
    fetch_all,
    fetch_next,
)
from helixsub.testing import InMemoryGateway, page

PATH = "items"
REQUEST = PageRequest(path=PATH, scope="some:scope", query={"broadcaster_id": "1"})


def identity_mapper(item: Any, gateway: Any) -> Any:
    return item


def afters(gateway: InMemoryGateway) -> list[str | None]:
    return [call.query.get("after") for call in gateway.calls]


class TestFetchAll:
    """Tests for fetch_all()."""

    @pytest.mark.asyncio
    async def test_follows_cursors_in_order(self, gateway: InMemoryGateway):
        """Pages a -> b -> c -> end are concatenated in arrival order."""
        gateway.respond(
            "GET",
            PATH,
            page([1, 2], cursor="a"),
            page([3], cursor="b"),
            page([4, 5]),
        )

        collection = await fetch_all(gateway, REQUEST, identity_mapper)

        assert collection.items == [1, 2, 3, 4, 5]
        assert collection.total is None
        assert afters(gateway) == [None, "a", "b"]

    @pytest.mark.asyncio
    async def test_single_page(self, gateway: InMemoryGateway):
        """A first page without cursor is the whole collection."""
        gateway.respond("GET", PATH, page([1, 2, 3], total=3))

        collection = await fetch_all(gateway, REQUEST, identity_mapper)

        assert collection.items == [1, 2, 3]
        assert collection.total == 3
        assert len(gateway.calls) == 1

    @pytest.mark.asyncio
    async def test_empty_page_with_cursor_ends_traversal(self, gateway: InMemoryGateway):
        """An empty page ends traversal even if the server keeps handing out cursors."""
        gateway.respond("GET", PATH, page([1], cursor="a"), page([], cursor="b"))

        collection = await fetch_all(gateway, REQUEST, identity_mapper)

        assert collection.items == [1]
        assert len(gateway.calls) == 2

    @pytest.mark.asyncio
    async def test_sends_scope_and_base_query(self, gateway: InMemoryGateway):
        """Every page call carries the request's scope and query."""
        gateway.respond("GET", PATH, page([1], cursor="a"), page([2]))

        await fetch_all(gateway, REQUEST, identity_mapper)

        for call in gateway.calls:
            assert call.scope == "some:scope"
            assert call.query["broadcaster_id"] == "1"

    @pytest.mark.asyncio
    async def test_last_reported_total_wins(self, gateway: InMemoryGateway, caplog):
        """If pages disagree on the total, the last one is kept and a warning logged."""
        gateway.respond("GET", PATH, page([1], cursor="a", total=5), page([2], total=7))

        with caplog.at_level(logging.WARNING, logger="helixsub.pagination.paginator"):
            collection = await fetch_all(gateway, REQUEST, identity_mapper)

        assert collection.total == 7
        assert any("different total" in record.message for record in caplog.records)

    @pytest.mark.asyncio
    async def test_total_kept_when_later_pages_omit_it(self, gateway: InMemoryGateway):
        gateway.respond("GET", PATH, page([1], cursor="a", total=2), page([2]))

        collection = await fetch_all(gateway, REQUEST, identity_mapper)

        assert collection.total == 2

    @pytest.mark.asyncio
    async def test_gateway_error_propagates(self, gateway: InMemoryGateway):
        """A failing page call aborts the traversal with the gateway's error."""
        gateway.respond(
            "GET",
            PATH,
            page([1], cursor="a"),
            GatewayError(500, "boom"),
        )

        with pytest.raises(GatewayError) as exc_info:
            await fetch_all(gateway, REQUEST, identity_mapper)

        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_traced_with_tracer(self, gateway: InMemoryGateway):
        tracer = MockTracer()
        gateway.respond("GET", PATH, page([1], cursor="a"), page([2]))

        await fetch_all(gateway, REQUEST, identity_mapper, tracer=tracer)

        assert tracer.span_names == [
            "helixsub.pagination.fetch_all",
            "helixsub.pagination.fetch_page",
            "helixsub.pagination.fetch_page",
        ]
        assert tracer.kinds["helixsub.pagination.fetch_page"] is SpanKindEnum.CLIENT
        assert tracer.kinds["helixsub.pagination.fetch_all"] is SpanKindEnum.INTERNAL


class TestFetchNext:
    """Tests for fetch_next()."""

    @pytest.mark.asyncio
    async def test_advances_paginator(self, gateway: InMemoryGateway):
        gateway.respond("GET", PATH, page([1, 2], cursor="a", total=3), page([3]))
        paginator = Paginator()

        first = await fetch_next(paginator, gateway, REQUEST, identity_mapper)

        assert first == [1, 2]
        assert paginator.last_cursor == "a"
        assert paginator.current_count == 2
        assert paginator.total == 3
        assert paginator.done is False
        assert paginator.has_started is True

        second = await fetch_next(paginator, gateway, REQUEST, identity_mapper)

        assert second == [3]
        assert paginator.done is True
        assert paginator.current_count == 3
        assert paginator.pages_fetched == 2

    @pytest.mark.asyncio
    async def test_done_paginator_makes_no_call(self, gateway: InMemoryGateway):
        """Once done, fetch_next returns [] without touching the gateway."""
        paginator = Paginator(done=True)

        assert await fetch_next(paginator, gateway, REQUEST, identity_mapper) == []
        assert gateway.calls == []

    @pytest.mark.asyncio
    async def test_error_leaves_paginator_unchanged(self, gateway: InMemoryGateway):
        """A failed page can be requested again with the same cursor."""
        gateway.respond("GET", PATH, page([1], cursor="a"), GatewayError(503, "busy"), page([2]))
        paginator = Paginator()
        await fetch_next(paginator, gateway, REQUEST, identity_mapper)

        with pytest.raises(GatewayError):
            await fetch_next(paginator, gateway, REQUEST, identity_mapper)

        assert paginator.last_cursor == "a"
        assert paginator.pages_fetched == 1

        assert await fetch_next(paginator, gateway, REQUEST, identity_mapper) == [2]
        assert afters(gateway) == [None, "a", "a"]

    def test_reset_returns_to_initial_state(self):
        paginator = Paginator(last_cursor="a", done=True, current_count=4, total=9, pages_fetched=2)

        paginator.reset()

        assert paginator == Paginator()


class TestPaginatedRequest:
    """Tests for PaginatedRequest."""

    @pytest.mark.asyncio
    async def test_get_next_steps_through_pages(self, gateway: InMemoryGateway):
        gateway.respond("GET", PATH, page([1], cursor="a"), page([2]))
        request = PaginatedRequest(gateway, REQUEST, identity_mapper, enable_tracing=False)

        assert request.current_cursor is None
        assert await request.get_next() == [1]
        assert request.current_cursor == "a"
        assert await request.get_next() == [2]
        assert request.is_done is True
        assert await request.get_next() == []
        assert len(gateway.calls) == 2

    @pytest.mark.asyncio
    async def test_reset_starts_over(self, gateway: InMemoryGateway):
        gateway.respond("GET", PATH, page([1], cursor="a"), page([2]), page([1], cursor="a"))
        request = PaginatedRequest(gateway, REQUEST, identity_mapper, enable_tracing=False)
        await request.get_next()
        await request.get_next()

        request.reset()

        assert request.is_done is False
        assert request.current_cursor is None
        assert await request.get_next() == [1]
        assert afters(gateway) == [None, "a", None]

    @pytest.mark.asyncio
    async def test_get_all(self, gateway: InMemoryGateway):
        gateway.respond("GET", PATH, page([1, 2], cursor="a"), page([3]))
        request = PaginatedRequest(gateway, REQUEST, identity_mapper, enable_tracing=False)

        assert await request.get_all() == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_async_iteration_yields_every_item(self, gateway: InMemoryGateway):
        """async for walks the whole collection without touching get_next state."""
        gateway.respond("GET", PATH, page([1, 2], cursor="a"), page([3]))
        request = PaginatedRequest(gateway, REQUEST, identity_mapper, enable_tracing=False)

        items = [item async for item in request]

        assert items == [1, 2, 3]
        assert request.paginator.has_started is False

    @pytest.mark.asyncio
    async def test_abandoning_iteration_stops_fetching(self, gateway: InMemoryGateway):
        """Breaking out of iteration after the first page fetches nothing more."""
        gateway.respond("GET", PATH, page([1, 2], cursor="a"), page([3]))
        request = PaginatedRequest(gateway, REQUEST, identity_mapper, enable_tracing=False)

        async for item in request:
            if item == 2:
                break

        assert len(gateway.calls) == 1


class TestPaginatedRequestWithTotal:
    """Tests for PaginatedRequestWithTotal.get_total_count()."""

    @pytest.mark.asyncio
    async def test_fetches_first_page_without_advancing(self, gateway: InMemoryGateway):
        gateway.respond("GET", PATH, page([1], cursor="a", total=42))
        request = PaginatedRequestWithTotal(gateway, REQUEST, identity_mapper, enable_tracing=False)

        assert await request.get_total_count() == 42
        assert request.paginator.has_started is False
        assert request.current_cursor is None

    @pytest.mark.asyncio
    async def test_uses_total_seen_by_get_next(self, gateway: InMemoryGateway):
        gateway.respond("GET", PATH, page([1], cursor="a", total=42))
        request = PaginatedRequestWithTotal(gateway, REQUEST, identity_mapper, enable_tracing=False)
        await request.get_next()

        assert await request.get_total_count() == 42
        assert len(gateway.calls) == 1

    @pytest.mark.asyncio
    async def test_missing_total_is_none(self, gateway: InMemoryGateway):
        gateway.respond("GET", PATH, page([1]))
        request = PaginatedRequestWithTotal(gateway, REQUEST, identity_mapper, enable_tracing=False)

        assert await request.get_total_count() is None
