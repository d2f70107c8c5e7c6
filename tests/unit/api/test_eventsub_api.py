"""
Unit tests for the push subscription endpoints.
"""

from collections.abc import Callable
from typing import Any

import pytest

from helixsub.api import EventSubApi
from helixsub.entities import EventSubSubscription
from helixsub.exceptions import DecodeError, GatewayError
from helixsub.testing import InMemoryGateway, page


@pytest.fixture
def api(gateway: InMemoryGateway) -> EventSubApi:
    return EventSubApi(gateway, enable_tracing=False)


class TestCreateSubscription:
    """Tests for EventSubApi.create_subscription()."""

    @pytest.mark.asyncio
    async def test_posts_subscription_request(
        self,
        api: EventSubApi,
        gateway: InMemoryGateway,
        created_subscription: Callable[..., dict[str, Any]],
    ):
        gateway.respond("POST", "eventsub/subscriptions", created_subscription("abc"))

        result = await api.create_subscription(
            "channel.cheer",
            "1",
            {"broadcaster_user_id": "61369223"},
            {"method": "websocket", "session_id": "s1"},
            scope="bits:read",
        )

        assert isinstance(result, EventSubSubscription)
        assert result.id == "abc"
        assert result.cost == 1
        call = gateway.calls[0]
        assert call.scope == "bits:read"
        assert call.body == {
            "type": "channel.cheer",
            "version": "1",
            "condition": {"broadcaster_user_id": "61369223"},
            "transport": {"method": "websocket", "session_id": "s1"},
        }

    @pytest.mark.asyncio
    async def test_empty_response_is_decode_error(
        self, api: EventSubApi, gateway: InMemoryGateway
    ):
        gateway.respond("POST", "eventsub/subscriptions", page([]))

        with pytest.raises(DecodeError):
            await api.create_subscription("stream.online", "1", {}, {})

    @pytest.mark.asyncio
    async def test_rejection_propagates(self, api: EventSubApi, gateway: InMemoryGateway):
        gateway.fail("POST", "eventsub/subscriptions", 409, "subscription already exists")

        with pytest.raises(GatewayError) as exc_info:
            await api.create_subscription("stream.online", "1", {}, {})

        assert exc_info.value.status_code == 409


class TestDeleteSubscription:
    """Tests for EventSubApi.delete_subscription() and EventSubSubscription.delete()."""

    @pytest.mark.asyncio
    async def test_deletes_by_id(self, api: EventSubApi, gateway: InMemoryGateway):
        gateway.respond("DELETE", "eventsub/subscriptions", None)

        await api.delete_subscription("abc")

        assert gateway.calls[0].method == "DELETE"
        assert gateway.calls[0].query == {"id": "abc"}

    @pytest.mark.asyncio
    async def test_entity_delete(
        self,
        api: EventSubApi,
        gateway: InMemoryGateway,
        created_subscription: Callable[..., dict[str, Any]],
    ):
        gateway.respond("POST", "eventsub/subscriptions", created_subscription("abc"))
        gateway.respond("DELETE", "eventsub/subscriptions", None)
        subscription = await api.create_subscription("stream.online", "1", {}, {})

        await subscription.delete()

        assert gateway.calls_to("DELETE", "eventsub/subscriptions")[0].query == {"id": "abc"}


class TestListSubscriptions:
    """Tests for EventSubApi.get_subscriptions_paginated()."""

    @pytest.mark.asyncio
    async def test_filters_are_sent(
        self,
        api: EventSubApi,
        gateway: InMemoryGateway,
        created_subscription: Callable[..., dict[str, Any]],
    ):
        gateway.respond(
            "GET", "eventsub/subscriptions", created_subscription("abc", status="enabled")
        )

        items = await api.get_subscriptions_paginated(status="enabled").get_all()

        assert [sub.id for sub in items] == ["abc"]
        assert items[0].is_enabled is True
        assert gateway.calls[0].query == {"status": "enabled"}

    @pytest.mark.asyncio
    async def test_user_filter(self, api: EventSubApi, gateway: InMemoryGateway):
        gateway.respond("GET", "eventsub/subscriptions", page([], total=0))

        request = api.get_subscriptions_paginated(user=61369223)

        assert await request.get_total_count() == 0
        assert gateway.calls[0].query == {"user_id": "61369223"}
