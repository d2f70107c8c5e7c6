"""
Unit tests for the channel subscription endpoints.

Tests for:
- check_user_subscription() not-found translation
- Single-page and paginated subscription lookups
- Subscription events and their follow-up lookups
"""

from typing import Any

import pytest

from helixsub.api import SubscriptionApi, absent_on_not_found
from helixsub.entities import HelixSubscription, HelixSubscriptionEvent, HelixUserSubscription
from helixsub.exceptions import GatewayError
from helixsub.testing import InMemoryGateway, page

BROADCASTER_ID = "61369223"


def subscription_data(user_id: str = "1234") -> dict[str, Any]:
    return {
        "broadcaster_id": BROADCASTER_ID,
        "broadcaster_login": "testbroadcaster",
        "broadcaster_name": "TestBroadcaster",
        "gifter_id": "",
        "is_gift": False,
        "plan_name": "Channel Subscription",
        "tier": "1000",
        "user_id": user_id,
        "user_name": "CoolUser",
        "user_login": "cooluser",
    }


def subscription_event_data() -> dict[str, Any]:
    return {
        "id": "1IPFqAb0p0JncbPSTEPhx8JF1Sa",
        "event_type": "subscriptions.notification",
        "event_timestamp": "2019-06-29T17:20:33.860897266Z",
        "version": "1.0",
        "event_data": subscription_data(),
    }


@pytest.fixture
def api(gateway: InMemoryGateway) -> SubscriptionApi:
    return SubscriptionApi(gateway, enable_tracing=False)


class TestAbsentOnNotFound:
    """Tests for absent_on_not_found()."""

    @pytest.mark.asyncio
    async def test_returns_result(self):
        async def lookup() -> str:
            return "found"

        assert await absent_on_not_found(lookup()) == "found"

    @pytest.mark.asyncio
    async def test_not_found_is_none(self):
        async def lookup() -> str:
            raise GatewayError(404, "Not Found")

        assert await absent_on_not_found(lookup()) is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [400, 401, 403, 500, 503])
    async def test_other_errors_propagate(self, status_code: int):
        async def lookup() -> str:
            raise GatewayError(status_code, "nope")

        with pytest.raises(GatewayError) as exc_info:
            await absent_on_not_found(lookup())

        assert exc_info.value.status_code == status_code


class TestCheckUserSubscription:
    """Tests for SubscriptionApi.check_user_subscription()."""

    @pytest.mark.asyncio
    async def test_subscribed_user(self, api: SubscriptionApi, gateway: InMemoryGateway):
        gateway.respond("GET", "subscriptions/user", page([subscription_data()]))

        result = await api.check_user_subscription("1234", BROADCASTER_ID)

        assert isinstance(result, HelixUserSubscription)
        assert result.broadcaster_id == BROADCASTER_ID
        assert result.tier == "1000"
        call = gateway.calls[0]
        assert call.query == {"broadcaster_id": BROADCASTER_ID, "user_id": "1234"}
        assert call.scope == "user:read:subscriptions"

    @pytest.mark.asyncio
    async def test_not_subscribed_is_none(self, api: SubscriptionApi, gateway: InMemoryGateway):
        """A 404 from the service means the user is not subscribed."""
        gateway.fail("GET", "subscriptions/user", 404, "User has no subscription")

        assert await api.check_user_subscription("1234", BROADCASTER_ID) is None

    @pytest.mark.asyncio
    async def test_server_error_raises(self, api: SubscriptionApi, gateway: InMemoryGateway):
        gateway.fail("GET", "subscriptions/user", 500, "Internal Server Error")

        with pytest.raises(GatewayError) as exc_info:
            await api.check_user_subscription("1234", BROADCASTER_ID)

        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_accepts_user_like_objects(
        self, api: SubscriptionApi, gateway: InMemoryGateway
    ):
        class User:
            id = "1234"

        gateway.respond("GET", "subscriptions/user", page([subscription_data()]))

        await api.check_user_subscription(User(), 61369223)

        assert gateway.calls[0].query == {"broadcaster_id": BROADCASTER_ID, "user_id": "1234"}


class TestGetSubscriptions:
    """Tests for subscription list lookups."""

    @pytest.mark.asyncio
    async def test_get_subscriptions_returns_page(
        self, api: SubscriptionApi, gateway: InMemoryGateway
    ):
        gateway.respond(
            "GET", "subscriptions", page([subscription_data()], cursor="abc", total=12)
        )

        result = await api.get_subscriptions(BROADCASTER_ID)

        assert [sub.user_id for sub in result.items] == ["1234"]
        assert result.cursor == "abc"
        assert result.total == 12
        assert gateway.calls[0].scope == "channel:read:subscriptions"

    @pytest.mark.asyncio
    async def test_paginated_walks_all_pages(self, api: SubscriptionApi, gateway: InMemoryGateway):
        gateway.respond(
            "GET",
            "subscriptions",
            page([subscription_data("1")], cursor="a", total=2),
            page([subscription_data("2")], total=2),
        )

        collection = await api.get_subscriptions_paginated(BROADCASTER_ID).fetch_all()

        assert [sub.user_id for sub in collection.items] == ["1", "2"]
        assert collection.total == 2

    @pytest.mark.asyncio
    async def test_paginated_total_count(self, api: SubscriptionApi, gateway: InMemoryGateway):
        gateway.respond("GET", "subscriptions", page([subscription_data()], cursor="a", total=99))

        assert await api.get_subscriptions_paginated(BROADCASTER_ID).get_total_count() == 99

    @pytest.mark.asyncio
    async def test_get_subscriptions_for_users(
        self, api: SubscriptionApi, gateway: InMemoryGateway
    ):
        gateway.respond("GET", "subscriptions", page([subscription_data("1")]))

        result = await api.get_subscriptions_for_users(BROADCASTER_ID, ["1", 2])

        assert [sub.user_id for sub in result] == ["1"]
        assert gateway.calls[0].query["user_id"] == ["1", "2"]

    @pytest.mark.asyncio
    async def test_get_subscription_for_user_absent(
        self, api: SubscriptionApi, gateway: InMemoryGateway
    ):
        gateway.respond("GET", "subscriptions", page([]))

        assert await api.get_subscription_for_user(BROADCASTER_ID, "1234") is None

    @pytest.mark.asyncio
    async def test_entities_are_bound_to_gateway(
        self, api: SubscriptionApi, gateway: InMemoryGateway
    ):
        gateway.respond("GET", "subscriptions", page([subscription_data()]))

        result = await api.get_subscription_for_user(BROADCASTER_ID, "1234")

        assert isinstance(result, HelixSubscription)
        assert result.gateway is gateway


class TestSubscriptionEvents:
    """Tests for subscription event lookups."""

    @pytest.mark.asyncio
    async def test_event_by_id(self, api: SubscriptionApi, gateway: InMemoryGateway):
        gateway.respond("GET", "subscriptions/events", page([subscription_event_data()]))

        event = await api.get_subscription_event_by_id("1IPFqAb0p0JncbPSTEPhx8JF1Sa")

        assert isinstance(event, HelixSubscriptionEvent)
        assert event.broadcaster_id == BROADCASTER_ID
        assert event.user_id == "1234"
        assert event.event_timestamp.year == 2019
        assert gateway.calls[0].query == {"id": "1IPFqAb0p0JncbPSTEPhx8JF1Sa"}

    @pytest.mark.asyncio
    async def test_event_by_unknown_id(self, api: SubscriptionApi, gateway: InMemoryGateway):
        gateway.respond("GET", "subscriptions/events", page([]))

        assert await api.get_subscription_event_by_id("nope") is None

    @pytest.mark.asyncio
    async def test_event_get_subscription(self, api: SubscriptionApi, gateway: InMemoryGateway):
        """An event can look up the current subscription of its user."""
        gateway.respond("GET", "subscriptions/events", page([subscription_event_data()]))
        gateway.respond("GET", "subscriptions", page([subscription_data()]))
        event = await api.get_subscription_event_by_id("1IPFqAb0p0JncbPSTEPhx8JF1Sa")

        subscription = await event.get_subscription()

        assert subscription is not None
        assert subscription.user_id == "1234"
        assert gateway.calls[-1].query == {"broadcaster_id": BROADCASTER_ID, "user_id": ["1234"]}
