"""
Channel subscription endpoints.

Example:
    >>> api = SubscriptionApi(gateway)
    >>> subscription = await api.get_subscription_for_user("61369223", "125328655")
    >>> async for sub in api.get_subscriptions_paginated("61369223"):
    ...     print(sub.user_name, sub.tier)
"""

from __future__ import annotations

from helixsub.api.base import BaseApi, absent_on_not_found
from helixsub.entities.subscriptions import (
    HelixSubscription,
    HelixSubscriptionEvent,
    HelixUserSubscription,
)
from helixsub.pagination import (
    Page,
    PaginatedRequest,
    PaginatedRequestWithTotal,
    PageRequest,
    decode_page,
)
from helixsub.types import UserIdResolvable, extract_user_id

SCOPE_READ_SUBSCRIPTIONS = "channel:read:subscriptions"
SCOPE_USER_READ_SUBSCRIPTIONS = "user:read:subscriptions"


class SubscriptionApi(BaseApi):
    """API methods that deal with channel subscriptions."""

    def _subscriptions_request(self, broadcaster: UserIdResolvable) -> PageRequest:
        return PageRequest(
            path="subscriptions",
            scope=SCOPE_READ_SUBSCRIPTIONS,
            query={"broadcaster_id": extract_user_id(broadcaster)},
        )

    async def get_subscriptions(self, broadcaster: UserIdResolvable) -> Page[HelixSubscription]:
        """
        Retrieve the first page of subscriptions to a broadcaster.

        Args:
            broadcaster: The broadcaster to list subscriptions to

        Returns:
            The first page, with its cursor and the total subscription count
        """
        request = self._subscriptions_request(broadcaster)
        body = await self._gateway.call(
            request.method, request.path, query=request.query_for(None), scope=request.scope
        )
        return decode_page(body, HelixSubscription.from_data, self._gateway)

    def get_subscriptions_paginated(
        self, broadcaster: UserIdResolvable
    ) -> PaginatedRequestWithTotal[HelixSubscription]:
        """Create a paginator for all subscriptions to a broadcaster."""
        return PaginatedRequestWithTotal(
            self._gateway,
            self._subscriptions_request(broadcaster),
            HelixSubscription.from_data,
            tracer=self._tracer,
        )

    async def get_subscriptions_for_users(
        self,
        broadcaster: UserIdResolvable,
        users: list[UserIdResolvable],
    ) -> list[HelixSubscription]:
        """
        Retrieve the subset of the given users that subscribe to a broadcaster.

        Args:
            broadcaster: The broadcaster to find subscriptions to
            users: The users to check

        Returns:
            Subscriptions of those users that are subscribed
        """
        body = await self._gateway.call(
            "GET",
            "subscriptions",
            query={
                "broadcaster_id": extract_user_id(broadcaster),
                "user_id": [extract_user_id(user) for user in users],
            },
            scope=SCOPE_READ_SUBSCRIPTIONS,
        )
        return list(decode_page(body, HelixSubscription.from_data, self._gateway).items)

    async def get_subscription_for_user(
        self,
        broadcaster: UserIdResolvable,
        user: UserIdResolvable,
    ) -> HelixSubscription | None:
        """
        Retrieve one user's subscription to a broadcaster.

        Uses the broadcaster's authorization. With only the user's
        authorization, use ``check_user_subscription``.

        Returns:
            The subscription, or None if the user is not subscribed
        """
        subscriptions = await self.get_subscriptions_for_users(broadcaster, [user])
        return subscriptions[0] if subscriptions else None

    async def get_subscription_events_for_broadcaster(
        self, broadcaster: UserIdResolvable
    ) -> Page[HelixSubscriptionEvent]:
        """Retrieve the most recent subscription events for a broadcaster."""
        return await self._get_subscription_events("broadcaster_id", extract_user_id(broadcaster))

    def get_subscription_events_for_broadcaster_paginated(
        self, broadcaster: UserIdResolvable
    ) -> PaginatedRequest[HelixSubscriptionEvent]:
        """Create a paginator for the subscription events of a broadcaster."""
        return PaginatedRequest(
            self._gateway,
            PageRequest(
                path="subscriptions/events",
                scope=SCOPE_READ_SUBSCRIPTIONS,
                query={"broadcaster_id": extract_user_id(broadcaster)},
            ),
            HelixSubscriptionEvent.from_data,
            tracer=self._tracer,
        )

    async def get_subscription_event_by_id(self, event_id: str) -> HelixSubscriptionEvent | None:
        """Retrieve a single subscription event by id."""
        page = await self._get_subscription_events("id", event_id)
        return page.items[0] if page.items else None

    async def check_user_subscription(
        self,
        user: UserIdResolvable,
        broadcaster: UserIdResolvable,
    ) -> HelixUserSubscription | None:
        """
        Check whether a user subscribes to a broadcaster.

        Uses the user's authorization. The remote service answers 404 when
        the user is not subscribed, which is returned as None.

        Args:
            user: The user to check
            broadcaster: The broadcaster to check the user's subscription for

        Returns:
            The subscription, or None if not subscribed

        Raises:
            GatewayError: For any error status other than 404
        """
        body = await absent_on_not_found(
            self._gateway.call(
                "GET",
                "subscriptions/user",
                query={
                    "broadcaster_id": extract_user_id(broadcaster),
                    "user_id": extract_user_id(user),
                },
                scope=SCOPE_USER_READ_SUBSCRIPTIONS,
            )
        )
        if body is None:
            return None

        page = decode_page(body, HelixUserSubscription.from_data, self._gateway)
        return page.items[0] if page.items else None

    async def _get_subscription_events(
        self, by: str, value: str
    ) -> Page[HelixSubscriptionEvent]:
        body = await self._gateway.call(
            "GET",
            "subscriptions/events",
            query={by: value},
            scope=SCOPE_READ_SUBSCRIPTIONS,
        )
        return decode_page(body, HelixSubscriptionEvent.from_data, self._gateway)


__all__ = ["SubscriptionApi"]
