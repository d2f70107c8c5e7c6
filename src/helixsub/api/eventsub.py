"""
Push subscription (EventSub) endpoints.

These are the remote calls the subscription lifecycle manager makes to
create and delete subscriptions.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from helixsub.api.base import BaseApi
from helixsub.entities.eventsub import EventSubSubscription
from helixsub.exceptions import DecodeError
from helixsub.pagination import PaginatedRequestWithTotal, PageRequest, decode_page
from helixsub.types import QueryValue, UserIdResolvable, extract_user_id

EVENTSUB_PATH = "eventsub/subscriptions"


class EventSubApi(BaseApi):
    """API methods that manage push subscriptions."""

    async def create_subscription(
        self,
        event_type: str,
        version: str,
        condition: Mapping[str, str],
        transport: Mapping[str, Any],
        scope: str | None = None,
    ) -> EventSubSubscription:
        """
        Create a push subscription.

        Args:
            event_type: Remote event type (e.g., "channel.follow")
            version: Event type version
            condition: Condition object for the event type
            transport: Wire form of the delivery transport
            scope: Permission scope the event type requires, if any

        Returns:
            The created subscription

        Raises:
            GatewayError: If the remote service rejects the subscription
            DecodeError: If the response carries no subscription
        """
        body = await self._gateway.call(
            "POST",
            EVENTSUB_PATH,
            scope=scope,
            body={
                "type": event_type,
                "version": version,
                "condition": dict(condition),
                "transport": dict(transport),
            },
        )
        page = decode_page(body, EventSubSubscription.from_data, self._gateway)
        if not page.items:
            raise DecodeError("EventSubSubscription", "response contained no subscription", body)
        return page.items[0]

    async def delete_subscription(self, subscription_id: str) -> None:
        """
        Delete a push subscription.

        Args:
            subscription_id: Remote id of the subscription
        """
        await self._gateway.call("DELETE", EVENTSUB_PATH, query={"id": subscription_id})

    def get_subscriptions_paginated(
        self,
        *,
        status: str | None = None,
        event_type: str | None = None,
        user: UserIdResolvable | None = None,
    ) -> PaginatedRequestWithTotal[EventSubSubscription]:
        """
        Create a paginator for the client's push subscriptions.

        At most one filter is honored by the remote service.

        Args:
            status: Only subscriptions with this status
            event_type: Only subscriptions of this event type
            user: Only subscriptions whose condition names this user
        """
        query: dict[str, QueryValue] = {}
        if status is not None:
            query["status"] = status
        if event_type is not None:
            query["type"] = event_type
        if user is not None:
            query["user_id"] = extract_user_id(user)

        return PaginatedRequestWithTotal(
            self._gateway,
            PageRequest(path=EVENTSUB_PATH, query=query),
            EventSubSubscription.from_data,
            tracer=self._tracer,
        )


__all__ = ["EventSubApi", "EVENTSUB_PATH"]
