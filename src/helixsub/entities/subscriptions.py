"""Typed entities returned by the channel subscription endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from helixsub.entities.base import HelixEntity, Timestamp


class HelixSubscription(HelixEntity):
    """A user's subscription to a broadcaster."""

    broadcaster_id: str
    broadcaster_login: str = ""
    broadcaster_name: str = ""
    gifter_id: str = ""
    gifter_login: str = ""
    gifter_name: str = ""
    is_gift: bool = False
    plan_name: str = ""
    tier: str
    user_id: str
    user_login: str = ""
    user_name: str = ""


class HelixUserSubscription(HelixEntity):
    """A subscription as seen with the subscribing user's authorization."""

    broadcaster_id: str
    broadcaster_login: str = ""
    broadcaster_name: str = ""
    gifter_id: str = ""
    gifter_login: str = ""
    gifter_name: str = ""
    is_gift: bool = False
    tier: str


class HelixSubscriptionEventData(BaseModel):
    """Payload of a subscription event."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    broadcaster_id: str
    broadcaster_login: str = ""
    broadcaster_name: str = ""
    is_gift: bool = False
    plan_name: str = ""
    tier: str
    user_id: str
    user_login: str = ""
    user_name: str = ""


class HelixSubscriptionEvent(HelixEntity):
    """A subscribe, unsubscribe or notification event for a broadcaster."""

    id: str
    event_type: str
    event_timestamp: Timestamp
    version: str
    event_data: HelixSubscriptionEventData

    @property
    def broadcaster_id(self) -> str:
        return self.event_data.broadcaster_id

    @property
    def user_id(self) -> str:
        return self.event_data.user_id

    async def get_subscription(self) -> HelixSubscription | None:
        """Look up the current subscription of the event's user."""
        from helixsub.api.subscriptions import SubscriptionApi

        return await SubscriptionApi(self.gateway).get_subscription_for_user(
            self.broadcaster_id, self.user_id
        )


__all__ = [
    "HelixSubscription",
    "HelixUserSubscription",
    "HelixSubscriptionEvent",
    "HelixSubscriptionEventData",
]
