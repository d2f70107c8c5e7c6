"""
Typed push events.

Each subscription kind decodes the ``event`` object of a notification into
one of these classes. Decoding is strict about the fields a handler is
likely to rely on and ignores everything else, so a malformed payload fails
with ``DecodeError`` instead of surfacing half-filled events.

Events keep a reference to the gateway (like every ``HelixEntity``), which
lets them make follow-up calls such as fulfilling a redemption.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from helixsub.entities.base import HelixEntity, Timestamp
from helixsub.entities.subscriptions import HelixSubscription


class EventSubEvent(HelixEntity):
    """Base class for all typed push events."""

    pass


class BroadcasterEvent(EventSubEvent):
    """Event about a single broadcaster."""

    broadcaster_user_id: str
    broadcaster_user_login: str = ""
    broadcaster_user_name: str = ""


class ChannelUpdateEvent(BroadcasterEvent):
    """A broadcaster changed the title, category or language of their channel."""

    title: str
    language: str = ""
    category_id: str = ""
    category_name: str = ""
    content_classification_labels: list[str] = []


class ChannelFollowEvent(BroadcasterEvent):
    """A user followed a broadcaster."""

    user_id: str
    user_login: str = ""
    user_name: str = ""
    followed_at: Timestamp


class ChannelSubscriptionEvent(BroadcasterEvent):
    """A user subscribed to a broadcaster."""

    user_id: str
    user_login: str = ""
    user_name: str = ""
    tier: str
    is_gift: bool = False

    async def get_subscription(self) -> HelixSubscription | None:
        """Look up the full subscription record for this event."""
        from helixsub.api.subscriptions import SubscriptionApi

        return await SubscriptionApi(self.gateway).get_subscription_for_user(
            self.broadcaster_user_id, self.user_id
        )


class ChannelCheerEvent(BroadcasterEvent):
    """A user cheered bits in a broadcaster's chat."""

    is_anonymous: bool = False
    user_id: str | None = None
    user_login: str | None = None
    user_name: str | None = None
    message: str = ""
    bits: int


class ChannelRaidEvent(EventSubEvent):
    """A broadcaster raided another broadcaster."""

    from_broadcaster_user_id: str
    from_broadcaster_user_login: str = ""
    from_broadcaster_user_name: str = ""
    to_broadcaster_user_id: str
    to_broadcaster_user_login: str = ""
    to_broadcaster_user_name: str = ""
    viewers: int


class RedemptionStatus(Enum):
    """Fulfillment status of a channel points redemption."""

    UNFULFILLED = "unfulfilled"
    FULFILLED = "fulfilled"
    CANCELED = "canceled"
    UNKNOWN = "unknown"


class RedemptionReward(BaseModel):
    """The custom reward a redemption was made for."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    title: str
    cost: int
    prompt: str = ""


class ChannelRedemptionAddEvent(BroadcasterEvent):
    """A viewer redeemed a custom channel points reward."""

    id: str
    user_id: str
    user_login: str = ""
    user_name: str = ""
    user_input: str = ""
    status: RedemptionStatus
    reward: RedemptionReward
    redeemed_at: Timestamp

    async def update_status(self, status: RedemptionStatus) -> None:
        """
        Mark the redemption fulfilled or canceled.

        Args:
            status: ``FULFILLED`` or ``CANCELED``
        """
        if status not in (RedemptionStatus.FULFILLED, RedemptionStatus.CANCELED):
            raise ValueError(f"Redemptions can only be fulfilled or canceled, not {status.value}")

        await self.gateway.call(
            "PATCH",
            "channel_points/custom_rewards/redemptions",
            query={
                "id": self.id,
                "broadcaster_id": self.broadcaster_user_id,
                "reward_id": self.reward.id,
            },
            scope="channel:manage:redemptions",
            body={"status": status.value.upper()},
        )


class ChannelRedemptionUpdateEvent(ChannelRedemptionAddEvent):
    """A redemption was fulfilled or canceled."""

    pass


class StreamOnlineEvent(BroadcasterEvent):
    """A broadcaster went live."""

    id: str
    type: str = "live"
    started_at: Timestamp


class StreamOfflineEvent(BroadcasterEvent):
    """A broadcaster stopped streaming."""

    pass


class UserUpdateEvent(EventSubEvent):
    """A user updated their account."""

    user_id: str
    user_login: str = ""
    user_name: str = ""
    email: str | None = None
    email_verified: bool = False
    description: str = ""


__all__ = [
    "EventSubEvent",
    "BroadcasterEvent",
    "ChannelUpdateEvent",
    "ChannelFollowEvent",
    "ChannelSubscriptionEvent",
    "ChannelCheerEvent",
    "ChannelRaidEvent",
    "RedemptionStatus",
    "RedemptionReward",
    "ChannelRedemptionAddEvent",
    "ChannelRedemptionUpdateEvent",
    "StreamOnlineEvent",
    "StreamOfflineEvent",
    "UserUpdateEvent",
]
