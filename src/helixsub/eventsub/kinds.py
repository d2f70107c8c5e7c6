"""
Subscription kinds and their capability table.

Every kind is described by one ``KindSpec``: the remote event type and
version, the permission scope, which parameters define it, how those
parameters map onto the remote condition object, how its identity is
derived, and which event class decodes its payloads. Behavior that differs
per kind lives in this table rather than in per-kind subclasses.

Identity rule:
    ``{prefix}.{required...}[.{optional...}]`` with parameters in declaration
    order. Optional parameters that are absent are left out entirely, so a
    descriptor with a reward id and one without have different identities.

Example:
    >>> spec = get_kind_spec(SubscriptionKind.CHANNEL_REDEMPTION_ADD)
    >>> spec.identity_for({"user_id": "61369223"})
    'channel.channel_points_custom_reward_redemption.add.61369223'
    >>> spec.identity_for({"user_id": "61369223", "reward_id": "r1"})
    'channel.channel_points_custom_reward_redemption.add.61369223.r1'
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from helixsub.eventsub.events import (
    ChannelCheerEvent,
    ChannelFollowEvent,
    ChannelRaidEvent,
    ChannelRedemptionAddEvent,
    ChannelRedemptionUpdateEvent,
    ChannelSubscriptionEvent,
    ChannelUpdateEvent,
    EventSubEvent,
    StreamOfflineEvent,
    StreamOnlineEvent,
    UserUpdateEvent,
)
from helixsub.eventsub.exceptions import UnknownSubscriptionKindError

if TYPE_CHECKING:
    from helixsub.gateway.interface import ApiGateway


class SubscriptionKind(Enum):
    """Subscription kinds supported by the lifecycle manager."""

    CHANNEL_UPDATE = "channel_update"
    CHANNEL_FOLLOW = "channel_follow"
    CHANNEL_SUBSCRIPTION = "channel_subscription"
    CHANNEL_CHEER = "channel_cheer"
    CHANNEL_RAID_TO = "channel_raid_to"
    CHANNEL_RAID_FROM = "channel_raid_from"
    CHANNEL_REDEMPTION_ADD = "channel_redemption_add"
    CHANNEL_REDEMPTION_UPDATE = "channel_redemption_update"
    STREAM_ONLINE = "stream_online"
    STREAM_OFFLINE = "stream_offline"
    USER_UPDATE = "user_update"


def _broadcaster_condition() -> dict[str, str]:
    return {"user_id": "broadcaster_user_id"}


@dataclass(frozen=True)
class KindSpec:
    """
    Everything the library needs to know about one subscription kind.

    Attributes:
        kind: The kind this spec describes
        event_type: Remote event type name
        version: Remote event type version
        event_class: Typed event class payloads decode into
        scope: Permission scope needed to create the subscription
        required: Parameters every descriptor must provide
        optional: Qualifiers a descriptor may provide
        condition_keys: Parameter name to remote condition key
        identity_prefix: First identity segment (defaults to event_type)
    """

    kind: SubscriptionKind
    event_type: str
    version: str
    event_class: type[EventSubEvent]
    scope: str | None = None
    required: tuple[str, ...] = ("user_id",)
    optional: tuple[str, ...] = ()
    condition_keys: Mapping[str, str] = field(default_factory=_broadcaster_condition)
    identity_prefix: str | None = None

    @property
    def prefix(self) -> str:
        return self.identity_prefix or self.event_type

    @property
    def parameters(self) -> tuple[str, ...]:
        """All parameter names, required first."""
        return self.required + self.optional

    def identity_for(self, params: Mapping[str, str]) -> str:
        """
        Derive the identity for a set of already validated parameters.

        Args:
            params: Parameter values; absent optional qualifiers are omitted

        Returns:
            The identity string
        """
        segments = [self.prefix]
        segments.extend(params[name] for name in self.required)
        segments.extend(params[name] for name in self.optional if params.get(name) is not None)
        return ".".join(segments)

    def condition_for(self, params: Mapping[str, str]) -> dict[str, str]:
        """
        Build the remote condition object.

        Absent optional qualifiers are left out of the condition.
        """
        return {
            self.condition_keys[name]: params[name]
            for name in self.parameters
            if params.get(name) is not None
        }

    def transform(self, payload: Any, gateway: ApiGateway) -> EventSubEvent:
        """
        Decode a raw event payload.

        Raises:
            DecodeError: If the payload does not match the event class
        """
        return self.event_class.from_data(payload, gateway)


_REDEMPTION_CONDITION = {"user_id": "broadcaster_user_id", "reward_id": "reward_id"}

KIND_SPECS: dict[SubscriptionKind, KindSpec] = {
    spec.kind: spec
    for spec in (
        KindSpec(
            kind=SubscriptionKind.CHANNEL_UPDATE,
            event_type="channel.update",
            version="2",
            event_class=ChannelUpdateEvent,
        ),
        KindSpec(
            kind=SubscriptionKind.CHANNEL_FOLLOW,
            event_type="channel.follow",
            version="2",
            event_class=ChannelFollowEvent,
            scope="moderator:read:followers",
            required=("user_id", "moderator_id"),
            condition_keys={
                "user_id": "broadcaster_user_id",
                "moderator_id": "moderator_user_id",
            },
        ),
        KindSpec(
            kind=SubscriptionKind.CHANNEL_SUBSCRIPTION,
            event_type="channel.subscribe",
            version="1",
            event_class=ChannelSubscriptionEvent,
            scope="channel:read:subscriptions",
        ),
        KindSpec(
            kind=SubscriptionKind.CHANNEL_CHEER,
            event_type="channel.cheer",
            version="1",
            event_class=ChannelCheerEvent,
            scope="bits:read",
        ),
        KindSpec(
            kind=SubscriptionKind.CHANNEL_RAID_TO,
            event_type="channel.raid",
            version="1",
            event_class=ChannelRaidEvent,
            condition_keys={"user_id": "to_broadcaster_user_id"},
            identity_prefix="channel.raid.to",
        ),
        KindSpec(
            kind=SubscriptionKind.CHANNEL_RAID_FROM,
            event_type="channel.raid",
            version="1",
            event_class=ChannelRaidEvent,
            condition_keys={"user_id": "from_broadcaster_user_id"},
            identity_prefix="channel.raid.from",
        ),
        KindSpec(
            kind=SubscriptionKind.CHANNEL_REDEMPTION_ADD,
            event_type="channel.channel_points_custom_reward_redemption.add",
            version="1",
            event_class=ChannelRedemptionAddEvent,
            scope="channel:read:redemptions",
            optional=("reward_id",),
            condition_keys=_REDEMPTION_CONDITION,
        ),
        KindSpec(
            kind=SubscriptionKind.CHANNEL_REDEMPTION_UPDATE,
            event_type="channel.channel_points_custom_reward_redemption.update",
            version="1",
            event_class=ChannelRedemptionUpdateEvent,
            scope="channel:read:redemptions",
            optional=("reward_id",),
            condition_keys=_REDEMPTION_CONDITION,
        ),
        KindSpec(
            kind=SubscriptionKind.STREAM_ONLINE,
            event_type="stream.online",
            version="1",
            event_class=StreamOnlineEvent,
        ),
        KindSpec(
            kind=SubscriptionKind.STREAM_OFFLINE,
            event_type="stream.offline",
            version="1",
            event_class=StreamOfflineEvent,
        ),
        KindSpec(
            kind=SubscriptionKind.USER_UPDATE,
            event_type="user.update",
            version="1",
            event_class=UserUpdateEvent,
            condition_keys={"user_id": "user_id"},
        ),
    )
}


def get_kind_spec(kind: SubscriptionKind) -> KindSpec:
    """
    Look up the capability entry for a kind.

    Raises:
        UnknownSubscriptionKindError: If the kind has no spec
    """
    try:
        return KIND_SPECS[kind]
    except KeyError:
        raise UnknownSubscriptionKindError(kind) from None


__all__ = [
    "SubscriptionKind",
    "KindSpec",
    "KIND_SPECS",
    "get_kind_spec",
]
