"""
Push subscription (EventSub) lifecycle management.

Example:
    >>> from helixsub.eventsub import (
    ...     EventSubConfig,
    ...     SubscriptionDescriptor,
    ...     SubscriptionKind,
    ...     SubscriptionLifecycleManager,
    ... )
    >>>
    >>> manager = SubscriptionLifecycleManager(gateway, EventSubConfig(session_id=session_id))
    >>> await manager.register(
    ...     SubscriptionDescriptor.create(SubscriptionKind.CHANNEL_CHEER, user_id="61369223"),
    ...     on_cheer,
    ... )

Classes:
    SubscriptionLifecycleManager: Registers, dispatches and revokes subscriptions
    SubscriptionDescriptor: Kind plus defining parameters
    TransportNegotiator: Derives identities and transport configurations
    SubscriptionInstance: One registered subscription with state machine
    WebhookMessageHandler: Verifies and routes webhook messages

Functions:
    derive_identity: Canonical identity of a descriptor
    build_condition: Remote condition object of a descriptor
    route_session_message: Routes socket session messages
"""

from helixsub.eventsub.config import EventSubConfig, TransportMethod
from helixsub.eventsub.descriptor import SubscriptionDescriptor
from helixsub.eventsub.events import (
    BroadcasterEvent,
    ChannelCheerEvent,
    ChannelFollowEvent,
    ChannelRaidEvent,
    ChannelRedemptionAddEvent,
    ChannelRedemptionUpdateEvent,
    ChannelSubscriptionEvent,
    ChannelUpdateEvent,
    EventSubEvent,
    RedemptionReward,
    RedemptionStatus,
    StreamOfflineEvent,
    StreamOnlineEvent,
    UserUpdateEvent,
)
from helixsub.eventsub.exceptions import (
    EventSubError,
    RevokeConfirmationMismatch,
    SignatureVerificationError,
    SubscriptionStateError,
    UnknownSubscriptionKindError,
)
from helixsub.eventsub.handlers import EventHandler, HandlerAdapter
from helixsub.eventsub.inbound import (
    SessionMessage,
    WebhookMessageHandler,
    WebhookResponse,
    compute_signature,
    route_session_message,
)
from helixsub.eventsub.kinds import KIND_SPECS, KindSpec, SubscriptionKind, get_kind_spec
from helixsub.eventsub.lifecycle import DecodeErrorCallback, SubscriptionLifecycleManager
from helixsub.eventsub.negotiator import (
    TransportConfig,
    TransportNegotiator,
    WebhookTransport,
    WebSocketTransport,
    build_condition,
    derive_identity,
)
from helixsub.eventsub.registry import SubscriptionRegistry
from helixsub.eventsub.subscription import (
    VALID_TRANSITIONS,
    SubscriptionInstance,
    SubscriptionState,
    SubscriptionStatus,
    is_valid_transition,
)

__all__ = [
    # Configuration
    "EventSubConfig",
    "TransportMethod",
    # Kinds and descriptors
    "SubscriptionKind",
    "KindSpec",
    "KIND_SPECS",
    "get_kind_spec",
    "SubscriptionDescriptor",
    # Negotiation
    "TransportNegotiator",
    "TransportConfig",
    "WebhookTransport",
    "WebSocketTransport",
    "derive_identity",
    "build_condition",
    # Lifecycle
    "SubscriptionLifecycleManager",
    "DecodeErrorCallback",
    "SubscriptionRegistry",
    "SubscriptionInstance",
    "SubscriptionState",
    "SubscriptionStatus",
    "VALID_TRANSITIONS",
    "is_valid_transition",
    "EventHandler",
    "HandlerAdapter",
    # Inbound
    "WebhookMessageHandler",
    "WebhookResponse",
    "SessionMessage",
    "compute_signature",
    "route_session_message",
    # Events
    "EventSubEvent",
    "BroadcasterEvent",
    "ChannelUpdateEvent",
    "ChannelFollowEvent",
    "ChannelSubscriptionEvent",
    "ChannelCheerEvent",
    "ChannelRaidEvent",
    "ChannelRedemptionAddEvent",
    "ChannelRedemptionUpdateEvent",
    "RedemptionReward",
    "RedemptionStatus",
    "StreamOnlineEvent",
    "StreamOfflineEvent",
    "UserUpdateEvent",
    # Exceptions
    "EventSubError",
    "SubscriptionStateError",
    "UnknownSubscriptionKindError",
    "SignatureVerificationError",
    "RevokeConfirmationMismatch",
]
