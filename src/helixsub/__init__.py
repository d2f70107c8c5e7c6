"""
helixsub - Async client core for a Helix style data and push event API.

This library provides:
- Cursor-paginated collection traversal with total count reconciliation
- Endpoint wrappers for subscriptions and push subscriptions
- Push subscription lifecycle management with deterministic identities
- Webhook and socket session message routing
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("helixsub")
except PackageNotFoundError:
    # Package not installed (running from source without install)
    __version__ = "0.0.0.dev0"

from helixsub.api import EventSubApi, SubscriptionApi, absent_on_not_found
from helixsub.client import HelixClient
from helixsub.entities import (
    EventSubSubscription,
    HelixEntity,
    HelixSubscription,
    HelixSubscriptionEvent,
    HelixUserSubscription,
)
from helixsub.eventsub import (
    EventSubConfig,
    SubscriptionDescriptor,
    SubscriptionInstance,
    SubscriptionKind,
    SubscriptionLifecycleManager,
    SubscriptionState,
    TransportNegotiator,
    WebhookMessageHandler,
    route_session_message,
)
from helixsub.exceptions import ConfigError, DecodeError, GatewayError, HelixError
from helixsub.gateway import ApiGateway
from helixsub.pagination import (
    Page,
    PaginatedCollection,
    PaginatedRequest,
    PaginatedRequestWithTotal,
    PageRequest,
    Paginator,
    fetch_all,
    fetch_next,
)

__all__ = [
    "__version__",
    # Client
    "HelixClient",
    "ApiGateway",
    # Exceptions
    "HelixError",
    "GatewayError",
    "DecodeError",
    "ConfigError",
    # Pagination
    "Page",
    "PageRequest",
    "Paginator",
    "PaginatedCollection",
    "PaginatedRequest",
    "PaginatedRequestWithTotal",
    "fetch_all",
    "fetch_next",
    # API
    "SubscriptionApi",
    "EventSubApi",
    "absent_on_not_found",
    # Entities
    "HelixEntity",
    "HelixSubscription",
    "HelixUserSubscription",
    "HelixSubscriptionEvent",
    "EventSubSubscription",
    # Push subscriptions
    "EventSubConfig",
    "SubscriptionKind",
    "SubscriptionDescriptor",
    "TransportNegotiator",
    "SubscriptionLifecycleManager",
    "SubscriptionInstance",
    "SubscriptionState",
    "WebhookMessageHandler",
    "route_session_message",
]
