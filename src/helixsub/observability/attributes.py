"""
Standard span attributes for helixsub.

Attribute names used across components so spans from the pagination
engine, the subscription lifecycle manager and the inbound handlers
can be correlated.

Example:
    >>> from helixsub.observability.attributes import ATTR_SUBSCRIPTION_IDENTITY
    >>> with tracer.span(
    ...     "helixsub.lifecycle.register",
    ...     {ATTR_SUBSCRIPTION_IDENTITY: identity},
    ... ):
    ...     pass
"""

# =============================================================================
# API Attributes
# =============================================================================

ATTR_API_METHOD = "helixsub.api.method"
"""HTTP method of a gateway call (e.g., 'GET')."""

ATTR_API_PATH = "helixsub.api.path"
"""API path of a gateway call (e.g., 'subscriptions')."""

ATTR_API_SCOPE = "helixsub.api.scope"
"""Permission scope required by a gateway call."""

ATTR_STATUS_CODE = "helixsub.api.status_code"
"""Status code of a failed gateway call (integer)."""

# =============================================================================
# Pagination Attributes
# =============================================================================

ATTR_PAGE_COUNT = "helixsub.pagination.page_count"
"""Number of pages fetched by a traversal (integer)."""

ATTR_ITEM_COUNT = "helixsub.pagination.item_count"
"""Number of items observed so far (integer)."""

ATTR_HAS_CURSOR = "helixsub.pagination.has_cursor"
"""Whether the last page carried a continuation cursor (boolean)."""

ATTR_TOTAL = "helixsub.pagination.total"
"""Server-reported total of a collection (integer)."""

# =============================================================================
# Subscription Attributes
# =============================================================================

ATTR_SUBSCRIPTION_IDENTITY = "helixsub.subscription.identity"
"""Derived identity of a push subscription."""

ATTR_SUBSCRIPTION_KIND = "helixsub.subscription.kind"
"""Kind of a push subscription (e.g., 'channel_redemption_add')."""

ATTR_REMOTE_SUBSCRIPTION_ID = "helixsub.subscription.remote_id"
"""Identifier assigned to a subscription by the remote service."""

ATTR_TRANSPORT_METHOD = "helixsub.subscription.transport"
"""Delivery transport of a subscription ('webhook' or 'websocket')."""

ATTR_HANDLER_COUNT = "helixsub.handler.count"
"""Number of handlers an event is dispatched to (integer)."""

ATTR_HANDLER_NAME = "helixsub.handler.name"
"""Name of the handler processing an event."""

ATTR_MESSAGE_TYPE = "helixsub.message.type"
"""Type of an inbound message (e.g., 'notification')."""

ATTR_MESSAGE_ID = "helixsub.message.id"
"""Identifier of an inbound message."""

ATTR_ERROR_TYPE = "helixsub.error.type"
"""Exception class name when an operation fails."""

__all__ = [
    "ATTR_API_METHOD",
    "ATTR_API_PATH",
    "ATTR_API_SCOPE",
    "ATTR_STATUS_CODE",
    "ATTR_PAGE_COUNT",
    "ATTR_ITEM_COUNT",
    "ATTR_HAS_CURSOR",
    "ATTR_TOTAL",
    "ATTR_SUBSCRIPTION_IDENTITY",
    "ATTR_SUBSCRIPTION_KIND",
    "ATTR_REMOTE_SUBSCRIPTION_ID",
    "ATTR_TRANSPORT_METHOD",
    "ATTR_HANDLER_COUNT",
    "ATTR_HANDLER_NAME",
    "ATTR_MESSAGE_TYPE",
    "ATTR_MESSAGE_ID",
    "ATTR_ERROR_TYPE",
]
