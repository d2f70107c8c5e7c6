"""
Testing utilities for code built on helixsub.

Example:
    >>> from helixsub.testing import InMemoryGateway, page
    >>>
    >>> gateway = InMemoryGateway()
    >>> gateway.respond("GET", "subscriptions", page([{"user_id": "1"}]))
"""

from helixsub.testing.gateway import GatewayCall, InMemoryGateway, page

__all__ = [
    "InMemoryGateway",
    "GatewayCall",
    "page",
]
