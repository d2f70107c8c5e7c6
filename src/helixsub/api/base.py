"""
Shared plumbing for endpoint wrappers.

Endpoint wrappers are thin: they build a request, hand it to the gateway
(or to the pagination engine) and decode the result into entities.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from typing import TYPE_CHECKING, TypeVar

from helixsub.exceptions import GatewayError
from helixsub.observability import Tracer, create_tracer

if TYPE_CHECKING:
    from helixsub.gateway.interface import ApiGateway

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def absent_on_not_found(call: Awaitable[T]) -> T | None:
    """
    Await a single-entity lookup, translating "not found" into None.

    Only a 404 is translated; every other ``GatewayError`` propagates
    unchanged.

    Args:
        call: The awaitable performing the lookup

    Returns:
        The lookup result, or None if the remote service answered 404
    """
    try:
        return await call
    except GatewayError as e:
        if e.is_not_found:
            logger.debug(
                "Lookup found nothing",
                extra={"path": e.path, "status_code": e.status_code},
            )
            return None
        raise


class BaseApi:
    """
    Base class for endpoint wrappers.

    Args:
        gateway: Gateway performing the calls
        tracer: Optional tracer shared with paginated requests
        enable_tracing: Whether to trace when no tracer is given
    """

    def __init__(
        self,
        gateway: ApiGateway,
        *,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        self._gateway = gateway
        self._tracer = tracer or create_tracer(__name__, enable_tracing)

    @property
    def gateway(self) -> ApiGateway:
        return self._gateway


__all__ = ["BaseApi", "absent_on_not_found"]
