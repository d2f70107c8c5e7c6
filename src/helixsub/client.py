"""
Client facade bundling the endpoint wrappers of one gateway.

Example:
    >>> client = HelixClient(gateway)
    >>> subscription = await client.subscriptions.check_user_subscription(user, broadcaster)
    >>> manager = client.create_eventsub_manager(EventSubConfig(session_id=session_id))
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from helixsub.api import EventSubApi, SubscriptionApi
from helixsub.eventsub.lifecycle import DecodeErrorCallback, SubscriptionLifecycleManager
from helixsub.observability import Tracer, create_tracer

if TYPE_CHECKING:
    from helixsub.eventsub.config import EventSubConfig
    from helixsub.gateway.interface import ApiGateway


class HelixClient:
    """
    Entry point to the API.

    Endpoint groups are created once and share the client's gateway and
    tracer.

    Args:
        gateway: Gateway performing authenticated calls
        tracer: Optional custom tracer
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
        self._subscriptions = SubscriptionApi(gateway, tracer=self._tracer)
        self._eventsub = EventSubApi(gateway, tracer=self._tracer)

    @property
    def gateway(self) -> ApiGateway:
        return self._gateway

    @property
    def subscriptions(self) -> SubscriptionApi:
        return self._subscriptions

    @property
    def eventsub(self) -> EventSubApi:
        return self._eventsub

    def create_eventsub_manager(
        self,
        config: EventSubConfig,
        *,
        on_decode_error: DecodeErrorCallback | None = None,
    ) -> SubscriptionLifecycleManager:
        """
        Create a lifecycle manager bound to this client's gateway.

        Construct one manager per transport and keep it for the life of the
        client; it owns the subscription registry.
        """
        return SubscriptionLifecycleManager(
            self._gateway,
            config,
            tracer=self._tracer,
            on_decode_error=on_decode_error,
        )


__all__ = ["HelixClient"]
