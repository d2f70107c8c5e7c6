"""
Push subscription lifecycle manager.

The manager owns every push subscription of one client: it registers them
with the remote service, routes inbound events to their handlers and
revokes them again. One manager is constructed per client and shared by
reference; there is no module-level registry.

Registration is idempotent per identity. Registering a descriptor whose
identity is already active attaches the handler to the existing instance
without another remote call, including when the two registrations race.

Example:
    >>> manager = SubscriptionLifecycleManager(
    ...     gateway,
    ...     EventSubConfig(
    ...         callback_base_url="https://example.com/hooks",
    ...         secret="thisShouldBeARandomlyGeneratedFixedString",
    ...     ),
    ... )
    >>> instance = await manager.register(
    ...     SubscriptionDescriptor.create(SubscriptionKind.STREAM_ONLINE, user_id="61369223"),
    ...     on_stream_online,
    ... )
    >>> await manager.deliver(instance.identity, raw_event)
    >>> await manager.unsubscribe(instance.identity)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from helixsub.api.eventsub import EventSubApi
from helixsub.eventsub.config import EventSubConfig
from helixsub.eventsub.descriptor import SubscriptionDescriptor
from helixsub.eventsub.exceptions import RevokeConfirmationMismatch
from helixsub.eventsub.handlers import HandlerAdapter
from helixsub.eventsub.negotiator import TransportNegotiator, build_condition
from helixsub.eventsub.registry import SubscriptionRegistry
from helixsub.eventsub.subscription import (
    SubscriptionInstance,
    SubscriptionState,
    SubscriptionStatus,
)
from helixsub.exceptions import DecodeError
from helixsub.observability import SpanKindEnum, Tracer, create_tracer
from helixsub.observability.attributes import (
    ATTR_ERROR_TYPE,
    ATTR_HANDLER_COUNT,
    ATTR_HANDLER_NAME,
    ATTR_REMOTE_SUBSCRIPTION_ID,
    ATTR_SUBSCRIPTION_IDENTITY,
    ATTR_SUBSCRIPTION_KIND,
    ATTR_TRANSPORT_METHOD,
)

if TYPE_CHECKING:
    from helixsub.eventsub.events import EventSubEvent
    from helixsub.gateway.interface import ApiGateway

logger = logging.getLogger(__name__)

# Callback for events whose payload could not be decoded
DecodeErrorCallback = Callable[[str, DecodeError], Awaitable[None] | None]


class SubscriptionLifecycleManager:
    """
    Registers, dispatches and revokes push subscriptions.

    Operations on one identity are serialized; operations on different
    identities run concurrently.

    Args:
        gateway: Gateway used to create and delete remote subscriptions
        config: Transport configuration, or a ready negotiator
        tracer: Optional custom tracer
        enable_tracing: Whether to trace when no tracer is given
        on_decode_error: Called with the identity and error whenever an
            inbound payload cannot be decoded
    """

    def __init__(
        self,
        gateway: ApiGateway,
        config: EventSubConfig | TransportNegotiator,
        *,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
        on_decode_error: DecodeErrorCallback | None = None,
    ) -> None:
        self._gateway = gateway
        self._negotiator = (
            config if isinstance(config, TransportNegotiator) else TransportNegotiator(config)
        )
        self._tracer = tracer or create_tracer(__name__, enable_tracing)
        self._api = EventSubApi(gateway, tracer=self._tracer)
        self._registry = SubscriptionRegistry()
        self._on_decode_error = on_decode_error

    @property
    def negotiator(self) -> TransportNegotiator:
        return self._negotiator

    @property
    def config(self) -> EventSubConfig:
        return self._negotiator.config

    @property
    def registry(self) -> SubscriptionRegistry:
        return self._registry

    async def register(
        self,
        descriptor: SubscriptionDescriptor,
        handler: Any,
    ) -> SubscriptionInstance:
        """
        Register a handler for a subscription.

        Args:
            descriptor: What to subscribe to
            handler: Callable or object with handle() receiving typed events

        Returns:
            The active subscription instance for the descriptor's identity

        Raises:
            GatewayError: If the remote service rejects the subscription;
                the instance is left in FAILED state
            DecodeError: If the remote response cannot be decoded
            asyncio.CancelledError: If cancelled while the create call is
                in flight; the instance is left in FAILED state
        """
        adapter = HandlerAdapter(handler)
        identity, transport = self._negotiator.negotiate(descriptor)

        async with self._registry.lock_for(identity):
            existing = self._registry.get(identity)
            if existing is not None and existing.is_active:
                existing.add_handler(adapter)
                logger.debug(
                    "Attached handler to existing subscription",
                    extra={
                        "subscription": identity,
                        "handler": adapter.name,
                        "handler_count": len(existing.handlers),
                    },
                )
                return existing

            instance = SubscriptionInstance(descriptor=descriptor)
            instance.add_handler(adapter)
            self._registry.put(instance)

            spec = descriptor.spec
            with self._tracer.span_with_kind(
                "helixsub.eventsub.register",
                SpanKindEnum.CLIENT,
                {
                    ATTR_SUBSCRIPTION_IDENTITY: identity,
                    ATTR_SUBSCRIPTION_KIND: descriptor.kind.value,
                    ATTR_TRANSPORT_METHOD: transport.method.value,
                },
            ) as span:
                try:
                    remote = await self._api.create_subscription(
                        spec.event_type,
                        spec.version,
                        build_condition(descriptor),
                        transport.to_request(),
                        scope=descriptor.scope,
                    )
                except BaseException as e:
                    # Includes cancellation; a PENDING instance is never left behind
                    instance.last_error = e
                    instance.transition_to(SubscriptionState.FAILED)
                    if span:
                        span.set_attribute(ATTR_ERROR_TYPE, type(e).__name__)
                        span.record_exception(e)
                    raise

                self._registry.bind_remote_id(instance, remote.id)
                instance.transition_to(SubscriptionState.ACTIVE)
                if span:
                    span.set_attribute(ATTR_REMOTE_SUBSCRIPTION_ID, remote.id)

            logger.info(
                "Subscription registered",
                extra={
                    "subscription": identity,
                    "remote_subscription_id": remote.id,
                    "event_type": spec.event_type,
                    "transport": transport.method.value,
                },
            )
            return instance

    async def deliver(self, identity: str, raw_payload: Any) -> None:
        """
        Decode an inbound event and hand it to the subscription's handlers.

        Events for unknown or inactive identities are discarded. Decode
        failures and handler exceptions are logged and counted, never raised.

        Args:
            identity: Identity the event was delivered for
            raw_payload: The raw ``event`` object of the message
        """
        lock = self._registry.existing_lock_for(identity)
        if lock is None:
            logger.debug(
                "Discarding event for unknown subscription",
                extra={"subscription": identity},
            )
            return

        async with lock:
            instance = self._registry.get(identity)
            if instance is None or not instance.is_active:
                logger.debug(
                    "Discarding event for inactive subscription",
                    extra={
                        "subscription": identity,
                        "state": instance.state.value if instance else None,
                    },
                )
                return

            try:
                event = instance.descriptor.spec.transform(raw_payload, self._gateway)
            except DecodeError as e:
                instance.decode_failures += 1
                instance.last_error = e
                decode_error = e
            else:
                decode_error = None
                instance.events_delivered += 1
                instance.last_event_at = datetime.now(UTC)
            handlers = list(instance.handlers)

        if decode_error is not None:
            await self._report_decode_error(identity, decode_error)
            return

        with self._tracer.span(
            "helixsub.eventsub.deliver",
            {
                ATTR_SUBSCRIPTION_IDENTITY: identity,
                ATTR_SUBSCRIPTION_KIND: instance.descriptor.kind.value,
                ATTR_HANDLER_COUNT: len(handlers),
            },
        ):
            tasks = [self._safe_handle(instance, adapter, event) for adapter in handlers]
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _safe_handle(
        self,
        instance: SubscriptionInstance,
        adapter: HandlerAdapter,
        event: EventSubEvent,
    ) -> None:
        """Run one handler, logging and counting any exception it raises."""
        with self._tracer.span(
            "helixsub.eventsub.handle",
            {
                ATTR_SUBSCRIPTION_IDENTITY: instance.identity,
                ATTR_HANDLER_NAME: adapter.name,
            },
        ) as span:
            try:
                await adapter.handle(event)
            except Exception as e:
                if span:
                    span.set_attribute(ATTR_ERROR_TYPE, type(e).__name__)
                    span.record_exception(e)
                instance.handler_failures += 1
                logger.error(
                    f"Handler {adapter.name} failed processing {type(event).__name__}: {e}",
                    exc_info=True,
                    extra={
                        "subscription": instance.identity,
                        "handler": adapter.name,
                        "event_type": type(event).__name__,
                        "error": str(e),
                    },
                )

    async def _report_decode_error(self, identity: str, error: DecodeError) -> None:
        logger.warning(
            f"Could not decode event for {identity}: {error}",
            extra={"subscription": identity, "kind": error.kind, "error": str(error)},
        )
        if self._on_decode_error is None:
            return

        try:
            result = self._on_decode_error(identity, error)
            if asyncio.iscoroutine(result):
                await result
        except Exception as e:
            logger.error(
                f"Decode error callback failed: {e}",
                exc_info=True,
                extra={"subscription": identity, "error": str(e)},
            )

    async def unsubscribe(self, identity: str) -> None:
        """
        Revoke a subscription.

        The instance is marked REVOKED even if the remote delete fails; the
        failure is recorded on the instance as ``RevokeConfirmationMismatch``
        and logged. Absent, revoked and failed instances are left alone.

        Args:
            identity: Identity of the subscription to revoke
        """
        lock = self._registry.existing_lock_for(identity)
        if lock is None:
            logger.debug(
                "Unsubscribe ignored for unknown subscription",
                extra={"subscription": identity},
            )
            return

        async with lock:
            instance = self._registry.get(identity)
            if instance is None or not instance.is_active:
                logger.debug(
                    "Unsubscribe ignored for inactive subscription",
                    extra={"subscription": identity},
                )
                return

            with self._tracer.span_with_kind(
                "helixsub.eventsub.unsubscribe",
                SpanKindEnum.CLIENT,
                {
                    ATTR_SUBSCRIPTION_IDENTITY: identity,
                    ATTR_REMOTE_SUBSCRIPTION_ID: instance.remote_subscription_id or "",
                },
            ) as span:
                try:
                    if instance.remote_subscription_id:
                        await self._api.delete_subscription(instance.remote_subscription_id)
                except Exception as e:
                    mismatch = RevokeConfirmationMismatch(
                        identity, instance.remote_subscription_id, e
                    )
                    instance.last_error = mismatch
                    if span:
                        span.set_attribute(ATTR_ERROR_TYPE, type(e).__name__)
                        span.record_exception(e)
                    logger.warning(
                        str(mismatch),
                        extra={
                            "subscription": identity,
                            "remote_subscription_id": instance.remote_subscription_id,
                            "error": str(e),
                        },
                    )

                instance.transition_to(SubscriptionState.REVOKED)

    async def handle_revocation(self, identity: str, reason: str | None = None) -> None:
        """
        Apply a revocation notice sent by the remote service.

        No remote call is made. Notices for absent or inactive subscriptions
        are ignored.

        Args:
            identity: Identity of the revoked subscription
            reason: Status reported by the remote service
        """
        lock = self._registry.existing_lock_for(identity)
        if lock is None:
            return

        async with lock:
            instance = self._registry.get(identity)
            if instance is None or not instance.is_active:
                return

            instance.transition_to(SubscriptionState.REVOKED)
            logger.warning(
                "Subscription revoked by remote service",
                extra={"subscription": identity, "reason": reason},
            )

    async def mark_verified(self, identity: str) -> bool:
        """
        Record that the verification challenge of a subscription was answered.

        Returns:
            True if a pending or active instance exists for the identity
        """
        lock = self._registry.existing_lock_for(identity)
        if lock is None:
            return False

        async with lock:
            instance = self._registry.get(identity)
            if instance is None or instance.is_terminal:
                return False

            instance.verified = True
            logger.info("Subscription verified", extra={"subscription": identity})
            return True

    async def unsubscribe_all(self) -> None:
        """Revoke every active subscription concurrently."""
        identities = [instance.identity for instance in self._registry if instance.is_active]
        if not identities:
            return

        logger.info(
            "Unsubscribing all subscriptions",
            extra={"subscription_count": len(identities)},
        )
        await asyncio.gather(
            *(self.unsubscribe(identity) for identity in identities),
            return_exceptions=True,
        )

    def get(self, identity: str) -> SubscriptionInstance | None:
        """Get the instance registered under an identity, if any."""
        return self._registry.get(identity)

    def identity_for_remote_id(self, remote_subscription_id: str) -> str | None:
        """Look up the identity owning a remote subscription id."""
        return self._registry.identity_for_remote_id(remote_subscription_id)

    def secret_for(self, identity: str) -> str:
        """Webhook signing secret for an identity."""
        return self._negotiator.secret_for(identity)

    def get_statuses(self) -> dict[str, SubscriptionStatus]:
        """Get status snapshots of all subscriptions, keyed by identity."""
        return self._registry.get_statuses()


__all__ = ["SubscriptionLifecycleManager", "DecodeErrorCallback"]
