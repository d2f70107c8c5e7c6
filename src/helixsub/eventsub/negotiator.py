"""
Subscription identity and transport negotiation.

The negotiator turns a descriptor into everything needed to register it:
its identity, the remote condition object, and the transport configuration.
All of it is a pure function of the descriptor and the manager's
configuration, so the same descriptor always yields byte-identical results,
across calls and across process restarts.

Webhook transports get a per-subscription signing secret::

    secret = HMAC-SHA256(key=config.secret, msg=identity).hexdigest()

and a callback URL that carries the identity, so the inbound handler knows
which subscription a message belongs to before parsing it::

    callback = {config.callback_base_url}/event/{identity}
"""

from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass
from typing import Any

from helixsub.eventsub.config import EventSubConfig, TransportMethod
from helixsub.eventsub.descriptor import SubscriptionDescriptor
from helixsub.exceptions import ConfigError


@dataclass(frozen=True)
class WebhookTransport:
    """
    Webhook delivery.

    Attributes:
        callback: URL the remote service POSTs messages to
        secret: Secret the remote service signs messages with
    """

    callback: str
    secret: str

    @property
    def method(self) -> TransportMethod:
        return TransportMethod.WEBHOOK

    def to_request(self) -> dict[str, Any]:
        """Wire form sent when creating the subscription."""
        return {"method": self.method.value, "callback": self.callback, "secret": self.secret}

    def __repr__(self) -> str:
        return f"WebhookTransport(callback={self.callback!r}, secret='***')"


@dataclass(frozen=True)
class WebSocketTransport:
    """
    Socket session delivery.

    Attributes:
        session_id: Id of the established socket session
    """

    session_id: str

    @property
    def method(self) -> TransportMethod:
        return TransportMethod.WEBSOCKET

    def to_request(self) -> dict[str, Any]:
        """Wire form sent when creating the subscription."""
        return {"method": self.method.value, "session_id": self.session_id}


TransportConfig = WebhookTransport | WebSocketTransport


def derive_identity(descriptor: SubscriptionDescriptor) -> str:
    """Derive the canonical identity of a descriptor."""
    return descriptor.spec.identity_for(descriptor.params)


def build_condition(descriptor: SubscriptionDescriptor) -> dict[str, str]:
    """Build the remote condition object of a descriptor."""
    return descriptor.spec.condition_for(descriptor.params)


class TransportNegotiator:
    """
    Derives identities and transport configurations.

    Example:
        >>> negotiator = TransportNegotiator(EventSubConfig(
        ...     callback_base_url="https://example.com/hooks",
        ...     secret="thisShouldBeARandomlyGeneratedFixedString",
        ... ))
        >>> identity, transport = negotiator.negotiate(descriptor)
        >>> transport.callback
        'https://example.com/hooks/event/stream.online.61369223'
    """

    def __init__(self, config: EventSubConfig) -> None:
        self._config = config

    @property
    def config(self) -> EventSubConfig:
        return self._config

    def negotiate(self, descriptor: SubscriptionDescriptor) -> tuple[str, TransportConfig]:
        """
        Compute the identity and transport for a descriptor.

        Args:
            descriptor: The subscription to negotiate

        Returns:
            Tuple of (identity, transport configuration)
        """
        identity = derive_identity(descriptor)
        return identity, self.transport_for(identity)

    def transport_for(self, identity: str) -> TransportConfig:
        """Build the transport configuration for an identity."""
        session_id = self._config.session_id
        if session_id is not None:
            return WebSocketTransport(session_id=session_id)

        return WebhookTransport(
            callback=self.callback_url(identity),
            secret=self.secret_for(identity),
        )

    def _webhook_settings(self) -> tuple[str, str]:
        base_url, secret = self._config.callback_base_url, self._config.secret
        if base_url is None or secret is None:
            raise ConfigError(
                "Webhook callback and secret are not configured for "
                f"{self._config.transport_method.value} transport"
            )
        return base_url, secret

    def callback_url(self, identity: str) -> str:
        """
        Webhook callback URL for an identity.

        Raises:
            ConfigError: If the configuration is not for webhook transport
        """
        base_url, _ = self._webhook_settings()
        return f"{base_url.rstrip('/')}/event/{identity}"

    def secret_for(self, identity: str) -> str:
        """
        Per-subscription webhook signing secret.

        Raises:
            ConfigError: If the configuration is not for webhook transport
        """
        _, secret = self._webhook_settings()
        return hmac.new(
            secret.encode("utf-8"),
            identity.encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()


__all__ = [
    "WebhookTransport",
    "WebSocketTransport",
    "TransportConfig",
    "TransportNegotiator",
    "derive_identity",
    "build_condition",
]
