"""
Configuration for push subscriptions.

Exactly one transport is configured per manager:

- webhook: events are POSTed to ``{callback_base_url}/event/{identity}``
  and signed with a per-subscription secret derived from ``secret``
- websocket: events arrive on an already established socket session
  identified by ``session_id``
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from helixsub.exceptions import ConfigError


class TransportMethod(Enum):
    """Delivery transports supported by the remote service."""

    WEBHOOK = "webhook"
    WEBSOCKET = "websocket"


@dataclass(frozen=True)
class EventSubConfig:
    """
    Configuration for a subscription lifecycle manager.

    Attributes:
        callback_base_url: Public https base URL of the webhook receiver
        secret: Base secret the per-subscription signing secrets derive from
        session_id: Socket session to deliver events to (websocket mode)
        max_message_age_seconds: Webhook messages older than this are rejected
        message_id_cache_size: How many recent message ids to remember for
            duplicate detection

    Example:
        >>> config = EventSubConfig(
        ...     callback_base_url="https://example.com/hooks",
        ...     secret="thisShouldBeARandomlyGeneratedFixedString",
        ... )
        >>> config.transport_method
        <TransportMethod.WEBHOOK: 'webhook'>
    """

    callback_base_url: str | None = None
    secret: str | None = None
    session_id: str | None = None
    max_message_age_seconds: float = 600.0
    message_id_cache_size: int = 1000

    def __post_init__(self) -> None:
        """Validate configuration values."""
        webhook = self.callback_base_url is not None or self.secret is not None
        websocket = self.session_id is not None

        if webhook and websocket:
            raise ConfigError("Configure either a webhook callback or a session id, not both")
        if not webhook and not websocket:
            raise ConfigError("Either callback_base_url and secret or session_id is required")

        if webhook:
            if not self.callback_base_url or not self.secret:
                raise ConfigError("Webhook transport needs both callback_base_url and secret")
            if not self.callback_base_url.startswith("https://"):
                raise ConfigError(
                    f"callback_base_url must use https, got {self.callback_base_url!r}"
                )
            if not 10 <= len(self.secret) <= 100:
                raise ConfigError(
                    f"secret must be between 10 and 100 characters, got {len(self.secret)}"
                )
        elif not self.session_id:
            raise ConfigError("session_id must not be empty")

        if self.max_message_age_seconds <= 0:
            raise ConfigError(
                f"max_message_age_seconds must be positive, got {self.max_message_age_seconds}"
            )
        if self.message_id_cache_size < 1:
            raise ConfigError(
                f"message_id_cache_size must be >= 1, got {self.message_id_cache_size}"
            )

    @property
    def transport_method(self) -> TransportMethod:
        if self.session_id is not None:
            return TransportMethod.WEBSOCKET
        return TransportMethod.WEBHOOK


__all__ = ["EventSubConfig", "TransportMethod"]
