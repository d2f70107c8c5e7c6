"""
Inbound push message handling.

Webhook messages arrive as HTTP POSTs on ``{callback_base_url}/event/{identity}``.
The web framework receiving them is out of scope; it only has to pass the
identity path segment, the request headers and the raw body to
``WebhookMessageHandler.handle`` and send back the returned response.

Every webhook message is checked before it is acted on:

1. The subscription identity must be known (404 otherwise)
2. ``Twitch-Eventsub-Message-Signature`` must equal
   ``sha256=`` + HMAC-SHA256(secret, message_id + timestamp + body) (403)
3. The message timestamp must not be older than the configured age (403)
4. Message ids already processed are acknowledged and not processed again

Socket session messages carry the remote subscription id instead of the
identity; ``route_session_message`` maps one to the other.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from collections import OrderedDict
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, ValidationError

from helixsub.entities.base import normalize_timestamp
from helixsub.eventsub.config import TransportMethod
from helixsub.eventsub.exceptions import SignatureVerificationError
from helixsub.exceptions import ConfigError
from helixsub.observability import SpanKindEnum, Tracer, create_tracer
from helixsub.observability.attributes import (
    ATTR_MESSAGE_ID,
    ATTR_MESSAGE_TYPE,
    ATTR_SUBSCRIPTION_IDENTITY,
)

if TYPE_CHECKING:
    from helixsub.eventsub.lifecycle import SubscriptionLifecycleManager

logger = logging.getLogger(__name__)

HEADER_MESSAGE_ID = "twitch-eventsub-message-id"
HEADER_MESSAGE_TIMESTAMP = "twitch-eventsub-message-timestamp"
HEADER_MESSAGE_SIGNATURE = "twitch-eventsub-message-signature"
HEADER_MESSAGE_TYPE = "twitch-eventsub-message-type"

MESSAGE_TYPE_VERIFICATION = "webhook_callback_verification"
MESSAGE_TYPE_NOTIFICATION = "notification"
MESSAGE_TYPE_REVOCATION = "revocation"


class RemoteSubscription(BaseModel):
    """Subscription object embedded in every push message."""

    model_config = ConfigDict(extra="ignore")

    id: str
    status: str = ""
    type: str = ""
    version: str = ""
    condition: dict[str, Any] = {}


class WebhookEnvelope(BaseModel):
    """Body of a webhook message."""

    model_config = ConfigDict(extra="ignore")

    subscription: RemoteSubscription
    challenge: str | None = None
    event: dict[str, Any] | None = None


class SessionMetadata(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message_id: str
    message_type: str
    message_timestamp: str = ""
    subscription_type: str | None = None


class SessionPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    subscription: RemoteSubscription | None = None
    event: dict[str, Any] | None = None
    session: dict[str, Any] | None = None


class SessionMessage(BaseModel):
    """A message received on a socket session."""

    model_config = ConfigDict(extra="ignore")

    metadata: SessionMetadata
    payload: SessionPayload = SessionPayload()


@dataclass(frozen=True)
class WebhookResponse:
    """
    What to answer the remote service with.

    Attributes:
        status: HTTP status code
        body: Response body
        content_type: Response content type
    """

    status: int
    body: str = ""
    content_type: str = "text/plain"


def parse_timestamp(value: str) -> datetime:
    """
    Parse a message timestamp.

    Timestamps carry up to nanosecond precision; digits beyond microseconds
    are dropped.

    Raises:
        ValueError: If the value is not an ISO 8601 timestamp
    """
    value = str(normalize_timestamp(value.strip()))
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def compute_signature(secret: str, message_id: str, timestamp: str, body: bytes) -> str:
    """Signature header value the remote service sends for a message."""
    digest = hmac.new(
        secret.encode("utf-8"),
        message_id.encode("utf-8") + timestamp.encode("utf-8") + body,
        hashlib.sha256,
    ).hexdigest()
    return f"sha256={digest}"


class MessageIdCache:
    """Bounded set of recently seen message ids, oldest evicted first."""

    def __init__(self, max_size: int) -> None:
        self._max_size = max_size
        self._ids: OrderedDict[str, None] = OrderedDict()

    def seen(self, message_id: str) -> bool:
        """
        Record a message id.

        Returns:
            True if the id was already recorded
        """
        if message_id in self._ids:
            self._ids.move_to_end(message_id)
            return True

        self._ids[message_id] = None
        while len(self._ids) > self._max_size:
            self._ids.popitem(last=False)
        return False

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)


class WebhookMessageHandler:
    """
    Verifies webhook messages and routes them to the lifecycle manager.

    Example:
        >>> handler = WebhookMessageHandler(manager)
        >>> response = await handler.handle(identity, request.headers, await request.body())
        >>> return Response(response.body, status_code=response.status)

    Args:
        manager: Manager owning the subscriptions messages are for
        tracer: Optional custom tracer
        enable_tracing: Whether to trace when no tracer is given

    Raises:
        ConfigError: If the manager is not configured for webhook transport
    """

    def __init__(
        self,
        manager: SubscriptionLifecycleManager,
        *,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        if manager.config.transport_method is not TransportMethod.WEBHOOK:
            raise ConfigError(
                "Webhook messages need a manager configured for webhook transport, "
                f"got {manager.config.transport_method.value}"
            )
        self._manager = manager
        self._tracer = tracer or create_tracer(__name__, enable_tracing)
        self._max_age = manager.config.max_message_age_seconds
        self._seen = MessageIdCache(manager.config.message_id_cache_size)

    def verify(
        self,
        identity: str,
        headers: Mapping[str, str],
        body: bytes,
        *,
        now: datetime | None = None,
    ) -> None:
        """
        Check the signature and freshness of a message.

        Args:
            identity: Identity the message was posted for
            headers: Request headers, in any letter case
            body: Raw request body
            now: Current time (defaults to the wall clock)

        Raises:
            SignatureVerificationError: If the message must be rejected
        """
        lowered = {name.lower(): value for name, value in headers.items()}
        message_id = lowered.get(HEADER_MESSAGE_ID)
        timestamp = lowered.get(HEADER_MESSAGE_TIMESTAMP)
        signature = lowered.get(HEADER_MESSAGE_SIGNATURE)
        if not message_id or not timestamp or not signature:
            raise SignatureVerificationError(identity, "missing message headers")

        expected = compute_signature(
            self._manager.secret_for(identity), message_id, timestamp, body
        )
        if not hmac.compare_digest(expected, signature):
            raise SignatureVerificationError(identity, "signature mismatch")

        try:
            sent_at = parse_timestamp(timestamp)
        except ValueError:
            raise SignatureVerificationError(identity, f"invalid timestamp {timestamp!r}") from None

        age = ((now or datetime.now(UTC)) - sent_at).total_seconds()
        if abs(age) > self._max_age:
            raise SignatureVerificationError(identity, f"message is {age:.0f}s old")

    async def handle(
        self,
        identity: str,
        headers: Mapping[str, str],
        body: bytes,
        *,
        now: datetime | None = None,
    ) -> WebhookResponse:
        """
        Verify and process one webhook message.

        Args:
            identity: Identity path segment of the callback URL
            headers: Request headers, in any letter case
            body: Raw request body
            now: Current time (defaults to the wall clock)

        Returns:
            The response to send back
        """
        if self._manager.get(identity) is None:
            logger.warning(
                "Webhook message for unknown subscription",
                extra={"subscription": identity},
            )
            return WebhookResponse(404)

        try:
            self.verify(identity, headers, body, now=now)
        except SignatureVerificationError as e:
            logger.warning(
                str(e),
                extra={"subscription": identity, "reason": e.reason},
            )
            return WebhookResponse(403)

        lowered = {name.lower(): value for name, value in headers.items()}
        message_id = lowered[HEADER_MESSAGE_ID]
        message_type = lowered.get(HEADER_MESSAGE_TYPE, "")

        with self._tracer.span_with_kind(
            "helixsub.eventsub.webhook",
            SpanKindEnum.SERVER,
            {
                ATTR_SUBSCRIPTION_IDENTITY: identity,
                ATTR_MESSAGE_ID: message_id,
                ATTR_MESSAGE_TYPE: message_type,
            },
        ):
            if message_id in self._seen:
                logger.debug(
                    "Ignoring duplicate webhook message",
                    extra={"subscription": identity, "message_id": message_id},
                )
                return WebhookResponse(204)

            try:
                envelope = WebhookEnvelope.model_validate_json(body)
            except ValidationError as e:
                logger.warning(
                    f"Malformed webhook message: {e}",
                    extra={"subscription": identity, "message_id": message_id},
                )
                return WebhookResponse(400)

            if message_type == MESSAGE_TYPE_VERIFICATION and envelope.challenge is None:
                return WebhookResponse(400)

            # Only messages that are acted on count as seen
            self._seen.seen(message_id)

            if message_type == MESSAGE_TYPE_VERIFICATION:
                await self._manager.mark_verified(identity)
                return WebhookResponse(200, envelope.challenge)

            if message_type == MESSAGE_TYPE_NOTIFICATION:
                await self._manager.deliver(identity, envelope.event)
                return WebhookResponse(204)

            if message_type == MESSAGE_TYPE_REVOCATION:
                await self._manager.handle_revocation(identity, envelope.subscription.status)
                return WebhookResponse(204)

            logger.debug(
                f"Ignoring webhook message of type {message_type!r}",
                extra={"subscription": identity, "message_id": message_id},
            )
            return WebhookResponse(204)


async def route_session_message(
    manager: SubscriptionLifecycleManager,
    message: Mapping[str, Any] | SessionMessage,
) -> SessionMessage | None:
    """
    Route one socket session message.

    Notifications and revocations are handed to the manager, located by
    their remote subscription id. Other messages (welcome, keepalive,
    reconnect) are returned for the session owner to act on.

    Args:
        manager: Manager owning the subscriptions
        message: Decoded JSON message, or an already parsed one

    Returns:
        The parsed message if it was not routed, None otherwise

    Raises:
        pydantic.ValidationError: If the message is not a session message
    """
    parsed = (
        message if isinstance(message, SessionMessage) else SessionMessage.model_validate(message)
    )
    message_type = parsed.metadata.message_type
    if message_type not in (MESSAGE_TYPE_NOTIFICATION, MESSAGE_TYPE_REVOCATION):
        return parsed

    subscription = parsed.payload.subscription
    identity = manager.identity_for_remote_id(subscription.id) if subscription else None
    if identity is None:
        logger.debug(
            "Session message for unknown subscription",
            extra={
                "message_id": parsed.metadata.message_id,
                "remote_subscription_id": subscription.id if subscription else None,
            },
        )
        return None

    if message_type == MESSAGE_TYPE_NOTIFICATION:
        await manager.deliver(identity, parsed.payload.event)
    else:
        await manager.handle_revocation(identity, subscription.status if subscription else None)
    return None


__all__ = [
    "WebhookMessageHandler",
    "WebhookResponse",
    "WebhookEnvelope",
    "SessionMessage",
    "RemoteSubscription",
    "MessageIdCache",
    "route_session_message",
    "compute_signature",
    "parse_timestamp",
    "HEADER_MESSAGE_ID",
    "HEADER_MESSAGE_TIMESTAMP",
    "HEADER_MESSAGE_SIGNATURE",
    "HEADER_MESSAGE_TYPE",
]
