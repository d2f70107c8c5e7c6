"""
Subscription instance with state machine for push subscription lifecycle.

This module provides:
- SubscriptionState: Enum of all possible subscription states
- SubscriptionStatus: Immutable snapshot for reporting
- SubscriptionInstance: One registered subscription, its handlers and statistics

State Machine:
    PENDING -> ACTIVE | FAILED
    ACTIVE -> REVOKED
    REVOKED -> (terminal)
    FAILED -> (terminal)

Event delivery never changes the state of a subscription.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from helixsub.eventsub.descriptor import SubscriptionDescriptor
from helixsub.eventsub.exceptions import SubscriptionStateError
from helixsub.eventsub.handlers import HandlerAdapter

logger = logging.getLogger(__name__)


class SubscriptionState(Enum):
    """
    States a push subscription can be in during its lifecycle.

    State transitions:
        PENDING -> ACTIVE | FAILED
        ACTIVE -> REVOKED
        REVOKED -> (terminal)
        FAILED -> (terminal)
    """

    PENDING = "pending"
    """Registration with the remote service is in progress."""

    ACTIVE = "active"
    """Registered remotely; events are delivered to handlers."""

    REVOKED = "revoked"
    """Unsubscribed locally or revoked by the remote service."""

    FAILED = "failed"
    """Registration with the remote service failed."""


VALID_TRANSITIONS: dict[SubscriptionState, set[SubscriptionState]] = {
    SubscriptionState.PENDING: {
        SubscriptionState.ACTIVE,
        SubscriptionState.FAILED,
    },
    SubscriptionState.ACTIVE: {
        SubscriptionState.REVOKED,
    },
    SubscriptionState.REVOKED: set(),  # Terminal state
    SubscriptionState.FAILED: set(),  # Terminal state
}


def is_valid_transition(
    from_state: SubscriptionState,
    to_state: SubscriptionState,
) -> bool:
    """
    Check if a state transition is valid.

    Args:
        from_state: Current state
        to_state: Target state

    Returns:
        True if transition is allowed, False otherwise
    """
    return to_state in VALID_TRANSITIONS.get(from_state, set())


@dataclass(frozen=True)
class SubscriptionStatus:
    """
    Status snapshot for reporting.

    Attributes:
        identity: Subscription identity
        kind: Subscription kind as string
        state: Current state as string
        remote_subscription_id: Id assigned by the remote service, if any
        verified: Whether the webhook verification challenge was answered
        handler_count: Number of attached handlers
        events_delivered: Events successfully decoded and dispatched
        decode_failures: Events that could not be decoded
        handler_failures: Handler invocations that raised
        created_at: ISO timestamp when the instance was created
        last_event_at: ISO timestamp of the last dispatched event
        error: Last recorded error message, if any
    """

    identity: str
    kind: str
    state: str
    remote_subscription_id: str | None
    verified: bool
    handler_count: int
    events_delivered: int
    decode_failures: int
    handler_failures: int
    created_at: str
    last_event_at: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "identity": self.identity,
            "kind": self.kind,
            "state": self.state,
            "remote_subscription_id": self.remote_subscription_id,
            "verified": self.verified,
            "handler_count": self.handler_count,
            "events_delivered": self.events_delivered,
            "decode_failures": self.decode_failures,
            "handler_failures": self.handler_failures,
            "created_at": self.created_at,
            "last_event_at": self.last_event_at,
            "error": self.error,
        }


@dataclass
class SubscriptionInstance:
    """
    One push subscription as tracked by the lifecycle manager.

    Instances are created and mutated only by the manager, under the
    per-identity lock of its registry.

    Attributes:
        descriptor: What the subscription is for
        handlers: Handlers invoked for every delivered event
        remote_subscription_id: Id assigned by the remote service once active
        state: Current lifecycle state
    """

    descriptor: SubscriptionDescriptor
    handlers: list[HandlerAdapter] = field(default_factory=list, repr=False)
    remote_subscription_id: str | None = None
    state: SubscriptionState = SubscriptionState.PENDING

    # Bookkeeping
    verified: bool = False
    events_delivered: int = 0
    decode_failures: int = 0
    handler_failures: int = 0
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    last_event_at: datetime | None = None
    revoked_at: datetime | None = None
    last_error: BaseException | None = field(default=None, repr=False)

    @property
    def identity(self) -> str:
        return self.descriptor.identity

    def transition_to(self, new_state: SubscriptionState) -> None:
        """
        Transition to a new state.

        Args:
            new_state: The state to transition to

        Raises:
            SubscriptionStateError: If the transition is not valid
        """
        if not is_valid_transition(self.state, new_state):
            valid_targets = VALID_TRANSITIONS.get(self.state, set())
            raise SubscriptionStateError(
                f"Cannot transition from {self.state.value} to {new_state.value}. "
                f"Valid transitions: {[s.value for s in valid_targets]}"
            )

        old_state = self.state
        self.state = new_state
        if new_state is SubscriptionState.REVOKED:
            self.revoked_at = datetime.now(UTC)

        if new_state is SubscriptionState.FAILED:
            logger.error(
                "Subscription registration failed",
                extra={
                    "subscription": self.identity,
                    "from_state": old_state.value,
                    "to_state": new_state.value,
                    "error": str(self.last_error) if self.last_error else None,
                },
            )
        else:
            logger.info(
                "Subscription state changed",
                extra={
                    "subscription": self.identity,
                    "from_state": old_state.value,
                    "to_state": new_state.value,
                },
            )

    def add_handler(self, handler: Any) -> HandlerAdapter:
        """Attach a handler and return its adapter."""
        adapter = handler if isinstance(handler, HandlerAdapter) else HandlerAdapter(handler)
        self.handlers.append(adapter)
        return adapter

    def remove_handler(self, handler: Any) -> bool:
        """
        Detach a handler.

        Returns:
            True if the handler was attached
        """
        for i, adapter in enumerate(self.handlers):
            if adapter == handler:
                self.handlers.pop(i)
                return True
        return False

    @property
    def is_active(self) -> bool:
        return self.state is SubscriptionState.ACTIVE

    @property
    def is_terminal(self) -> bool:
        """True if revoked or failed."""
        return self.state in {SubscriptionState.REVOKED, SubscriptionState.FAILED}

    def get_status(self) -> SubscriptionStatus:
        """Get a point-in-time status snapshot."""
        return SubscriptionStatus(
            identity=self.identity,
            kind=self.descriptor.kind.value,
            state=self.state.value,
            remote_subscription_id=self.remote_subscription_id,
            verified=self.verified,
            handler_count=len(self.handlers),
            events_delivered=self.events_delivered,
            decode_failures=self.decode_failures,
            handler_failures=self.handler_failures,
            created_at=self.created_at.isoformat(),
            last_event_at=self.last_event_at.isoformat() if self.last_event_at else None,
            error=str(self.last_error) if self.last_error else None,
        )


__all__ = [
    "SubscriptionState",
    "VALID_TRANSITIONS",
    "is_valid_transition",
    "SubscriptionStatus",
    "SubscriptionInstance",
]
