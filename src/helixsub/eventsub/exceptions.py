"""
Push subscription exceptions.

All exceptions inherit from EventSubError for easy catching.
This module follows the same patterns as helixsub.exceptions.
"""

from helixsub.exceptions import HelixError


class EventSubError(HelixError):
    """Base exception for push subscription errors."""

    pass


class SubscriptionStateError(EventSubError):
    """Raised when a state transition is not allowed."""

    pass


class UnknownSubscriptionKindError(EventSubError):
    """Raised when a subscription kind is not in the capability table."""

    def __init__(self, kind: object) -> None:
        self.kind = kind
        super().__init__(f"Unknown subscription kind: {kind!r}")


class SignatureVerificationError(EventSubError):
    """Raised when an inbound message fails signature or freshness checks."""

    def __init__(self, identity: str, reason: str) -> None:
        self.identity = identity
        self.reason = reason
        super().__init__(f"Rejected message for subscription '{identity}': {reason}")


class RevokeConfirmationMismatch(EventSubError):
    """
    Local state says revoked but the remote delete call failed.

    Recorded on the subscription instance and logged; never raised to the
    caller of ``unsubscribe``. The remote side is reconciled later, for
    example by a revocation notice.
    """

    def __init__(self, identity: str, remote_subscription_id: str | None, cause: Exception) -> None:
        self.identity = identity
        self.remote_subscription_id = remote_subscription_id
        self.cause = cause
        super().__init__(
            f"Subscription '{identity}' marked revoked locally but remote delete of "
            f"{remote_subscription_id} failed: {cause}"
        )
