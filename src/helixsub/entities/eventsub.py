"""Typed entity for remote push subscriptions."""

from typing import Any

from helixsub.entities.base import HelixEntity, Timestamp


class EventSubSubscription(HelixEntity):
    """
    A push subscription as registered with the remote service.

    Attributes:
        id: Identifier assigned by the remote service
        status: Remote status (e.g., "enabled",
            "webhook_callback_verification_pending", "authorization_revoked")
        type: Remote event type (e.g., "channel.follow")
        version: Event type version
        condition: Condition the subscription was created with
        created_at: Creation time
        transport: Transport as echoed back by the remote service
        cost: Cost counted against the client's subscription budget
    """

    id: str
    status: str
    type: str
    version: str
    condition: dict[str, str]
    created_at: Timestamp
    transport: dict[str, Any]
    cost: int = 0

    @property
    def is_enabled(self) -> bool:
        return self.status == "enabled"

    async def delete(self) -> None:
        """Delete this subscription remotely."""
        from helixsub.api.eventsub import EventSubApi

        await EventSubApi(self.gateway).delete_subscription(self.id)


__all__ = ["EventSubSubscription"]
