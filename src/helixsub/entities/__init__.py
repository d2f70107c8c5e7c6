"""Typed API entities."""

from helixsub.entities.base import HelixEntity
from helixsub.entities.eventsub import EventSubSubscription
from helixsub.entities.subscriptions import (
    HelixSubscription,
    HelixSubscriptionEvent,
    HelixSubscriptionEventData,
    HelixUserSubscription,
)

__all__ = [
    "HelixEntity",
    "EventSubSubscription",
    "HelixSubscription",
    "HelixSubscriptionEvent",
    "HelixSubscriptionEventData",
    "HelixUserSubscription",
]
