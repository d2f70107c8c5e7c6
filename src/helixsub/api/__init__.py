"""Endpoint wrappers built on the gateway and the pagination engine."""

from helixsub.api.base import BaseApi, absent_on_not_found
from helixsub.api.eventsub import EventSubApi
from helixsub.api.subscriptions import SubscriptionApi

__all__ = [
    "BaseApi",
    "absent_on_not_found",
    "EventSubApi",
    "SubscriptionApi",
]
