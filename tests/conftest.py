"""
Shared pytest fixtures for the helixsub library tests.

This module provides:
- Gateway fixtures (gateway, created_subscription)
- Push subscription fixtures (webhook_config, socket_config, manager)
- Tracing fixtures (mock_tracer)
- Sample payload fixtures (stream_online_payload, redemption_payload)
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from helixsub.eventsub import (
    EventSubConfig,
    SubscriptionDescriptor,
    SubscriptionKind,
    SubscriptionLifecycleManager,
)
from helixsub.observability import MockTracer
from helixsub.testing import InMemoryGateway

BROADCASTER_ID = "61369223"
WEBHOOK_SECRET = "thisShouldBeARandomlyGeneratedFixedString"
CALLBACK_BASE_URL = "https://example.com/hooks"


# ============================================================================
# Gateway Fixtures
# ============================================================================


@pytest.fixture
def gateway() -> InMemoryGateway:
    """Fresh scripted gateway."""
    return InMemoryGateway()


@pytest.fixture
def created_subscription() -> Callable[..., dict[str, Any]]:
    """Factory for the response body of a subscription create call."""

    def factory(
        remote_id: str = "sub-1",
        event_type: str = "stream.online",
        status: str = "webhook_callback_verification_pending",
    ) -> dict[str, Any]:
        return {
            "data": [
                {
                    "id": remote_id,
                    "status": status,
                    "type": event_type,
                    "version": "1",
                    "condition": {"broadcaster_user_id": BROADCASTER_ID},
                    "created_at": "2024-01-01T00:00:00Z",
                    "transport": {"method": "webhook", "callback": CALLBACK_BASE_URL},
                    "cost": 1,
                }
            ],
            "total": 1,
            "total_cost": 1,
            "max_total_cost": 10000,
        }

    return factory


# ============================================================================
# Push Subscription Fixtures
# ============================================================================


@pytest.fixture
def webhook_config() -> EventSubConfig:
    """Webhook transport configuration."""
    return EventSubConfig(callback_base_url=CALLBACK_BASE_URL, secret=WEBHOOK_SECRET)


@pytest.fixture
def socket_config() -> EventSubConfig:
    """Socket session transport configuration."""
    return EventSubConfig(session_id="AQoQexAWVYKSTIu4ec_2VAxyuhAB")


@pytest.fixture
def mock_tracer() -> MockTracer:
    """Tracer recording span names and attributes."""
    return MockTracer()


@pytest.fixture
def manager(
    gateway: InMemoryGateway,
    webhook_config: EventSubConfig,
    mock_tracer: MockTracer,
) -> SubscriptionLifecycleManager:
    """Lifecycle manager on the scripted gateway with webhook transport."""
    return SubscriptionLifecycleManager(gateway, webhook_config, tracer=mock_tracer)


@pytest.fixture
def stream_online() -> SubscriptionDescriptor:
    """Descriptor for stream.online of the test broadcaster."""
    return SubscriptionDescriptor.create(SubscriptionKind.STREAM_ONLINE, user_id=BROADCASTER_ID)


# ============================================================================
# Sample Payload Fixtures
# ============================================================================


@pytest.fixture
def stream_online_payload() -> dict[str, Any]:
    """Raw stream.online event."""
    return {
        "id": "9001",
        "broadcaster_user_id": BROADCASTER_ID,
        "broadcaster_user_login": "testbroadcaster",
        "broadcaster_user_name": "TestBroadcaster",
        "type": "live",
        "started_at": "2020-10-11T10:11:12.123Z",
    }


@pytest.fixture
def redemption_payload() -> dict[str, Any]:
    """Raw channel points redemption event."""
    return {
        "id": "17fa2df1-ad76-4804-bfa5-a40ef63efe63",
        "broadcaster_user_id": BROADCASTER_ID,
        "broadcaster_user_login": "testbroadcaster",
        "broadcaster_user_name": "TestBroadcaster",
        "user_id": "1234",
        "user_login": "cooluser",
        "user_name": "CoolUser",
        "user_input": "pogchamp",
        "status": "unfulfilled",
        "reward": {
            "id": "92af127c-7326-4483-a52b-b0da0be61c01",
            "title": "title",
            "cost": 100,
            "prompt": "reward prompt",
        },
        "redeemed_at": "2020-07-15T17:16:03.17106713Z",
    }
