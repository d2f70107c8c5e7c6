"""
Subscription registry keyed by identity.

The registry only stores instances and hands out locks; all lifecycle
decisions are made by the manager. Operations on one identity are
serialized with that identity's lock, while different identities proceed
independently.

Example:
    >>> registry = SubscriptionRegistry()
    >>> async with registry.lock_for("stream.online.61369223"):
    ...     registry.put(instance)
    >>> registry.get("stream.online.61369223")
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterator

from helixsub.eventsub.subscription import SubscriptionInstance, SubscriptionStatus


class SubscriptionRegistry:
    """
    Registry of subscription instances and their per-identity locks.

    At most one instance is stored per identity. The remote subscription id
    index lets socket messages, which only carry the remote id, be routed to
    their instance.
    """

    def __init__(self) -> None:
        self._instances: dict[str, SubscriptionInstance] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._remote_ids: dict[str, str] = {}

    def lock_for(self, identity: str) -> asyncio.Lock:
        """
        Get the lock serializing operations on an identity, creating it.

        Only registration creates locks; every other operation uses
        ``existing_lock_for`` so unknown identities never gain an entry.
        """
        lock = self._locks.get(identity)
        if lock is None:
            lock = self._locks[identity] = asyncio.Lock()
        return lock

    def existing_lock_for(self, identity: str) -> asyncio.Lock | None:
        """Get the lock of an identity that has an instance, or None."""
        if identity not in self._instances:
            return None
        return self.lock_for(identity)

    def get(self, identity: str) -> SubscriptionInstance | None:
        return self._instances.get(identity)

    def put(self, instance: SubscriptionInstance) -> None:
        """
        Store an instance, replacing any previous one for its identity.

        The caller must hold the identity's lock.
        """
        previous = self._instances.get(instance.identity)
        if previous is not None and previous.remote_subscription_id:
            self._remote_ids.pop(previous.remote_subscription_id, None)

        self._instances[instance.identity] = instance
        if instance.remote_subscription_id:
            self._remote_ids[instance.remote_subscription_id] = instance.identity

    def bind_remote_id(self, instance: SubscriptionInstance, remote_subscription_id: str) -> None:
        """Record the remote id assigned to an instance."""
        instance.remote_subscription_id = remote_subscription_id
        self._remote_ids[remote_subscription_id] = instance.identity

    def identity_for_remote_id(self, remote_subscription_id: str) -> str | None:
        """Look up the identity owning a remote subscription id."""
        return self._remote_ids.get(remote_subscription_id)

    def get_statuses(self) -> dict[str, SubscriptionStatus]:
        """
        Get status snapshots of all instances.

        Returns:
            Dictionary of identity to SubscriptionStatus
        """
        return {identity: instance.get_status() for identity, instance in self._instances.items()}

    def __iter__(self) -> Iterator[SubscriptionInstance]:
        return iter(list(self._instances.values()))


__all__ = ["SubscriptionRegistry"]
