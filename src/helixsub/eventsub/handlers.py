"""
Handler adapter for push event handlers.

Handlers may be given in any of these forms:
- Objects with an async handle() method
- Objects with a sync handle() method
- Async callables
- Sync callables

All of them are normalized to one async interface so the lifecycle manager
can dispatch without runtime type checks.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from helixsub.eventsub.events import EventSubEvent

AsyncHandlerFunc = Callable[["EventSubEvent"], Awaitable[None]]


@runtime_checkable
class EventHandler(Protocol):
    """Object that handles push events."""

    def handle(self, event: EventSubEvent) -> Any: ...


def get_handler_name(handler: Any) -> str:
    """
    Get a descriptive name for a handler for logging.

    Args:
        handler: Any handler object (class instance, function, lambda)

    Returns:
        String name for the handler
    """
    if hasattr(handler, "__class__") and handler.__class__.__name__ not in (
        "function",
        "method",
    ):
        return str(handler.__class__.__name__)
    elif hasattr(handler, "__name__"):
        return str(handler.__name__)
    else:
        return repr(handler)


class HandlerAdapter:
    """
    Adapter that normalizes push event handlers to an async interface.

    Example:
        >>> async def on_redemption(event: ChannelRedemptionAddEvent) -> None:
        ...     await event.update_status(RedemptionStatus.FULFILLED)
        >>> adapter = HandlerAdapter(on_redemption)
        >>> await adapter.handle(event)

    Attributes:
        original: The original unwrapped handler
        name: Descriptive name for logging
    """

    def __init__(self, handler: Any) -> None:
        """
        Initialize the adapter with a handler.

        Args:
            handler: Object with handle() method or callable

        Raises:
            TypeError: If handler doesn't have handle() method and isn't callable
        """
        self._original = handler
        self._name = get_handler_name(handler)
        self._async_handler = self._normalize(handler)

    def _normalize(self, handler: Any) -> AsyncHandlerFunc:
        if isinstance(handler, EventHandler):
            target = handler.handle
        elif callable(handler):
            target = handler
        else:
            raise TypeError(
                f"Handler must have a handle() method or be callable, got {type(handler)}"
            )

        if asyncio.iscoroutinefunction(target):
            return target  # type: ignore[no-any-return]

        async def async_wrapper(event: EventSubEvent) -> None:
            result = target(event)
            # Sync callables may still hand back a coroutine
            if asyncio.iscoroutine(result):
                await result

        return async_wrapper

    @property
    def original(self) -> Any:
        """Get the original unwrapped handler."""
        return self._original

    @property
    def name(self) -> str:
        return self._name

    async def handle(self, event: EventSubEvent) -> None:
        """Handle an event using the normalized async handler."""
        await self._async_handler(event)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, HandlerAdapter):
            return self._original is other._original
        return self._original is other

    def __hash__(self) -> int:
        return id(self._original)

    def __repr__(self) -> str:
        return f"HandlerAdapter({self._name})"


__all__ = [
    "EventHandler",
    "HandlerAdapter",
    "AsyncHandlerFunc",
    "get_handler_name",
]
