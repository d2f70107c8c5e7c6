"""Common type definitions for the helixsub library."""

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, TypeVar, runtime_checkable

# Opaque continuation token returned by paginated endpoints
Cursor = str

# Derived identity of a push subscription
SubscriptionIdentity = str

UserId = str

# Raw JSON object as decoded by the gateway
RawData = Mapping[str, Any]

# Query parameter values; sequences are sent as repeated parameters
QueryValue = str | int | bool | Sequence[str] | None
Query = Mapping[str, QueryValue]

TEntity = TypeVar("TEntity")


@runtime_checkable
class HasUserId(Protocol):
    """Any object that carries a user id (users, broadcasters, ...)."""

    @property
    def id(self) -> str: ...


UserIdResolvable = str | int | HasUserId


def extract_user_id(user: UserIdResolvable) -> UserId:
    """
    Get the user id out of a user id, numeric id, or user-like object.

    Args:
        user: A user id string, numeric id, or an object with an ``id``

    Returns:
        The user id as a string
    """
    if isinstance(user, str):
        return user
    if isinstance(user, int):
        return str(user)
    return str(user.id)
