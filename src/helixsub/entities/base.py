"""
Base class for typed API entities.

Entities are immutable pydantic models of one raw JSON item. Each keeps a
non-owning reference to the gateway it was fetched through, so entity
methods can make follow-up calls.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import TYPE_CHECKING, Annotated, Any, Self

from pydantic import BaseModel, BeforeValidator, ConfigDict, PrivateAttr, ValidationError

from helixsub.exceptions import DecodeError

if TYPE_CHECKING:
    from helixsub.gateway.interface import ApiGateway
    from helixsub.types import RawData

# Fractional seconds beyond microseconds
_EXCESS_FRACTION = re.compile(r"(\.\d{6})\d+")


def normalize_timestamp(value: Any) -> Any:
    """
    Drop sub-microsecond digits from an ISO 8601 timestamp string.

    The remote service sends timestamps with up to nanosecond precision.
    """
    if isinstance(value, str):
        return _EXCESS_FRACTION.sub(r"\1", value)
    return value


Timestamp = Annotated[datetime, BeforeValidator(normalize_timestamp)]


class HelixEntity(BaseModel):
    """
    Base class for all decoded API entities.

    Unknown fields in the raw data are ignored so that the remote service
    can add fields without breaking decoding.

    Example:
        >>> class Channel(HelixEntity):
        ...     broadcaster_id: str
        ...     title: str
        >>>
        >>> channel = Channel.from_data({"broadcaster_id": "1", "title": "Hi"}, gateway)
        >>> channel.gateway is gateway
        True
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    _gateway: Any = PrivateAttr(default=None)

    @classmethod
    def from_data(cls, data: RawData, gateway: ApiGateway) -> Self:
        """
        Decode one raw item.

        Args:
            data: Raw JSON object
            gateway: Gateway used for follow-up calls from the entity

        Returns:
            The decoded entity

        Raises:
            DecodeError: If the data does not match the entity's fields
        """
        try:
            entity = cls.model_validate(data)
        except ValidationError as e:
            raise DecodeError(cls.__name__, str(e), payload=data) from e
        entity._gateway = gateway
        return entity

    @property
    def gateway(self) -> ApiGateway:
        """Gateway this entity was fetched through."""
        if self._gateway is None:
            raise RuntimeError(f"{type(self).__name__} is not bound to a gateway")
        return self._gateway  # type: ignore[no-any-return]


__all__ = ["HelixEntity", "Timestamp", "normalize_timestamp"]
