"""
Result page decoding.

A paginated endpoint answers with a JSON object of the form::

    {
        "data": [...],
        "pagination": {"cursor": "eyJiIjpudWxs..."},
        "total": 42
    }

``pagination`` may be empty (or missing) on the last page and ``total`` is
only reported by total-aware endpoints.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Annotated, Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError

from helixsub.exceptions import DecodeError

if TYPE_CHECKING:
    from helixsub.gateway.interface import ApiGateway

T = TypeVar("T")

EntityMapper = Callable[[Any, "ApiGateway"], T]
"""Turns one raw item into a domain entity (e.g., ``HelixEntity.from_data``)."""


class PaginationInfo(BaseModel):
    model_config = ConfigDict(extra="ignore")

    cursor: StrictStr | None = None


class PageEnvelope(BaseModel):
    """Raw shape of a paginated response body."""

    model_config = ConfigDict(extra="ignore")

    data: list[Any] | None = None
    pagination: PaginationInfo | None = None
    total: Annotated[int, Field(ge=0, strict=True)] | None = None


@dataclass(frozen=True)
class Page(Generic[T]):
    """
    One decoded page of a paginated collection.

    Attributes:
        items: Decoded entities in the order the server sent them
        cursor: Continuation cursor, or None if this is the last page
        total: Server-reported size of the whole collection, if reported
    """

    items: Sequence[T]
    cursor: str | None = None
    total: int | None = None

    @property
    def is_last(self) -> bool:
        """True if no further page should be requested after this one."""
        return self.cursor is None or len(self.items) == 0

    def __len__(self) -> int:
        return len(self.items)


def decode_page(
    body: Any,
    mapper: EntityMapper[T],
    gateway: ApiGateway,
) -> Page[T]:
    """
    Decode one raw page response.

    Args:
        body: Decoded JSON body returned by the gateway
        mapper: Callable turning each raw item into an entity
        gateway: Gateway handed to the mapper for entity back-references

    Returns:
        The decoded page

    Raises:
        DecodeError: If the body is not a page, the cursor is not a string
            or the total is invalid
    """
    try:
        envelope = PageEnvelope.model_validate(body)
    except ValidationError as e:
        raise DecodeError("page", str(e), body) from e

    # An empty string cursor means the same as no cursor
    cursor = envelope.pagination.cursor if envelope.pagination else None

    return Page(
        items=[mapper(item, gateway) for item in envelope.data or []],
        cursor=cursor or None,
        total=envelope.total,
    )


__all__ = [
    "EntityMapper",
    "Page",
    "PageEnvelope",
    "decode_page",
]
