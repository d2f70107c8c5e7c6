"""Immutable description of a push subscription before it is registered."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from helixsub.eventsub.kinds import KindSpec, SubscriptionKind, get_kind_spec
from helixsub.exceptions import ConfigError
from helixsub.types import extract_user_id

# Identity segments are joined with "." and used as a URL path segment
_FORBIDDEN_CHARACTERS = frozenset("./?#")


@dataclass(frozen=True)
class SubscriptionDescriptor:
    """
    A subscription kind plus the parameters that define it.

    Parameters set to None are treated as absent. The identity and the
    required scope are derived from the kind and parameters.

    Attributes:
        kind: The subscription kind
        params: Parameter values keyed by name

    Example:
        >>> descriptor = SubscriptionDescriptor.create(
        ...     SubscriptionKind.CHANNEL_REDEMPTION_ADD,
        ...     user_id="61369223",
        ... )
        >>> descriptor.identity
        'channel.channel_points_custom_reward_redemption.add.61369223'
        >>> descriptor.scope
        'channel:read:redemptions'

    Raises:
        ConfigError: If a required parameter is missing, a parameter is
            unknown for the kind, or a value cannot be used in an identity
    """

    kind: SubscriptionKind
    params: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        spec = get_kind_spec(self.kind)
        cleaned = {name: value for name, value in self.params.items() if value is not None}

        unknown = set(cleaned) - set(spec.parameters)
        if unknown:
            raise ConfigError(
                f"Unknown parameters for {self.kind.value}: {sorted(unknown)}. "
                f"Accepted: {list(spec.parameters)}"
            )

        missing = [name for name in spec.required if name not in cleaned]
        if missing:
            raise ConfigError(f"Missing parameters for {self.kind.value}: {missing}")

        for name, value in cleaned.items():
            if not isinstance(value, str) or not value:
                raise ConfigError(f"Parameter {name} must be a non-empty string, got {value!r}")
            if _FORBIDDEN_CHARACTERS & set(value):
                raise ConfigError(f"Parameter {name} contains a reserved character: {value!r}")

        object.__setattr__(self, "params", cleaned)

    @classmethod
    def create(cls, kind: SubscriptionKind, **params: Any) -> SubscriptionDescriptor:
        """
        Build a descriptor from keyword parameters.

        Values may be user ids, numeric ids or user-like objects; None
        means absent.
        """
        return cls(
            kind=kind,
            params={
                name: None if value is None else extract_user_id(value)
                for name, value in params.items()
            },
        )

    @property
    def spec(self) -> KindSpec:
        return get_kind_spec(self.kind)

    @property
    def identity(self) -> str:
        """Deterministic identity derived from kind and parameters."""
        return self.spec.identity_for(self.params)

    @property
    def scope(self) -> str | None:
        """Permission scope required to create the subscription."""
        return self.spec.scope

    def __hash__(self) -> int:
        return hash(self.identity)


__all__ = ["SubscriptionDescriptor"]
