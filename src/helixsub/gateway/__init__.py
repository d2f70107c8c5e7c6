"""Gateway protocol consumed by every remote call in helixsub."""

from helixsub.gateway.interface import ApiGateway

__all__ = ["ApiGateway"]
