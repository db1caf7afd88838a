"""Relay handler facade and its configuration."""

from .configs import HandlerConfig
from .service import HandlerResult, RelayHandler


__all__ = [
    "HandlerConfig",
    "HandlerResult",
    "RelayHandler",
]
