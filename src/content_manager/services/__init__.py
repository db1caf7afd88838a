"""Service layer: the caller-facing relay handler.

Attributes:
    RelayHandler: Facade used by the GUI and CLI. Returns
        [HandlerResult][content_manager.services.handler.HandlerResult] values
        instead of raising.
    HandlerConfig: Pydantic settings for the handler.
"""

from .handler import HandlerConfig, HandlerResult, RelayHandler


__all__ = [
    "HandlerConfig",
    "HandlerResult",
    "RelayHandler",
]
