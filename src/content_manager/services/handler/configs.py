"""Configuration model for the [RelayHandler][content_manager.services.handler.RelayHandler].

Examples:
    ```yaml
    relays_path: ~/.config/content-manager/relays.json
    default_relay: wss://ammetronics.com
    collect_window: 2.0
    connect_timeout: 10.0
    publish_timeout: 10.0
    ```
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from content_manager.models.constants import (
    DEFAULT_COLLECT_WINDOW,
    DEFAULT_RELAY_URL,
    DEFAULT_RELAYS_PATH,
)
from content_manager.models.relay import SECURE_SCHEMES, validate_relay_url


class HandlerConfig(BaseModel):
    """Settings for relay persistence and network timeouts.

    Attributes:
        relays_path: JSON file holding the saved relay list. ``~`` is
            expanded.
        default_relay: Relay seeded into the list on first run.
        collect_window: Seconds each subscription collects events.
        connect_timeout: Seconds allowed for the WebSocket handshake.
        publish_timeout: Seconds to wait for the relay's ``OK``.
    """

    relays_path: Path = Field(default=Path(DEFAULT_RELAYS_PATH))
    default_relay: str = Field(default=DEFAULT_RELAY_URL)
    collect_window: float = Field(default=DEFAULT_COLLECT_WINDOW, ge=0.0, le=60.0)
    connect_timeout: float = Field(default=10.0, gt=0.0, le=120.0)
    publish_timeout: float = Field(default=10.0, gt=0.0, le=120.0)

    @field_validator("relays_path", mode="after")
    @classmethod
    def _expand_user(cls, value: Path) -> Path:
        return value.expanduser()

    @field_validator("default_relay")
    @classmethod
    def _secure_relay(cls, value: str) -> str:
        return validate_relay_url(value, schemes=SECURE_SCHEMES)
