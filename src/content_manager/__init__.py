r"""content-manager -- Nostr relay client for publishing and querying notes.

Connects to a single relay at a time, collects events that match a set of
filters within a fixed time window, and builds, signs, verifies and
publishes kind-1 text notes from a caller-supplied private key.

Architecture follows a **diamond DAG** dependency structure where imports
flow strictly downward:

```text
              services         RelayHandler facade used by the GUI / CLI
             /   |   \
          core  nips  utils    Exceptions, logging, relay list / NIP-01 / keys, transport
             \   |   /
              models           Frozen dataclasses: Event, Filter, relay URLs
```

Attributes:
    models: Frozen dataclasses and the lenient filter boundary.
    core: Exceptions, structured logging, YAML loading, relay list store.
    nips: NIP-01 canonical serialization, signing and wire frames.
    utils: Key derivation and the WebSocket relay connection.
    services: The [RelayHandler][content_manager.services.handler.RelayHandler]
        facade.

Note:
    Top-level imports (``from content_manager import RelayHandler``) use lazy
    loading and resolve on first access.
"""

import importlib
from importlib.metadata import version as _get_version


__version__ = _get_version("content-manager")

__all__ = [
    "ContentManagerError",
    "Event",
    "Filter",
    "FilterSpec",
    "HandlerConfig",
    "HandlerResult",
    "Logger",
    "RelayConnection",
    "RelayHandler",
    "RelayListStore",
]

_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    "ContentManagerError": ("content_manager.core", "ContentManagerError"),
    "Logger": ("content_manager.core", "Logger"),
    "RelayListStore": ("content_manager.core", "RelayListStore"),
    "Event": ("content_manager.models", "Event"),
    "Filter": ("content_manager.models", "Filter"),
    "FilterSpec": ("content_manager.models", "FilterSpec"),
    "RelayConnection": ("content_manager.utils", "RelayConnection"),
    "HandlerConfig": ("content_manager.services", "HandlerConfig"),
    "HandlerResult": ("content_manager.services", "HandlerResult"),
    "RelayHandler": ("content_manager.services", "RelayHandler"),
}


def __getattr__(name: str) -> object:
    if name in _LAZY_IMPORTS:
        module_path, attr_name = _LAZY_IMPORTS[name]
        module = importlib.import_module(module_path)
        value = getattr(module, attr_name)
        globals()[name] = value  # Cache for subsequent access
        return value
    raise AttributeError(f"module 'content_manager' has no attribute {name!r}")


def __dir__() -> list[str]:
    return __all__
