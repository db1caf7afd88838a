"""Core layer: exceptions, logging, configuration loading and persistence.

Sits in the middle of the diamond DAG -- depends only on
``content_manager.models`` and is depended upon by ``nips``, ``utils`` and
``services``.

Attributes:
    ContentManagerError: Root of the exception hierarchy. See
        [content_manager.core.exceptions][].
    Logger: Structured logger supporting key=value and JSON output modes.
        See [Logger][content_manager.core.logger.Logger].
    RelayListStore: JSON-backed ordered set of saved relay URLs. See
        [RelayListStore][content_manager.core.relay_store.RelayListStore].
    load_yaml: Safe YAML loading. See
        [load_yaml()][content_manager.core.yaml.load_yaml].
"""

from .exceptions import (
    ConfigurationError,
    ConnectivityError,
    ContentManagerError,
    InvalidKeyEncodingError,
    InvalidRelayUrlError,
    NotConnectedError,
    PublishingError,
    RelayConnectionError,
    SigningError,
    VerificationFaultError,
)
from .logger import Logger, StructuredFormatter, format_kv_pairs
from .relay_store import RelayListStore
from .yaml import load_yaml


__all__ = [
    "ConfigurationError",
    "ConnectivityError",
    "ContentManagerError",
    "InvalidKeyEncodingError",
    "InvalidRelayUrlError",
    "Logger",
    "NotConnectedError",
    "PublishingError",
    "RelayConnectionError",
    "RelayListStore",
    "SigningError",
    "StructuredFormatter",
    "VerificationFaultError",
    "format_kv_pairs",
    "load_yaml",
]
