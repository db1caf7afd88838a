"""content-manager exception hierarchy.

Provides typed exceptions for every failure the relay client can report.
Lower layers raise them; the
[RelayHandler][content_manager.services.handler.RelayHandler] facade converts
them into [HandlerResult][content_manager.services.handler.HandlerResult]
values so that no exception crosses into the GUI or CLI.

Exception hierarchy:

```text
ContentManagerError (base -- raised directly only to wrap unexpected faults)
├── ConfigurationError         -- config validation, bad YAML, relay list file
│   └── InvalidRelayUrlError   -- relay URL rejected before saving
├── InvalidKeyEncodingError    -- private key is neither valid nsec nor hex
├── ConnectivityError          -- relay session problems
│   ├── RelayConnectionError   -- connect failed or transport dropped
│   └── NotConnectedError      -- operation attempted without a live session
├── PublishingError            -- relay rejected the event or transport failed
├── SigningError               -- secret could not sign the event id
└── VerificationFaultError     -- locally signed event failed verification
```

See Also:
    [RelayConnection][content_manager.utils.transport.RelayConnection]:
        Raises the connectivity and publishing errors.
    [derive_key_pair()][content_manager.utils.keys.derive_key_pair]: Raises
        [InvalidKeyEncodingError][content_manager.core.exceptions.InvalidKeyEncodingError].
"""

from __future__ import annotations


class ContentManagerError(Exception):
    """Base exception for all content-manager errors.

    See Also:
        [ConfigurationError][content_manager.core.exceptions.ConfigurationError],
        [ConnectivityError][content_manager.core.exceptions.ConnectivityError],
        [PublishingError][content_manager.core.exceptions.PublishingError]:
            The main branches of the tree.
    """


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ConfigurationError(ContentManagerError):
    """Invalid or missing configuration (YAML, env vars, relay list file)."""


class InvalidRelayUrlError(ConfigurationError):
    """A relay URL failed validation and was not saved."""


# ---------------------------------------------------------------------------
# Keys and signing
# ---------------------------------------------------------------------------


class InvalidKeyEncodingError(ContentManagerError):
    """The private key is neither a decodable ``nsec`` nor a valid hex scalar.

    This is a user input error: the message is safe to show verbatim and
    never contains the key itself.
    """


class SigningError(ContentManagerError):
    """The secret scalar could not produce a signature over the event id."""


class VerificationFaultError(ContentManagerError):
    """A locally built and signed event failed its own verification.

    Indicates a defect (id or signature mismatch right after signing), not a
    user error. Fatal to the publish call that raised it.
    """


# ---------------------------------------------------------------------------
# Connectivity
# ---------------------------------------------------------------------------


class ConnectivityError(ContentManagerError):
    """Base for relay session errors."""


class RelayConnectionError(ConnectivityError):
    """The relay could not be reached or the transport dropped mid-operation."""


class NotConnectedError(ConnectivityError):
    """A network operation was attempted while no session is connected."""


# ---------------------------------------------------------------------------
# Publishing
# ---------------------------------------------------------------------------


class PublishingError(ContentManagerError):
    """The relay rejected the event, never acknowledged it, or the send failed."""
