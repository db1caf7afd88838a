"""Key handling and relay transport.

Attributes:
    keys: Private-key normalization (``nsec`` or hex) and public-key
        derivation via nostr-sdk. See
        [derive_key_pair()][content_manager.utils.keys.derive_key_pair].
    transport: aiohttp WebSocket session to one relay with bulk collection
        and acknowledged publishing. See
        [RelayConnection][content_manager.utils.transport.RelayConnection].
"""

from .keys import (
    KeyPair,
    derive_key_pair,
    derive_public_key,
    generate_key_pair,
    load_private_key_from_env,
)
from .transport import DEFAULT_TIMEOUT, RelayConnection


__all__ = [
    "DEFAULT_TIMEOUT",
    "KeyPair",
    "RelayConnection",
    "derive_key_pair",
    "derive_public_key",
    "generate_key_pair",
    "load_private_key_from_env",
]
