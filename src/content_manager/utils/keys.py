"""Nostr key normalization and derivation.

Turns whatever private-key text the user supplied (``nsec1...`` bech32 or
64-character hex) into a ``nostr_sdk.SecretKey`` plus the derived x-only
public key. Derivation is pure and deterministic and is performed on every
call: nothing here caches or persists key material.

Warning:
    Private keys must **never** be logged, written to configuration files or
    kept on long-lived objects. Callers should re-derive from the supplied
    text for each signing operation and let the result go out of scope.

Examples:
    ```python
    pair = derive_key_pair("nsec1vl029mgpspedva04g90vltkh6fvh240zqtv9k0t9af8935ke9laqsnlfe5")
    pair.pubkey  # 64-char hex
    ```
"""

from __future__ import annotations

import os
import string
from typing import NamedTuple

from nostr_sdk import Keys, NostrSdkError, SecretKey

from content_manager.core.exceptions import ConfigurationError, InvalidKeyEncodingError


NSEC_PREFIX = "nsec"
SECRET_KEY_HEX_LENGTH = 64
ENV_PRIVATE_KEY = "NOSTR_PRIVATE_KEY"  # pragma: allowlist secret

_HEX_DIGITS = frozenset(string.hexdigits)


class KeyPair(NamedTuple):
    """Secret scalar and derived public key for a single operation.

    Attributes:
        secret: The validated secp256k1 secret key.
        pubkey: x-only public key as 64 lowercase hex characters.
    """

    secret: SecretKey
    pubkey: str


def _parse_secret(text: str) -> SecretKey:
    if text.lower().startswith(NSEC_PREFIX):
        # bech32 allows all-uppercase but not mixed case.
        try:
            return SecretKey.parse(text.lower() if text.isupper() else text)
        except NostrSdkError:
            raise InvalidKeyEncodingError("Invalid nsec private key: bech32 decoding failed") from None

    if len(text) != SECRET_KEY_HEX_LENGTH or not set(text) <= _HEX_DIGITS:
        raise InvalidKeyEncodingError(
            "Invalid private key format: expected nsec or a 64-character hex string"
        )
    try:
        return SecretKey.parse(text.lower())
    except NostrSdkError:
        raise InvalidKeyEncodingError(
            "Invalid private key: not a valid secp256k1 secret scalar"
        ) from None


def derive_key_pair(raw_private_key: str) -> KeyPair:
    """Normalize *raw_private_key* and derive its public key.

    Surrounding whitespace is ignored. Input starting with ``nsec`` (in either case) is
    bech32-decoded; anything else is treated as a hex secret scalar.

    Raises:
        InvalidKeyEncodingError: If the input is empty, cannot be decoded,
            or is not a valid scalar for secp256k1.
    """
    if not isinstance(raw_private_key, str):
        raise InvalidKeyEncodingError("Private key must be a string")
    text = raw_private_key.strip()
    if not text:
        raise InvalidKeyEncodingError("Private key must not be empty")

    secret = _parse_secret(text)
    pubkey = Keys(secret).public_key().to_hex()
    return KeyPair(secret=secret, pubkey=pubkey)


def derive_public_key(raw_private_key: str) -> str:
    """Return the hex public key for *raw_private_key*.

    See [derive_key_pair()][content_manager.utils.keys.derive_key_pair] for
    accepted formats and errors.
    """
    return derive_key_pair(raw_private_key).pubkey


def generate_key_pair() -> tuple[str, str]:
    """Generate a fresh random key pair as ``(nsec, npub)`` bech32 strings."""
    keys = Keys.generate()
    return keys.secret_key().to_bech32(), keys.public_key().to_bech32()


def load_private_key_from_env(env_var: str = ENV_PRIVATE_KEY) -> str:
    """Read raw private-key text from an environment variable.

    The text is returned as-is so that it can be passed straight to
    [derive_key_pair()][content_manager.utils.keys.derive_key_pair] for each
    operation.

    Raises:
        ConfigurationError: If the variable is unset or blank.
    """
    value = os.getenv(env_var)
    if not value or not value.strip():
        raise ConfigurationError(
            f"{env_var} environment variable is required (nsec1... or 64-char hex)"
        )
    return value
