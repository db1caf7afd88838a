"""
Relay URL validation.

Relay URLs are stored and compared exactly as the user typed them (after
trimming surrounding whitespace): the saved relay list uses case-sensitive
string equality, so no normalization is applied here. Validation only
checks the RFC 3986 structure and the WebSocket scheme.
"""

from __future__ import annotations

from rfc3986 import uri_reference
from rfc3986.exceptions import UnpermittedComponentError, ValidationError
from rfc3986.validators import Validator


SECURE_SCHEMES: tuple[str, ...] = ("wss",)
WEBSOCKET_SCHEMES: tuple[str, ...] = ("ws", "wss")


def validate_relay_url(raw: str, *, schemes: tuple[str, ...] = WEBSOCKET_SCHEMES) -> str:
    """Validate a relay URL and return it trimmed.

    Args:
        raw: URL as entered, e.g. ``"wss://relay.example.com"``.
        schemes: Accepted schemes. Saved relays require ``wss``; the
            transport also accepts plain ``ws`` for local relays.

    Returns:
        The trimmed URL, otherwise unchanged.

    Raises:
        ValueError: If the URL is empty, contains null bytes, uses another
            scheme, lacks a host, or carries a query string or fragment.
    """
    if not isinstance(raw, str):
        raise ValueError(f"Relay URL must be a string, got {type(raw).__name__}")
    url = raw.strip()
    if not url:
        raise ValueError("Relay URL must not be empty")
    if "\x00" in url:
        raise ValueError("Relay URL contains null bytes")

    uri = uri_reference(url)
    validator = (
        Validator()
        .require_presence_of("scheme", "host")
        .allow_schemes(*schemes)
        .check_validity_of("scheme", "host", "port", "path")
    )

    try:
        validator.validate(uri)
    except UnpermittedComponentError:
        allowed = " or ".join(f"{s}://" for s in schemes)
        raise ValueError(f"Relay URL must start with {allowed}: {url}") from None
    except ValidationError as e:
        raise ValueError(f"Invalid relay URL {url}: {e}") from None

    if not uri.host:
        raise ValueError(f"Relay URL must include a host: {url}")
    if uri.query:
        raise ValueError(f"Relay URL must not contain a query string: ?{uri.query}")
    if uri.fragment:
        raise ValueError(f"Relay URL must not contain a fragment: #{uri.fragment}")

    return url
