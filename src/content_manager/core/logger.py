"""
Structured logging with key=value and JSON output support.

Wraps the standard library ``logging`` module so that handler operations
log an event name plus keyword fields, e.g.
``relay_connected url=wss://relay.example.com``. Two output formats are
supported: human-readable key=value pairs (default) and one JSON object per
line for machine consumption.

The ``StructuredFormatter`` reads the ``structured_kv`` extra field attached
by ``Logger`` and appends it to the message. Installed on the root handler
by the CLI, it unifies ``Logger`` output with the plain
``logging.getLogger(__name__)`` calls used by the transport and codec
modules.

Warning:
    Never pass private keys (hex or ``nsec``) as log fields.

Examples:
    ```python
    from content_manager.core.logger import Logger

    logger = Logger("relay_handler")
    logger.info("note_published", event_id="ab12...", url="wss://relay.example.com")
    # Output: note_published event_id=ab12... url=wss://relay.example.com
    ```
"""

from __future__ import annotations

import datetime
import json
import logging
from typing import Any, ClassVar


def _truncate(value: str, max_value_length: int | None) -> str:
    if max_value_length and len(value) > max_value_length:
        return value[:max_value_length] + f"...<truncated {len(value) - max_value_length} chars>"
    return value


def format_kv_pairs(
    kwargs: dict[str, Any],
    max_value_length: int | None = 1000,
    prefix: str = " ",
) -> str:
    """Format a dictionary as space-separated key=value pairs.

    Values longer than ``max_value_length`` are truncated. Values that are
    empty or contain whitespace, ``=`` or quotes are escaped and wrapped in
    double quotes so the line stays machine-splittable.

    Args:
        kwargs: Key-value pairs to format.
        max_value_length: Maximum characters per value. ``None`` disables
            truncation.
        prefix: String prepended to a non-empty result.

    Returns:
        Formatted string such as ``' url=wss://a.example kinds="[1, 7]"'``,
        or an empty string when ``kwargs`` is empty.
    """
    if not kwargs:
        return ""

    parts = []
    for key, value in kwargs.items():
        text = _truncate(str(value), max_value_length)
        if not text or any(ch in text for ch in (" ", "=", '"', "'")):
            escaped = text.replace("\\", "\\\\").replace('"', '\\"')
            parts.append(f'{key}="{escaped}"')
        else:
            parts.append(f"{key}={text}")

    return prefix + " ".join(parts)


class StructuredFormatter(logging.Formatter):
    """Render every record as ``level logger message key=value ...``.

    Records without ``structured_kv`` (plain ``logging`` calls) are emitted
    with the same prefix and no trailing fields.
    """

    def format(self, record: logging.LogRecord) -> str:
        base = f"{record.levelname.lower()} {record.name} {record.getMessage()}"
        extra: dict[str, Any] = getattr(record, "structured_kv", {})
        if extra:
            base += format_kv_pairs(extra)
        if record.exc_info:
            base += "\n" + self.formatException(record.exc_info)
        return base


class Logger:
    """Structured logger that attaches keyword arguments as fields.

    Mirrors the standard logging methods, each taking an event name and
    arbitrary keyword fields.

    Examples:
        ```python
        logger = Logger("relay_handler")
        logger.warning("connect_failed", url="wss://bad-host.invalid", error="dns")
        ```
    """

    _DEFAULT_MAX_VALUE_LENGTH: ClassVar[int] = 1000

    def __init__(
        self,
        name: str,
        *,
        json_output: bool = False,
        max_value_length: int | None = None,
    ) -> None:
        """Initialize a structured logger.

        Args:
            name: Logger name passed to ``logging.getLogger``.
            json_output: Emit one JSON object per record instead of key=value.
            max_value_length: Per-value truncation limit (default 1000).
        """
        if max_value_length is None:
            max_value_length = self._DEFAULT_MAX_VALUE_LENGTH
        self._logger = logging.getLogger(name)
        self._json_output = json_output
        self._max_value_length = max_value_length

    @property
    def name(self) -> str:
        return self._logger.name

    def _format_json(self, msg: str, level: str, kwargs: dict[str, Any]) -> str:
        record = {
            "timestamp": datetime.datetime.now(datetime.UTC).isoformat(),
            "level": level,
            "logger": self._logger.name,
            "message": msg,
            **kwargs,
        }
        return json.dumps(record, default=str)

    def _make_extra(self, kwargs: dict[str, Any]) -> dict[str, Any]:
        if not kwargs:
            return {}
        fields = {
            key: _truncate(str(value), self._max_value_length)
            if self._max_value_length and len(str(value)) > self._max_value_length
            else value
            for key, value in kwargs.items()
        }
        return {"structured_kv": fields}

    def _log(
        self,
        level: int,
        msg: str,
        kwargs: dict[str, Any],
        *,
        exc_info: bool = False,
    ) -> None:
        if not self._logger.isEnabledFor(level):
            return
        if self._json_output:
            level_name = logging.getLevelName(level).lower()
            self._logger.log(level, self._format_json(msg, level_name, kwargs), exc_info=exc_info)
        else:
            self._logger.log(level, msg, extra=self._make_extra(kwargs), exc_info=exc_info)

    def debug(self, msg: str, **kwargs: Any) -> None:
        """Log a DEBUG event."""
        self._log(logging.DEBUG, msg, kwargs)

    def info(self, msg: str, **kwargs: Any) -> None:
        """Log an INFO event."""
        self._log(logging.INFO, msg, kwargs)

    def warning(self, msg: str, **kwargs: Any) -> None:
        """Log a WARNING event."""
        self._log(logging.WARNING, msg, kwargs)

    def error(self, msg: str, **kwargs: Any) -> None:
        """Log an ERROR event."""
        self._log(logging.ERROR, msg, kwargs)

    def exception(self, msg: str, **kwargs: Any) -> None:
        """Log an ERROR event with the active exception's traceback."""
        self._log(logging.ERROR, msg, kwargs, exc_info=True)
