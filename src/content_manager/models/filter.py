"""
Subscription filters and the lenient query boundary that produces them.

[Filter][content_manager.models.filter.Filter] is the strict, immutable
NIP-01 filter sent in a ``REQ`` frame. [FilterSpec][content_manager.models.filter.FilterSpec]
is the edge model that accepts loosely typed caller input (decoded JSON from
the GUI, CLI arguments) and validates it once: any field that cannot be
coerced to its expected type is dropped instead of failing the whole query,
so the caller degrades to "no constraint" for that field.

Coercion rules:

* ``kinds`` -- list; keeps numeric (non-bool) entries within 0..65535,
  truncated to ``int``.
* ``authors`` / ``ids`` -- list; keeps string entries.
* ``since`` / ``until`` -- non-negative number (non-bool), truncated.
* ``limit`` -- positive number (non-bool), truncated.

Empty lists after filtering are dropped as well.

Examples:
    ```python
    f = translate_filter({"kinds": [1, "x", True], "limit": 10.0, "since": "yesterday"})
    f.to_dict()  # {"kinds": [1], "limit": 10}
    ```
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, field_validator

from .constants import MAX_KIND


if TYPE_CHECKING:
    from .event import Event


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Filter:
    """Immutable NIP-01 subscription filter.

    Every field is optional; ``None`` means the field imposes no constraint
    and is omitted from the wire form.

    Attributes:
        ids: Event ids to match exactly.
        kinds: Event kinds to match.
        authors: Author public keys (hex) to match exactly.
        since: Inclusive lower bound on ``created_at``.
        until: Inclusive upper bound on ``created_at``.
        limit: Maximum number of stored events the relay should return.
    """

    ids: tuple[str, ...] | None = None
    kinds: tuple[int, ...] | None = None
    authors: tuple[str, ...] | None = None
    since: int | None = None
    until: int | None = None
    limit: int | None = None

    def __post_init__(self) -> None:
        for name in ("ids", "kinds", "authors"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, tuple(value))

    @property
    def is_empty(self) -> bool:
        return not self.to_dict()

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON object sent inside a ``REQ`` frame."""
        data: dict[str, Any] = {}
        if self.ids is not None:
            data["ids"] = list(self.ids)
        if self.authors is not None:
            data["authors"] = list(self.authors)
        if self.kinds is not None:
            data["kinds"] = list(self.kinds)
        if self.since is not None:
            data["since"] = self.since
        if self.until is not None:
            data["until"] = self.until
        if self.limit is not None:
            data["limit"] = self.limit
        return data

    def matches(self, event: Event) -> bool:
        """Evaluate the filter against *event* the way a relay would.

        ``limit`` is not considered: it bounds a result set, not an event.
        """
        if self.ids is not None and event.id not in self.ids:
            return False
        if self.kinds is not None and event.kind not in self.kinds:
            return False
        if self.authors is not None and event.pubkey not in self.authors:
            return False
        if self.since is not None and event.created_at < self.since:
            return False
        return self.until is None or event.created_at <= self.until


# =============================================================================
# Lenient coercion helpers
# =============================================================================


def _coerce_int(value: Any) -> int | None:
    """Truncate a JSON number to ``int``; ``None`` for anything else (bools included)."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return int(value)
    return None


def _coerce_str_list(value: Any) -> list[str] | None:
    if not isinstance(value, list | tuple):
        return None
    items = [item for item in value if isinstance(item, str)]
    return items or None


class FilterSpec(BaseModel):
    """Loosely typed filter as supplied by the GUI or CLI, validated once.

    Unknown keys are ignored. Each field validator runs in ``before`` mode
    and returns ``None`` for values it cannot coerce, so validation of a
    ``FilterSpec`` never fails on field content.

    See Also:
        [translate_filter()][content_manager.models.filter.translate_filter]:
            Accepts arbitrary input, including non-mappings.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    ids: list[str] | None = None
    kinds: list[int] | None = None
    authors: list[str] | None = None
    since: int | None = None
    until: int | None = None
    limit: int | None = None

    @field_validator("ids", "authors", mode="before")
    @classmethod
    def _strings(cls, value: Any) -> list[str] | None:
        return _coerce_str_list(value)

    @field_validator("kinds", mode="before")
    @classmethod
    def _kinds(cls, value: Any) -> list[int] | None:
        if not isinstance(value, list | tuple):
            return None
        kinds = [
            kind
            for kind in (_coerce_int(item) for item in value)
            if kind is not None and 0 <= kind <= MAX_KIND
        ]
        return kinds or None

    @field_validator("since", "until", mode="before")
    @classmethod
    def _timestamp(cls, value: Any) -> int | None:
        ts = _coerce_int(value)
        return ts if ts is not None and ts >= 0 else None

    @field_validator("limit", mode="before")
    @classmethod
    def _limit(cls, value: Any) -> int | None:
        limit = _coerce_int(value)
        return limit if limit is not None and limit > 0 else None

    def to_filter(self) -> Filter:
        """Build the strict [Filter][content_manager.models.filter.Filter]."""
        return Filter(
            ids=tuple(self.ids) if self.ids is not None else None,
            kinds=tuple(self.kinds) if self.kinds is not None else None,
            authors=tuple(self.authors) if self.authors is not None else None,
            since=self.since,
            until=self.until,
            limit=self.limit,
        )


def translate_filter(spec: Any) -> Filter:
    """Translate one loosely typed query into a [Filter][content_manager.models.filter.Filter].

    Never raises: a non-mapping *spec* yields the empty filter.
    """
    if isinstance(spec, FilterSpec):
        return spec.to_filter()
    if not isinstance(spec, Mapping):
        logger.warning("filter_spec_ignored type=%s", type(spec).__name__)
        return Filter()
    fields = {key: value for key, value in spec.items() if isinstance(key, str)}
    return FilterSpec.model_validate(fields).to_filter()


def translate_filters(specs: Iterable[Any] | None) -> list[Filter]:
    """Translate every spec in *specs*, preserving order."""
    if specs is None:
        return []
    if isinstance(specs, Mapping):
        return [translate_filter(specs)]
    return [translate_filter(spec) for spec in specs]
