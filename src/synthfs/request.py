"""Immutable filesystem operation request.

Frozen metadata decoded from one host message. Binary payloads arrive
here as raw bytes; the text-safe wire encoding never leaks past the
protocol layer.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable filesystem operation request.

    ``fields`` holds the operation-specific envelope fields (``fh``,
    ``offset``, ``size``, ``flags``, ``mode``, ...). ``bindings`` holds the
    variables captured from the route pattern and is empty until the
    dispatcher attaches them.
    """

    id: Any
    op: str
    path: str
    fields: Mapping[str, Any] = field(default_factory=dict)
    buf: bytes | None = None
    bindings: dict[str, str] = field(default_factory=dict)

    # -- Computed properties --

    @property
    def fh(self) -> int | None:
        """The open-handle id, for operations that carry one."""
        value = self.fields.get("fh")
        return None if value is None else int(value)

    @property
    def offset(self) -> int:
        return int(self.fields.get("offset", 0))

    @property
    def size(self) -> int:
        return int(self.fields.get("size", 0))

    @property
    def flags(self) -> int:
        return int(self.fields.get("flags", 0))

    @property
    def mode(self) -> int:
        return int(self.fields.get("mode", 0))

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a route binding, falling back to an envelope field."""
        if key in self.bindings:
            return self.bindings[key]
        return self.fields.get(key, default)

    def with_bindings(self, bindings: Mapping[str, str]) -> Request:
        """Return a copy carrying the given route bindings."""
        return dataclasses.replace(self, bindings=dict(bindings))
