"""Shared type aliases used across synthfs modules."""

from collections.abc import Awaitable, Callable, Mapping
from typing import Any, TypeAlias

# Operation handler: receives a Request, returns (or awaits) result fields
Handler: TypeAlias = Callable[..., Any]

# Operation set: operation name to handler
Operations: TypeAlias = Mapping[str, Handler]

# Response sink: receives one encoded response envelope
Send: TypeAlias = Callable[[dict[str, Any]], Awaitable[None]]
