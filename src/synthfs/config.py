"""Filesystem configuration.

FSConfig is a frozen dataclass: immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class FSConfig:
    """Filesystem configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = FSConfig(timeout=2.5, log_level="debug")
    """

    # Dispatch
    timeout: float = 1.0  # Seconds before a request is answered with ETIMEDOUT
    # Seconds in-flight requests may keep running after the host hangs up
    shutdown_grace: float = 2.0
    debug: bool = False

    # Paths whose last segment starts with this prefix are never routed
    # (AppleDouble extended-attribute shadow files).
    sidecar_prefix: str = "._"

    # Transport
    max_message_size: int = 64 * 1024 * 1024  # 64 MiB per framed message

    # Logging
    log_level: str = "info"
