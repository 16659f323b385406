"""synthfs exception hierarchy.

Shared across the registry, content adapter, handle cache, and dispatcher
so every module raises and catches the same types.
"""

import errno
from dataclasses import dataclass
from enum import IntEnum


class Errno(IntEnum):
    """POSIX error codes a handler may fail with.

    Values come from the host platform's ``errno`` module, so the filesystem
    host can hand them straight back to the kernel.
    """

    EPERM = errno.EPERM
    ENOENT = errno.ENOENT
    ESRCH = errno.ESRCH
    EINTR = errno.EINTR
    EIO = errno.EIO
    ENXIO = errno.ENXIO
    ENOTSUP = errno.ENOTSUP
    ETIMEDOUT = errno.ETIMEDOUT


class SynthFSError(Exception):
    """Base for all synthfs-specific errors."""


class ConfigurationError(SynthFSError):
    """Raised when a route pattern or filesystem setup is invalid.

    Raised at registration time, before the filesystem serves anything.
    """


class MalformedRequest(SynthFSError):
    """Raised when a request envelope cannot be decoded."""


@dataclass(frozen=True, slots=True)
class FSError(SynthFSError):
    """An error that maps directly to a POSIX error code.

    Raised by the registry, the content adapter, or route handlers. The
    dispatcher catches these and puts ``code`` in the response's
    ``error`` field.
    """

    code: Errno
    detail: str = ""

    def __str__(self) -> str:
        if self.detail:
            return f"{self.code.name}: {self.detail}"
        return self.code.name


class NotFound(FSError):  # noqa: N818
    """ENOENT: no route matched, or the route has no data for this path."""

    def __init__(self, detail: str = "No such file or directory") -> None:
        super().__init__(code=Errno.ENOENT, detail=detail)


class NotSupported(FSError):  # noqa: N818
    """ENOTSUP: the path or operation is deliberately not served."""

    def __init__(self, detail: str = "Operation not supported") -> None:
        super().__init__(code=Errno.ENOTSUP, detail=detail)


class PermissionDenied(FSError):  # noqa: N818
    """EPERM: a write was attempted on a read-only file."""

    def __init__(self, detail: str = "Operation not permitted") -> None:
        super().__init__(code=Errno.EPERM, detail=detail)


class TimedOut(FSError):  # noqa: N818
    """ETIMEDOUT: the handler did not finish inside the request deadline."""

    def __init__(self, detail: str = "Operation timed out") -> None:
        super().__init__(code=Errno.ETIMEDOUT, detail=detail)


class StaleHandle(FSError):  # noqa: N818
    """An operation referenced a handle that was never opened or was released.

    Carries the handle id in the detail string for log visibility.
    """

    def __init__(self, fh: object, detail: str = "") -> None:
        super().__init__(code=Errno.EIO, detail=detail or f"Unknown file handle {fh!r}")
