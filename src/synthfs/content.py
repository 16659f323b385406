"""Content-backed files: single-blob file semantics from two accessors.

You provide a read accessor that returns the entire contents of a file
(``str``, ``bytes``, or ``None`` when the file does not exist) and,
optionally, a write accessor that receives the entire new contents as
text. ``ContentFile`` turns that pair into a full operation set
(getattr, open, read, write, release, truncate) so clients can stat the
file, read and write sections of it, and truncate it.

Lifecycle of one session::

    open      -> read accessor called once, bytes cached under a new handle
    read      -> served from the cached buffer, never re-fetched
    write     -> cached buffer patched, whole buffer handed to the write accessor
    release   -> cache entry dropped

``truncate`` re-fetches from the read accessor rather than trusting any
handle's buffer, resizes, then pushes the result into every open handle
on the same path and to the write accessor.

Override points::

    # replace one operation on the generated set
    ops = content_operations(get_tab, handles=handles, getattr=cheap_estimate)

    # or subclass and override methods
    class Screenshot(ContentFile):
        async def getattr(self, request): ...
"""

import logging
import stat
from collections.abc import Awaitable, Callable
from typing import Any, TypeAlias

from synthfs._internal.invoke import invoke
from synthfs._internal.types import Handler
from synthfs.errors import ConfigurationError, Errno, FSError, NotFound, PermissionDenied
from synthfs.handles import HandleCache
from synthfs.protocol import OPERATIONS
from synthfs.request import Request

logger = logging.getLogger("synthfs.content")

Contents: TypeAlias = str | bytes | bytearray | None

# (request) -> contents; may be sync or async
GetData: TypeAlias = Callable[[Request], Contents | Awaitable[Contents]]

# (request, new full contents as text) -> ignored; may be sync or async
SetData: TypeAlias = Callable[[Request, str], Any]

CONTENT_OPERATIONS: tuple[str, ...] = ("getattr", "open", "read", "write", "release", "truncate")


def to_bytes(data: str | bytes | bytearray) -> bytes:
    """UTF-8 encode text; pass binary contents through."""
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def file_stat(size: int, *, writable: bool = False) -> dict[str, int]:
    """Build stat fields for a regular file.

    Readable by everyone; writable by everyone only when *writable*.
    """
    return {
        "st_mode": stat.S_IFREG | 0o444 | (0o222 if writable else 0),
        "st_nlink": 1,
        "st_size": size,
    }


def resize(data: bytes, size: int) -> bytes:
    """Drop trailing bytes when shrinking; zero-pad when growing."""
    if size <= len(data):
        return data[:size]
    return data + bytes(size - len(data))


class ContentFile:
    """Default single-blob file semantics over a read/write accessor pair.

    Every instance shares the filesystem's ``HandleCache``, so handles
    opened through one route are visible to ``truncate`` on the same path.
    """

    __slots__ = ("get_data", "handles", "set_data")

    def __init__(
        self,
        get_data: GetData,
        set_data: SetData | None = None,
        *,
        handles: HandleCache,
    ) -> None:
        self.get_data = get_data
        self.set_data = set_data
        self.handles = handles

    @property
    def writable(self) -> bool:
        return self.set_data is not None

    # -- Accessor plumbing --

    async def fetch(self, request: Request) -> bytes:
        """Call the read accessor. Raises ``NotFound`` when it returns ``None``."""
        data = await invoke(self.get_data, request)
        if data is None:
            raise NotFound(f"{request.path!r} has no contents")
        return to_bytes(data)

    async def store(self, request: Request, data: bytes) -> None:
        """Hand the full contents to the write accessor as text."""
        if self.set_data is None:
            raise PermissionDenied(f"{request.path!r} is read-only")
        await invoke(self.set_data, request, data.decode("utf-8", errors="replace"))

    # -- Operations --

    async def getattr(self, request: Request) -> dict[str, Any]:
        # Re-fetches on every call. Routes with slow sources should
        # override this with a cheaper size estimate.
        data = await self.fetch(request)
        return file_stat(len(data), writable=self.writable)

    async def open(self, request: Request) -> dict[str, Any]:
        data = await self.fetch(request)
        fh = self.handles.store(request.path, data)
        logger.debug("open %s -> fh=%d (%d bytes)", request.path, fh, len(data))
        return {"fh": fh}

    async def read(self, request: Request) -> dict[str, Any]:
        data = self.handles.get(request.fh)
        offset, size = request.offset, request.size
        if offset < 0 or size < 0:
            raise FSError(Errno.EIO, f"Invalid read range offset={offset} size={size}")
        return {"buf": bytes(data[offset : offset + size])}

    async def write(self, request: Request) -> dict[str, Any]:
        current = self.handles.get(request.fh)
        if not self.writable:
            raise PermissionDenied(f"{request.path!r} is read-only")

        buf = request.buf or b""
        offset = request.offset
        if offset < 0:
            raise FSError(Errno.EIO, f"Invalid write offset {offset}")
        end = offset + len(buf)

        updated = current
        if end > len(current):
            # Keep existing bytes, zero-fill any gap up to offset
            updated = bytearray(end)
            keep = min(offset, len(current))
            updated[:keep] = current[:keep]
        updated[offset:end] = buf
        if updated is not current:
            self.handles.set(request.fh, updated)

        # The write accessor always receives the full intended contents.
        # Routes that need incremental patches should override write().
        await self.store(request, bytes(updated))
        return {"size": len(buf)}

    async def release(self, request: Request) -> dict[str, Any]:
        self.handles.remove(request.fh)
        return {}

    async def truncate(self, request: Request) -> dict[str, Any]:
        if not self.writable:
            raise PermissionDenied(f"{request.path!r} is read-only")
        if request.size < 0:
            raise FSError(Errno.EIO, f"Invalid truncate size {request.size}")

        data = resize(await self.fetch(request), request.size)
        updated = self.handles.set_for_path(request.path, data)
        logger.debug(
            "truncate %s to %d bytes (%d open handle(s) updated)",
            request.path, len(data), updated,
        )
        await self.store(request, data)
        return {}

    # -- Operation set --

    def operations(self, **overrides: Handler) -> dict[str, Handler]:
        """Return the operation set, with *overrides* replacing defaults.

        Override names outside the known operation set raise
        ``ConfigurationError``.
        """
        unknown = set(overrides) - OPERATIONS
        if unknown:
            msg = f"Unknown operation override(s): {', '.join(sorted(unknown))}"
            raise ConfigurationError(msg)
        ops: dict[str, Handler] = {name: getattr(self, name) for name in CONTENT_OPERATIONS}
        ops.update(overrides)
        return ops


def content_operations(
    get_data: GetData,
    set_data: SetData | None = None,
    *,
    handles: HandleCache,
    **overrides: Handler,
) -> dict[str, Handler]:
    """Build a content-backed operation set in one call.

    Usage::

        handles = HandleCache()
        ops = content_operations(lambda req: json.dumps(state.tabs), handles=handles)
        registry.add("/tabs.json", ops)
    """
    return ContentFile(get_data, set_data, handles=handles).operations(**overrides)
