"""Open-handle cache: per-session byte buffers keyed by handle id.

``open`` fetches a file's contents once and stores them here; ``read``
and ``write`` work against the cached buffer until ``release`` drops it.
Handle ids come from a strictly increasing counter and are never reused
while the cache lives.

There is no eviction: an entry lives exactly as long as its open/release
session. A caller that opens and never releases grows the table.

Concurrency:
    All operations run on one event loop, so the table needs no lock.
    A port to threads must guard every method, including the multi-entry
    update in ``set_for_path``.
"""

import itertools
from dataclasses import dataclass

from synthfs.errors import StaleHandle


@dataclass(slots=True)
class CachedFile:
    """One open session: the owning path and its full cached contents.

    Not frozen: ``data`` is replaced by writes and truncates.
    """

    path: str
    data: bytearray


class HandleCache:
    """Table mapping opaque integer handles to cached file contents.

    Usage::

        handles = HandleCache()
        fh = handles.store("/tabs.json", b"[]")
        handles.get(fh)        # bytearray(b'[]')
        handles.remove(fh)
        handles.get(fh)        # raises StaleHandle
    """

    __slots__ = ("_counter", "_entries")

    def __init__(self) -> None:
        self._entries: dict[int, CachedFile] = {}
        self._counter = itertools.count(1)

    def store(self, path: str, data: bytes) -> int:
        """Cache *data* for *path* under a fresh handle and return the handle."""
        fh = next(self._counter)
        self._entries[fh] = CachedFile(path=path, data=bytearray(data))
        return fh

    def get(self, fh: int | None) -> bytearray:
        """Return the cached buffer for *fh*. Raises ``StaleHandle`` if unknown."""
        return self._entry(fh).data

    def set(self, fh: int | None, data: bytes) -> None:
        """Replace the cached buffer for *fh*."""
        self._entry(fh).data = bytearray(data)

    def remove(self, fh: int | None) -> None:
        """Drop *fh*. Any later use of it raises ``StaleHandle``."""
        if fh not in self._entries:
            raise StaleHandle(fh)
        del self._entries[fh]

    def set_for_path(self, path: str, data: bytes) -> int:
        """Replace the buffer of every open handle on *path*.

        Each handle gets its own copy. Returns the number of handles updated.
        """
        updated = 0
        for entry in self._entries.values():
            if entry.path == path:
                entry.data = bytearray(data)
                updated += 1
        return updated

    def _entry(self, fh: int | None) -> CachedFile:
        entry = self._entries.get(fh) if fh is not None else None
        if entry is None:
            raise StaleHandle(fh)
        return entry

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, fh: object) -> bool:
        return fh in self._entries
