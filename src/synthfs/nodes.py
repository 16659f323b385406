"""Directory and symlink operation sets.

Content-backed files cover most routes. These helpers cover the two other
node kinds a synthetic tree needs: directories whose listing is computed
from live state, and symlinks whose target is.

Usage::

    registry.add("/tabs", directory_operations(lambda req: [f"{t.id}" for t in tabs]))
    registry.add("/tabs/last-focused", symlink_operations(lambda req: f"{last_tab_id}"))
"""

import stat
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, TypeAlias

from synthfs._internal.invoke import invoke
from synthfs._internal.types import Handler
from synthfs.errors import NotFound
from synthfs.request import Request

# (request) -> entry names, or None when the directory does not exist
ListEntries: TypeAlias = Callable[[Request], Iterable[str] | None | Awaitable[Iterable[str] | None]]

# (request) -> link target, or None when the link does not exist
ResolveTarget: TypeAlias = Callable[[Request], str | None | Awaitable[str | None]]


def dir_stat() -> dict[str, int]:
    return {"st_mode": stat.S_IFDIR | 0o755, "st_nlink": 2, "st_size": 0}


def link_stat(target: str) -> dict[str, int]:
    return {
        "st_mode": stat.S_IFLNK | 0o444,
        "st_nlink": 1,
        "st_size": len(target.encode("utf-8")),
    }


def directory_operations(list_entries: ListEntries) -> dict[str, Handler]:
    """Build getattr/opendir/readdir/releasedir for a computed directory.

    ``readdir`` always lists ``.`` and ``..`` first. If *list_entries*
    returns ``None`` the directory does not exist (ENOENT).
    """

    async def entries(request: Request) -> list[str]:
        names = await invoke(list_entries, request)
        if names is None:
            raise NotFound(f"Directory {request.path!r} does not exist")
        return [".", "..", *names]

    async def getattr(request: Request) -> dict[str, Any]:
        await entries(request)
        return dir_stat()

    async def opendir(request: Request) -> dict[str, Any]:
        return {"fh": 0}

    async def readdir(request: Request) -> dict[str, Any]:
        return {"entries": await entries(request)}

    async def releasedir(request: Request) -> dict[str, Any]:
        return {}

    return {
        "getattr": getattr,
        "opendir": opendir,
        "readdir": readdir,
        "releasedir": releasedir,
    }


def symlink_operations(resolve_target: ResolveTarget) -> dict[str, Handler]:
    """Build getattr/readlink for a computed symlink.

    If *resolve_target* returns ``None`` the link does not exist (ENOENT).
    """

    async def target(request: Request) -> str:
        value = await invoke(resolve_target, request)
        if value is None:
            raise NotFound(f"Link {request.path!r} does not exist")
        return value

    async def getattr(request: Request) -> dict[str, Any]:
        return link_stat(await target(request))

    async def readlink(request: Request) -> dict[str, Any]:
        return {"buf": await target(request)}

    return {"getattr": getattr, "readlink": readlink}
