"""Tests for synthfs.nodes: computed directories and symlinks."""

import stat

import pytest

from synthfs.errors import NotFound
from synthfs.nodes import dir_stat, directory_operations, link_stat, symlink_operations
from synthfs.request import Request


def _req(op: str, path: str = "/tabs") -> Request:
    return Request(id=1, op=op, path=path)


class TestStats:
    def test_dir_stat(self) -> None:
        assert dir_stat() == {"st_mode": stat.S_IFDIR | 0o755, "st_nlink": 2, "st_size": 0}

    def test_link_stat_size_is_target_length(self) -> None:
        result = link_stat("../tabs/é")
        assert result["st_mode"] == stat.S_IFLNK | 0o444
        assert result["st_size"] == len("../tabs/é".encode())


class TestDirectory:
    @pytest.mark.asyncio
    async def test_readdir_lists_dot_entries_first(self) -> None:
        ops = directory_operations(lambda req: ["1", "2"])
        assert await ops["readdir"](_req("readdir")) == {"entries": [".", "..", "1", "2"]}

    @pytest.mark.asyncio
    async def test_async_listing(self) -> None:
        async def entries(request: Request) -> list[str]:
            return ["a"]

        ops = directory_operations(entries)
        assert (await ops["readdir"](_req("readdir")))["entries"] == [".", "..", "a"]

    @pytest.mark.asyncio
    async def test_getattr(self) -> None:
        ops = directory_operations(lambda req: [])
        assert await ops["getattr"](_req("getattr")) == dir_stat()

    @pytest.mark.asyncio
    async def test_missing_directory(self) -> None:
        ops = directory_operations(lambda req: None)
        with pytest.raises(NotFound):
            await ops["getattr"](_req("getattr"))
        with pytest.raises(NotFound):
            await ops["readdir"](_req("readdir"))

    @pytest.mark.asyncio
    async def test_opendir_and_releasedir(self) -> None:
        ops = directory_operations(lambda req: [])
        assert await ops["opendir"](_req("opendir")) == {"fh": 0}
        assert await ops["releasedir"](_req("releasedir")) == {}


class TestSymlink:
    @pytest.mark.asyncio
    async def test_readlink(self) -> None:
        ops = symlink_operations(lambda req: "../tabs/3")
        assert await ops["readlink"](_req("readlink", "/last")) == {"buf": "../tabs/3"}

    @pytest.mark.asyncio
    async def test_getattr(self) -> None:
        ops = symlink_operations(lambda req: "../tabs/3")
        assert await ops["getattr"](_req("getattr", "/last")) == link_stat("../tabs/3")

    @pytest.mark.asyncio
    async def test_missing_link(self) -> None:
        ops = symlink_operations(lambda req: None)
        with pytest.raises(NotFound):
            await ops["readlink"](_req("readlink", "/last"))
