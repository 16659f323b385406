"""Tests for synthfs.handles: the open-handle cache."""

import pytest

from synthfs.errors import Errno, StaleHandle
from synthfs.handles import HandleCache


class TestStore:
    def test_returns_fresh_handles(self) -> None:
        handles = HandleCache()
        first = handles.store("/a", b"1")
        second = handles.store("/a", b"2")
        assert first != second
        assert second > first

    def test_handles_are_never_reused(self) -> None:
        handles = HandleCache()
        fh = handles.store("/a", b"")
        handles.remove(fh)
        assert handles.store("/a", b"") != fh

    def test_stores_a_mutable_copy(self) -> None:
        handles = HandleCache()
        fh = handles.store("/a", b"abc")
        assert handles.get(fh) == bytearray(b"abc")


class TestStaleHandles:
    def test_get_unknown(self) -> None:
        with pytest.raises(StaleHandle) as exc_info:
            HandleCache().get(99)
        assert exc_info.value.code is Errno.EIO

    def test_get_none(self) -> None:
        with pytest.raises(StaleHandle):
            HandleCache().get(None)

    def test_use_after_release(self) -> None:
        handles = HandleCache()
        fh = handles.store("/a", b"abc")
        handles.remove(fh)
        with pytest.raises(StaleHandle):
            handles.get(fh)
        with pytest.raises(StaleHandle):
            handles.set(fh, b"x")

    def test_double_release(self) -> None:
        handles = HandleCache()
        fh = handles.store("/a", b"")
        handles.remove(fh)
        with pytest.raises(StaleHandle):
            handles.remove(fh)


class TestUpdates:
    def test_set_replaces_buffer(self) -> None:
        handles = HandleCache()
        fh = handles.store("/a", b"abc")
        handles.set(fh, b"xyz!")
        assert handles.get(fh) == bytearray(b"xyz!")

    def test_set_for_path_updates_every_handle_on_path(self) -> None:
        handles = HandleCache()
        a1 = handles.store("/a", b"one")
        a2 = handles.store("/a", b"two")
        b1 = handles.store("/b", b"other")
        assert handles.set_for_path("/a", b"new") == 2
        assert handles.get(a1) == bytearray(b"new")
        assert handles.get(a2) == bytearray(b"new")
        assert handles.get(b1) == bytearray(b"other")

    def test_set_for_path_gives_each_handle_its_own_copy(self) -> None:
        handles = HandleCache()
        a1 = handles.store("/a", b"")
        a2 = handles.store("/a", b"")
        handles.set_for_path("/a", b"abc")
        handles.get(a1)[0:1] = b"X"
        assert handles.get(a2) == bytearray(b"abc")

    def test_set_for_path_with_no_handles(self) -> None:
        assert HandleCache().set_for_path("/a", b"") == 0


class TestIntrospection:
    def test_len_and_contains(self) -> None:
        handles = HandleCache()
        assert len(handles) == 0
        fh = handles.store("/a", b"")
        assert len(handles) == 1
        assert fh in handles
        handles.remove(fh)
        assert fh not in handles
