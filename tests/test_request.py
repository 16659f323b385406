"""Tests for synthfs.request: the immutable operation request."""

import pytest

from synthfs.request import Request


class TestRequest:
    def test_defaults(self) -> None:
        request = Request(id=1, op="getattr", path="/tabs.json")
        assert request.fields == {}
        assert request.buf is None
        assert request.bindings == {}
        assert request.fh is None

    def test_numeric_fields(self) -> None:
        request = Request(
            id=1, op="read", path="/x", fields={"fh": 3, "offset": 10, "size": 4096, "flags": 2}
        )
        assert request.fh == 3
        assert request.offset == 10
        assert request.size == 4096
        assert request.flags == 2
        assert request.mode == 0

    def test_missing_numeric_fields_default_to_zero(self) -> None:
        request = Request(id=1, op="read", path="/x")
        assert request.offset == 0
        assert request.size == 0

    def test_frozen(self) -> None:
        request = Request(id=1, op="getattr", path="/x")
        with pytest.raises(AttributeError):
            request.path = "/y"  # type: ignore[misc]


class TestBindings:
    def test_with_bindings_returns_copy(self) -> None:
        request = Request(id=1, op="getattr", path="/tabs/42")
        bound = request.with_bindings({"id": "42"})
        assert bound.bindings == {"id": "42"}
        assert request.bindings == {}
        assert bound.path == "/tabs/42"

    def test_get_prefers_bindings(self) -> None:
        request = Request(id=1, op="read", path="/x", fields={"id": "field"}).with_bindings(
            {"id": "binding"}
        )
        assert request.get("id") == "binding"

    def test_get_falls_back_to_fields(self) -> None:
        request = Request(id=1, op="read", path="/x", fields={"size": 5})
        assert request.get("size") == 5
        assert request.get("missing", "default") == "default"
