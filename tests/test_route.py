"""Tests for synthfs.routing.route: Route, RouteMatch, PathSegment."""

import pytest

from synthfs.routing.pattern import parse_pattern
from synthfs.routing.route import PathSegment, Route, RouteMatch


async def _getattr(request: object) -> dict:
    return {}


def _route(pattern: str) -> Route:
    return Route(pattern=pattern, segments=parse_pattern(pattern), operations={"getattr": _getattr})


class TestPathSegment:
    def test_literal(self) -> None:
        seg = PathSegment(value="tabs")
        assert seg.is_param is False
        assert seg.param_name is None
        assert seg.is_rest is False

    def test_rest(self) -> None:
        seg = PathSegment(value="{rest:path}", is_param=True, param_name="rest", param_type="path")
        assert seg.is_rest is True

    def test_frozen(self) -> None:
        seg = PathSegment(value="tabs")
        with pytest.raises(AttributeError):
            seg.value = "other"  # type: ignore[misc]


class TestRoute:
    def test_var_count(self) -> None:
        assert _route("/tabs.json").var_count == 0
        assert _route("/tabs/{id}.json").var_count == 1
        assert _route("/windows/{wid}/tabs/{tid}").var_count == 2

    def test_supports(self) -> None:
        route = _route("/tabs.json")
        assert route.supports("getattr")
        assert not route.supports("write")

    def test_frozen(self) -> None:
        route = _route("/tabs.json")
        with pytest.raises(AttributeError):
            route.pattern = "/other"  # type: ignore[misc]


class TestRouteMatch:
    def test_creation(self) -> None:
        route = _route("/tabs/{id}")
        match = RouteMatch(route=route, bindings={"id": "42"})
        assert match.route is route
        assert match.bindings == {"id": "42"}
