"""Compiled route registry with most-specific-first resolution.

Routes are registered during setup and sorted once by variable count
when the filesystem freezes. Resolution walks the sorted tuple and
returns the first structural match.
"""

from types import MappingProxyType

from synthfs._internal.types import Operations
from synthfs.errors import ConfigurationError, NotFound, NotSupported
from synthfs.routing.pattern import match_pattern, parse_pattern
from synthfs.routing.route import Route, RouteMatch


class RouteRegistry:
    """Compiled route table.

    Usage::

        registry = RouteRegistry()
        registry.add("/tabs.json", tabs_ops)
        registry.add("/tabs/{id}.json", tab_ops)
        registry.compile()
        match = registry.resolve("/tabs/42.json")

    A literal route beats a same-shaped pattern with variables, so routes
    need no explicit priority. Equally specific routes keep registration
    order.
    """

    __slots__ = ("_compiled", "_pending", "_routes", "_sidecar_prefix")

    def __init__(self, *, sidecar_prefix: str = "._") -> None:
        self._pending: list[Route] = []
        self._routes: tuple[Route, ...] = ()
        self._compiled = False
        self._sidecar_prefix = sidecar_prefix

    def add(
        self,
        pattern: str,
        operations: Operations,
        *,
        name: str | None = None,
    ) -> Route:
        """Parse *pattern* and register it. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)
        if any(r.pattern == pattern for r in self._pending):
            msg = f"Route {pattern!r} is already registered"
            raise ConfigurationError(msg)

        route = Route(
            pattern=pattern,
            segments=parse_pattern(pattern),
            operations=MappingProxyType(dict(operations)),
            name=name,
        )
        self._pending.append(route)
        return route

    @property
    def routes(self) -> tuple[Route, ...]:
        """Return all registered routes, in resolution order once compiled."""
        if self._compiled:
            return self._routes
        return tuple(self._pending)

    @property
    def compiled(self) -> bool:
        return self._compiled

    def compile(self) -> None:
        """Sort routes by specificity and freeze. No more routes can be added."""
        if self._compiled:
            return
        # sorted() is stable: ties keep registration order
        self._routes = tuple(sorted(self._pending, key=lambda r: r.var_count))
        self._compiled = True

    def is_sidecar(self, path: str) -> bool:
        """True for extended-attribute shadow files such as ``/dir/._name``.

        A trailing slash is ignored, as in route matching: ``/dir/._name/``
        is a sidecar too.
        """
        if not self._sidecar_prefix:
            return False
        name = path.rstrip("/").rsplit("/", 1)[-1]
        return name.startswith(self._sidecar_prefix) and len(name) > len(self._sidecar_prefix)

    def resolve(self, path: str) -> RouteMatch:
        """Resolve a request path to exactly one route and its bindings.

        Raises ``NotSupported`` for sidecar paths, before any route is
        consulted. Raises ``NotFound`` if no route matches.
        """
        if not self._compiled:
            msg = "RouteRegistry.compile() must be called before resolve()."
            raise RuntimeError(msg)

        if self.is_sidecar(path):
            raise NotSupported(f"Extended-attribute sidecar {path!r} is not served")

        for route in self._routes:
            bindings = match_pattern(route.segments, path)
            if bindings is not None:
                return RouteMatch(route=route, bindings=bindings)

        raise NotFound(f"No route matches {path!r}")

    def __len__(self) -> int:
        return len(self.routes)

    def __contains__(self, pattern: str) -> bool:
        return any(r.pattern == pattern for r in self.routes)
