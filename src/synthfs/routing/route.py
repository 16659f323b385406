"""Route and RouteMatch frozen dataclasses."""

import re
from dataclasses import dataclass, field

from synthfs._internal.types import Operations


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route pattern.

    Literal:   ``tabs``           (is_param=False)
    Param:     ``{id}``           (is_param=True, param_name="id")
    Typed:     ``{id:int}``       (is_param=True, param_name="id", param_type="int")
    Embedded:  ``{id}.json``      (is_param=True, regex anchored around ".json")
    Rest:      ``{rest:path}``    (is_param=True, param_type="path", final segment only)
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = "str"
    regex: re.Pattern[str] | None = field(default=None, compare=False, repr=False)

    @property
    def is_rest(self) -> bool:
        """True for a trailing placeholder that captures all remaining segments."""
        return self.is_param and self.param_type == "path"


@dataclass(frozen=True, slots=True)
class Route:
    """A frozen route definition.

    Created during filesystem setup, compiled into the registry at freeze
    time. ``var_count`` is the specificity score: fewer variables means
    more specific.
    """

    pattern: str
    segments: tuple[PathSegment, ...]
    operations: Operations
    name: str | None = None

    @property
    def var_count(self) -> int:
        return sum(1 for seg in self.segments if seg.is_param)

    def supports(self, op: str) -> bool:
        return op in self.operations


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route resolution."""

    route: Route
    bindings: dict[str, str]
