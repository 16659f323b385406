"""Path patterns: parsing and structural matching.

Matching works on ``/``-delimited segments only; there is no globbing
beyond placeholder capture.

Examples::

    "/tabs.json"            -> [PathSegment("tabs.json")]
    "/tabs/{id}.json"       -> [PathSegment("tabs"), PathSegment("{id}.json", is_param=True, ...)]
    "/tabs/{id:int}/title"  -> [..., PathSegment("{id:int}", param_type="int"), ...]
    "/files/{rest:path}"    -> [PathSegment("files"), PathSegment("{rest:path}", param_type="path")]
"""

import re
from collections.abc import Sequence

from synthfs.errors import ConfigurationError
from synthfs.routing.route import PathSegment

# Regex for each supported converter. Converters constrain what a
# placeholder matches; bindings stay strings.
CONVERTERS: dict[str, str] = {
    "str": r"[^/]+",
    "int": r"\d+",
    "path": r".+",
}

_PLACEHOLDER = re.compile(r"\{([^{}]*)\}")


def split_path(path: str) -> list[str]:
    """Split a path into its non-empty segments. ``"/"`` has none."""
    return [p for p in path.strip("/").split("/") if p]


def parse_pattern(pattern: str) -> tuple[PathSegment, ...]:
    """Parse a route pattern into segments.

    Raises ``ConfigurationError`` for unbalanced braces, more than one
    placeholder in a segment, unknown converters, duplicate variable
    names, or a ``path`` placeholder anywhere but the final segment.
    """
    if not pattern.startswith("/"):
        msg = f"Route pattern {pattern!r} must start with '/'"
        raise ConfigurationError(msg)

    parts = split_path(pattern)
    segments: list[PathSegment] = []
    seen: set[str] = set()

    for index, part in enumerate(parts):
        found = list(_PLACEHOLDER.finditer(part))
        leftover = _PLACEHOLDER.sub("", part)
        if "{" in leftover or "}" in leftover:
            msg = f"Unbalanced braces in segment {part!r} of pattern {pattern!r}"
            raise ConfigurationError(msg)
        if not found:
            segments.append(PathSegment(value=part))
            continue
        if len(found) > 1:
            msg = f"Segment {part!r} of pattern {pattern!r} has more than one placeholder"
            raise ConfigurationError(msg)

        placeholder = found[0]
        name, _, param_type = placeholder.group(1).partition(":")
        param_type = param_type or "str"
        if not name.isidentifier():
            msg = f"Invalid variable name {name!r} in pattern {pattern!r}"
            raise ConfigurationError(msg)
        if param_type not in CONVERTERS:
            msg = (
                f"Unknown converter {param_type!r} in pattern {pattern!r}. "
                f"Available: {', '.join(sorted(CONVERTERS))}"
            )
            raise ConfigurationError(msg)
        if name in seen:
            msg = f"Duplicate variable {name!r} in pattern {pattern!r}"
            raise ConfigurationError(msg)
        seen.add(name)

        prefix = part[: placeholder.start()]
        suffix = part[placeholder.end() :]
        if param_type == "path" and (prefix or suffix or index != len(parts) - 1):
            msg = f"'{{{name}:path}}' must be a whole, final segment in pattern {pattern!r}"
            raise ConfigurationError(msg)

        regex = re.compile(
            f"{re.escape(prefix)}(?P<value>{CONVERTERS[param_type]}){re.escape(suffix)}"
        )
        segments.append(
            PathSegment(
                value=part,
                is_param=True,
                param_name=name,
                param_type=param_type,
                regex=regex,
            )
        )

    return tuple(segments)


def match_pattern(
    pattern: str | Sequence[PathSegment],
    path: str,
) -> dict[str, str] | None:
    """Match a concrete path against a pattern.

    Returns the variable bindings on success (empty for a literal pattern),
    or ``None`` when the path does not match.
    """
    segments = parse_pattern(pattern) if isinstance(pattern, str) else pattern
    parts = split_path(path)
    bindings: dict[str, str] = {}

    for index, seg in enumerate(segments):
        if index >= len(parts):
            return None
        if seg.is_rest:
            bindings[seg.param_name or "path"] = "/".join(parts[index:])
            return bindings

        part = parts[index]
        if not seg.is_param:
            if part != seg.value:
                return None
            continue

        assert seg.regex is not None
        m = seg.regex.fullmatch(part)
        if m is None:
            return None
        bindings[seg.param_name or ""] = m.group("value")

    if len(parts) != len(segments):
        return None
    return bindings
