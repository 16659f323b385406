"""synthfs: serve live, computed state as a synthetic filesystem.

A filesystem host (the process that talks to the kernel) forwards each
operation as a message; synthfs resolves the path to a route, runs the
route's handler against live state, and answers with a response the host
can hand straight back to the kernel.

Basic usage::

    from synthfs import Filesystem

    fs = Filesystem()

    @fs.file("/tabs.json")
    async def tabs(request):
        return json.dumps(await browser.tabs())

    fs.serve()  # length-prefixed JSON over stdin/stdout
"""

__version__ = "0.1.0"
__all__ = [
    "ConfigurationError",
    "ContentFile",
    "Dispatcher",
    "Errno",
    "FSConfig",
    "FSError",
    "Filesystem",
    "HandleCache",
    "NotFound",
    "NotSupported",
    "PermissionDenied",
    "Request",
    "RouteRegistry",
    "StaleHandle",
    "SynthFSError",
    "TimedOut",
    "content_operations",
    "directory_operations",
    "sanitize",
    "symlink_operations",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import synthfs`` fast while providing a clean top-level API.
    """
    if name == "Filesystem":
        from synthfs.app import Filesystem

        return Filesystem

    if name == "FSConfig":
        from synthfs.config import FSConfig

        return FSConfig

    if name == "Dispatcher":
        from synthfs.dispatcher import Dispatcher

        return Dispatcher

    if name == "Request":
        from synthfs.request import Request

        return Request

    if name == "RouteRegistry":
        from synthfs.routing.registry import RouteRegistry

        return RouteRegistry

    if name == "HandleCache":
        from synthfs.handles import HandleCache

        return HandleCache

    if name in ("ContentFile", "content_operations"):
        from synthfs import content as _content

        return getattr(_content, name)

    if name in ("directory_operations", "symlink_operations"):
        from synthfs import nodes as _nodes

        return getattr(_nodes, name)

    if name == "sanitize":
        from synthfs.naming import sanitize

        return sanitize

    if name in (
        "ConfigurationError",
        "Errno",
        "FSError",
        "NotFound",
        "NotSupported",
        "PermissionDenied",
        "StaleHandle",
        "SynthFSError",
        "TimedOut",
    ):
        from synthfs import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
