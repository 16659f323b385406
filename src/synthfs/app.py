"""synthfs filesystem class.

Mutable during setup (route registration). Frozen when it starts
serving, or when its dispatcher is first requested.
"""

import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import anyio

from synthfs._internal.types import Handler, Operations, Send
from synthfs.config import FSConfig
from synthfs.content import ContentFile, GetData, SetData
from synthfs.dispatcher import Dispatcher
from synthfs.errors import ConfigurationError
from synthfs.handles import HandleCache
from synthfs.nodes import ListEntries, ResolveTarget, directory_operations, symlink_operations
from synthfs.routing.pattern import parse_pattern
from synthfs.routing.registry import RouteRegistry

# Builds a route's operation set once the shared handle cache is known
OperationsFactory = Callable[[HandleCache], Operations]


@dataclass(slots=True)
class _PendingRoute:
    """A route waiting to be compiled."""

    pattern: str
    build: OperationsFactory
    name: str | None = None


class Filesystem:
    """The synthfs filesystem.

    Mutable during setup (route registration). Frozen at runtime when
    ``serve()`` runs or ``dispatcher`` is first read.

    Usage::

        fs = Filesystem()

        @fs.file("/tabs.json")
        async def tabs(request):
            return json.dumps(await browser.tabs())

        fs.content("/title.txt", get_title, set_title)
        fs.directory("/tabs", list_tab_ids)

    Thread safety:
        Setup is single-threaded (decorators at import time). The freeze
        transition uses a Lock + double-check so exactly one caller
        compiles the route table.
    """

    __slots__ = (
        "_dispatcher",
        "_freeze_lock",
        "_frozen",
        "_pending",
        "config",
        "handles",
    )

    def __init__(
        self,
        config: FSConfig | None = None,
        *,
        handles: HandleCache | None = None,
    ) -> None:
        self.config: FSConfig = config or FSConfig()
        self.handles: HandleCache = handles if handles is not None else HandleCache()
        self._pending: list[_PendingRoute] = []
        self._frozen = False
        self._freeze_lock = threading.Lock()
        self._dispatcher: Dispatcher | None = None

    # -- Route registration --

    def route(
        self,
        pattern: str,
        operations: Operations,
        *,
        name: str | None = None,
    ) -> None:
        """Register a route with a full, hand-written operation set."""
        ops = dict(operations)
        self._add(pattern, lambda _handles: ops, name)

    def content(
        self,
        pattern: str,
        get_data: GetData,
        set_data: SetData | None = None,
        *,
        name: str | None = None,
        **overrides: Handler,
    ) -> None:
        """Register a content-backed file built from a read/write accessor pair.

        Keyword *overrides* replace individual operations of the default set.
        """

        def build(handles: HandleCache) -> Operations:
            return ContentFile(get_data, set_data, handles=handles).operations(**overrides)

        self._add(pattern, build, name)

    def file(
        self,
        pattern: str,
        *,
        set_data: SetData | None = None,
        name: str | None = None,
        **overrides: Handler,
    ) -> Callable[[GetData], GetData]:
        """Register the decorated function as a content-backed file's read accessor."""

        def decorator(get_data: GetData) -> GetData:
            self.content(pattern, get_data, set_data, name=name, **overrides)
            return get_data

        return decorator

    def content_file(
        self,
        pattern: str,
        factory: Callable[[HandleCache], ContentFile],
        *,
        name: str | None = None,
        **overrides: Handler,
    ) -> None:
        """Register a ``ContentFile`` subclass instance, built with the shared cache.

        Usage::

            fs.content_file("/tabs/{id}/screenshot.png",
                            lambda handles: Screenshot(capture, handles=handles))
        """
        self._add(pattern, lambda handles: factory(handles).operations(**overrides), name)

    def directory(
        self, pattern: str, list_entries: ListEntries, *, name: str | None = None
    ) -> None:
        """Register a directory whose entries are computed per request."""
        self._add(pattern, lambda _handles: directory_operations(list_entries), name)

    def symlink(
        self, pattern: str, resolve_target: ResolveTarget, *, name: str | None = None
    ) -> None:
        """Register a symlink whose target is computed per request."""
        self._add(pattern, lambda _handles: symlink_operations(resolve_target), name)

    # -- Runtime --

    @property
    def dispatcher(self) -> Dispatcher:
        """The compiled dispatcher. Freezes the filesystem on first access."""
        self._ensure_frozen()
        assert self._dispatcher is not None
        return self._dispatcher

    async def dispatch(self, message: Any, send: Send) -> None:
        """Handle one host message. See ``Dispatcher.dispatch``."""
        await self.dispatcher.dispatch(message, send)

    def reload(self, source: "Filesystem") -> None:
        """Hot-replace the whole route set with *source*'s routes.

        *source* is compiled against this filesystem's handle cache, so
        handles opened before the swap stay valid. Individual routes are
        never mutated; the new table is installed in one step.
        """
        registry = source._compile(self.handles, sidecar_prefix=self.config.sidecar_prefix)
        self.dispatcher.install(registry)

    def serve(self) -> None:
        """Serve this filesystem over stdin/stdout until the host hangs up."""
        from synthfs.transport import MessageChannel, serve, stdio_stream

        dispatcher = self.dispatcher
        channel = MessageChannel(stdio_stream(), max_message_size=self.config.max_message_size)
        anyio.run(serve, dispatcher, channel)

    # -- Internal --

    def _add(self, pattern: str, build: OperationsFactory, name: str | None) -> None:
        self._check_not_frozen()
        # Fail at registration, not at freeze
        parse_pattern(pattern)
        if any(p.pattern == pattern for p in self._pending):
            msg = f"Route {pattern!r} is already registered"
            raise ConfigurationError(msg)
        self._pending.append(_PendingRoute(pattern, build, name))

    def _compile(self, handles: HandleCache, *, sidecar_prefix: str) -> RouteRegistry:
        registry = RouteRegistry(sidecar_prefix=sidecar_prefix)
        for pending in self._pending:
            registry.add(pending.pattern, pending.build(handles), name=pending.name)
        registry.compile()
        return registry

    def _ensure_frozen(self) -> None:
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the route table and build the dispatcher.

        MUST only be called while holding _freeze_lock.
        """
        registry = self._compile(self.handles, sidecar_prefix=self.config.sidecar_prefix)
        self._dispatcher = Dispatcher(registry, config=self.config)
        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot add routes after the filesystem has started serving. "
                "Register routes before serve(), or build a new Filesystem and reload() it."
            )
            raise RuntimeError(msg)
