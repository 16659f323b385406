"""Request dispatcher: resolve, invoke under a deadline, frame the response.

Each host message goes through one pipeline::

    1. Decode the envelope (base64 ``buf`` -> bytes)
    2. Resolve the path to a route + bindings (sidecar/not-found answered here)
    3. Arm the deadline, invoke the operation handler
    4. Map failures to error codes (FSError -> its code, anything else -> EIO)
    5. Frame the response (bytes ``buf`` -> base64), attach op and id

At most one response is sent per request id. When the deadline fires
first, an ETIMEDOUT response goes out immediately and the handler's
eventual result is discarded. The handler itself is not cancelled: it
runs to completion (or failure) inside this call, so no task is left
unresolved.
"""

import logging
from collections.abc import Mapping
from typing import Any

import anyio

from synthfs._internal.invoke import invoke
from synthfs._internal.types import Handler, Send
from synthfs.config import FSConfig
from synthfs.errors import Errno, FSError, MalformedRequest, NotSupported
from synthfs.protocol import OPERATIONS, decode_request, encode_response, error_response
from synthfs.request import Request
from synthfs.routing.registry import RouteRegistry
from synthfs.routing.route import RouteMatch

logger = logging.getLogger("synthfs.dispatch")


class _Reply:
    """At-most-once latch for one request's response."""

    __slots__ = ("sent",)

    def __init__(self) -> None:
        self.sent = False

    def claim(self) -> bool:
        """Return True exactly once: the caller owns the response slot."""
        if self.sent:
            return False
        self.sent = True
        return True


class Dispatcher:
    """Dispatches decoded host messages to route operation handlers.

    Requests are independent: ``dispatch()`` may run concurrently for any
    number of messages, with no ordering between them.

    Usage::

        dispatcher = Dispatcher(registry, config=FSConfig(timeout=1.0))
        await dispatcher.dispatch({"id": 1, "op": "getattr", "path": "/tabs.json"}, send)
    """

    __slots__ = ("_registry", "config")

    def __init__(self, registry: RouteRegistry, *, config: FSConfig | None = None) -> None:
        self.config: FSConfig = config or FSConfig()
        self._registry = self._checked(registry)

    @property
    def registry(self) -> RouteRegistry:
        return self._registry

    def install(self, registry: RouteRegistry) -> None:
        """Swap in a new compiled route set. In-flight requests keep their route."""
        self._registry = self._checked(registry)
        logger.info("Installed %d route(s)", len(registry))

    # -- Pipeline --

    async def dispatch(self, message: Any, send: Send) -> None:
        """Handle one host message, sending exactly one response (or none
        for an envelope too broken to carry an id)."""
        try:
            request = decode_request(message)
        except MalformedRequest as exc:
            await self._reject(message, exc, send)
            return

        logger.debug(
            "req id=%r op=%s path=%s buf=%s",
            request.id, request.op, request.path,
            "-" if request.buf is None else f"{len(request.buf)} bytes",
        )

        try:
            match = self._resolve(request)
        except FSError as exc:
            logger.debug("resolve failed for %s %s: %s", request.op, request.path, exc)
            await _deliver(send, error_response(request.id, request.op, exc.code))
            return
        except Exception:
            logger.exception("Route resolution crashed for %s %s", request.op, request.path)
            await _deliver(send, error_response(request.id, request.op, Errno.EIO))
            return

        handler = match.route.operations[request.op]
        request = request.with_bindings(match.bindings)
        reply = _Reply()

        async with anyio.create_task_group() as tg:
            tg.start_soon(self._watchdog, request, reply, send)
            response = await self._run(handler, request)
            tg.cancel_scope.cancel()

        if reply.claim():
            logger.debug("resp %s", _describe(response))
            await _deliver(send, response)
        else:
            logger.debug(
                "Discarded late response for id=%r (%s %s)", request.id, request.op, request.path
            )

    def _resolve(self, request: Request) -> RouteMatch:
        if request.op not in OPERATIONS:
            raise NotSupported(f"Unknown operation {request.op!r}")
        match = self._registry.resolve(request.path)
        if not match.route.supports(request.op):
            raise NotSupported(f"{match.route.pattern!r} does not implement {request.op!r}")
        return match

    async def _run(self, handler: Handler, request: Request) -> dict[str, Any]:
        """Invoke the handler and frame its outcome. Never raises for
        handler failures."""
        try:
            result = await invoke(handler, request)
            return encode_response(request.id, request.op, result)
        except FSError as exc:
            logger.debug("%s %s failed: %s", request.op, request.path, exc)
            return error_response(request.id, request.op, exc.code)
        except Exception:
            logger.exception("Unhandled error in %s %s", request.op, request.path)
            return error_response(request.id, request.op, Errno.EIO)

    async def _watchdog(self, request: Request, reply: _Reply, send: Send) -> None:
        await anyio.sleep(self.config.timeout)
        if reply.claim():
            logger.warning(
                "Timed out after %.3fs: %s %s (id=%r)",
                self.config.timeout, request.op, request.path, request.id,
            )
            # Once claimed the timeout response must go out even if the
            # handler finishes while it is being sent.
            with anyio.CancelScope(shield=True):
                await _deliver(send, error_response(request.id, request.op, Errno.ETIMEDOUT))

    async def _reject(self, message: Any, exc: MalformedRequest, send: Send) -> None:
        request_id = message.get("id") if isinstance(message, Mapping) else None
        op = message.get("op") if isinstance(message, Mapping) else None
        if request_id is None:
            logger.error("Dropped malformed request without an id: %s", exc)
            return
        logger.error("Malformed request id=%r: %s", request_id, exc)
        op = op if isinstance(op, str) else None
        await _deliver(send, error_response(request_id, op, Errno.EIO))

    @staticmethod
    def _checked(registry: RouteRegistry) -> RouteRegistry:
        if not registry.compiled:
            msg = "Dispatcher needs a compiled RouteRegistry; call compile() first."
            raise RuntimeError(msg)
        return registry


async def _deliver(send: Send, response: dict[str, Any]) -> None:
    """Send one response. A failed send is logged and never reaches sibling requests."""
    try:
        await send(response)
    except Exception:
        logger.exception(
            "Failed to send response id=%r op=%s", response.get("id"), response.get("op")
        )


def _describe(response: dict[str, Any]) -> str:
    """Summarize a response for logs without dumping payload bytes."""
    parts = []
    for key, value in response.items():
        if key == "buf":
            parts.append(f"buf={len(value)} chars")
        else:
            parts.append(f"{key}={value!r}")
    return " ".join(parts)
