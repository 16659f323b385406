"""Message channel to the filesystem host.

Each message is UTF-8 JSON preceded by a 4-byte unsigned length in native
byte order, the framing browsers use for native-messaging hosts::

    [len:uint32][{"id": 1, "op": "getattr", "path": "/tabs.json"}]

``serve()`` reads messages until the host closes the channel and
dispatches each one concurrently. Responses share the channel, so sends
are serialized with a lock and frames never interleave.
"""

import itertools
import json
import logging
import struct
import sys
from typing import Any

import anyio
from anyio.abc import ByteStream
from anyio.streams.buffered import BufferedByteReceiveStream

from synthfs.dispatcher import Dispatcher
from synthfs.errors import MalformedRequest

logger = logging.getLogger("synthfs.transport")

_HEADER = struct.Struct("=I")
_CHUNK = 65536


class StdioStream(ByteStream):
    """Byte stream over this process's stdin/stdout.

    Reads and writes run in worker threads via ``anyio.wrap_file``.
    Closing the stream flushes stdout but leaves the process's stdio open.
    """

    def __init__(self, stdin: anyio.AsyncFile[bytes], stdout: anyio.AsyncFile[bytes]) -> None:
        self._stdin = stdin
        self._stdout = stdout

    async def receive(self, max_bytes: int = _CHUNK) -> bytes:
        data = await self._stdin.read1(max_bytes)
        if not data:
            raise anyio.EndOfStream
        return data

    async def send(self, item: bytes) -> None:
        await self._stdout.write(item)
        await self._stdout.flush()

    async def send_eof(self) -> None:
        await self._stdout.flush()

    async def aclose(self) -> None:
        await self._stdout.flush()


def stdio_stream() -> StdioStream:
    """Wrap the process's binary stdin/stdout."""
    return StdioStream(anyio.wrap_file(sys.stdin.buffer), anyio.wrap_file(sys.stdout.buffer))


class MessageChannel:
    """Length-prefixed JSON messages over any anyio byte stream.

    Usage::

        channel = MessageChannel(stdio_stream())
        message = await channel.receive()
        await channel.send({"id": message["id"], "op": message["op"], "st_size": 2})
    """

    __slots__ = ("_max_message_size", "_receiver", "_send_lock", "_stream")

    def __init__(self, stream: ByteStream, *, max_message_size: int = 64 * 1024 * 1024) -> None:
        self._stream = stream
        self._receiver = BufferedByteReceiveStream(stream)
        self._send_lock = anyio.Lock()
        self._max_message_size = max_message_size

    async def receive(self) -> Any:
        """Read the next message.

        Raises ``anyio.EndOfStream`` when the host closes the channel (a
        frame cut off mid-way counts as closed). Raises ``MalformedRequest``
        for an oversized frame or a body that is not JSON; the frame is
        consumed either way so the next call starts on a frame boundary.
        """
        try:
            header = await self._receiver.receive_exactly(_HEADER.size)
        except anyio.IncompleteRead:
            raise anyio.EndOfStream from None
        (length,) = _HEADER.unpack(header)

        if length > self._max_message_size:
            await self._discard(length)
            msg = f"Message of {length} bytes exceeds limit of {self._max_message_size}"
            raise MalformedRequest(msg)

        try:
            body = await self._receiver.receive_exactly(length)
        except anyio.IncompleteRead:
            logger.warning("Channel closed inside a %d-byte frame", length)
            raise anyio.EndOfStream from None

        try:
            return json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            msg = f"Message is not JSON: {exc}"
            raise MalformedRequest(msg) from exc

    async def send(self, message: dict[str, Any]) -> None:
        """Frame and write one message."""
        payload = json.dumps(message, separators=(",", ":")).encode("utf-8")
        async with self._send_lock:
            await self._stream.send(_HEADER.pack(len(payload)) + payload)

    async def aclose(self) -> None:
        await self._stream.aclose()

    async def _discard(self, length: int) -> None:
        remaining = length
        while remaining:
            chunk = await self._receiver.receive(min(remaining, _CHUNK))
            remaining -= len(chunk)


async def serve(dispatcher: Dispatcher, channel: MessageChannel) -> None:
    """Dispatch messages from *channel* until the host closes it.

    Each message runs in its own task, so a slow handler never holds up
    the next request. Once the channel is closed, in-flight requests get
    ``config.shutdown_grace`` seconds to finish; whatever is still running
    after that is cancelled, since no one is left to read its response.
    """
    in_flight: dict[int, Any] = {}
    tickets = itertools.count()

    async def run(message: Any) -> None:
        ticket = next(tickets)
        in_flight[ticket] = message.get("id") if isinstance(message, dict) else None
        await dispatcher.dispatch(message, channel.send)
        del in_flight[ticket]

    logger.info("Serving %d route(s)", len(dispatcher.registry))
    async with anyio.create_task_group() as tg:
        while True:
            try:
                message = await channel.receive()
            except anyio.EndOfStream:
                logger.info("Host closed the channel")
                break
            except MalformedRequest as exc:
                logger.error("Skipping undecodable message: %s", exc)
                continue
            tg.start_soon(run, message)
        tg.cancel_scope.deadline = anyio.current_time() + dispatcher.config.shutdown_grace

    if in_flight:
        logger.warning(
            "Abandoned %d request(s) still running after shutdown: ids=%r",
            len(in_flight), sorted(in_flight.values(), key=repr),
        )
