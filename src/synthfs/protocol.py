"""Request/response envelopes exchanged with the filesystem host.

Request::

    {"id": 7, "op": "read", "path": "/tabs.json", "fh": 3, "offset": 0, "size": 4096}

Success response::

    {"id": 7, "op": "read", "buf": "W10="}

Error response::

    {"id": 7, "op": "read", "error": 2}

``buf`` is base64 text on the wire in both directions and raw bytes
everywhere else. A response carries either result fields or ``error``,
never both.
"""

import base64
import binascii
import json
from collections.abc import Mapping
from typing import Any

from synthfs.errors import Errno, MalformedRequest
from synthfs.request import Request

OPERATIONS: frozenset[str] = frozenset({
    "getattr",
    "open",
    "read",
    "write",
    "release",
    "truncate",
    # Directory and link operations, served by routes that opt in
    "readdir",
    "opendir",
    "releasedir",
    "readlink",
    "create",
    "unlink",
    "mkdir",
    "rmdir",
    "flush",
    "fsync",
    "chmod",
    "chown",
    "utimens",
})

# Envelope keys that are not operation-specific fields
_ENVELOPE_KEYS = frozenset({"id", "op", "path", "buf"})


def decode_buf(value: str) -> bytes:
    """Decode a base64 ``buf`` field. Raises ``MalformedRequest`` on bad input."""
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as exc:
        msg = f"'buf' is not valid base64: {exc}"
        raise MalformedRequest(msg) from exc


def encode_buf(value: bytes | bytearray | str) -> str:
    """Encode a result ``buf`` for the wire. Text is UTF-8 encoded first."""
    if isinstance(value, str):
        value = value.encode("utf-8")
    return base64.b64encode(bytes(value)).decode("ascii")


def decode_request(message: Any) -> Request:
    """Decode one host message into a ``Request``.

    Raises ``MalformedRequest`` if the envelope is not an object, lacks an
    ``id``, has a missing or non-string ``op``/``path``, or carries a
    ``buf`` that is not base64 text.
    """
    if not isinstance(message, Mapping):
        msg = f"Request envelope must be an object, got {type(message).__name__}"
        raise MalformedRequest(msg)
    if "id" not in message:
        raise MalformedRequest("Request envelope has no 'id'")

    op = message.get("op")
    if not isinstance(op, str) or not op:
        raise MalformedRequest("Request envelope has no 'op'")
    path = message.get("path")
    if not isinstance(path, str):
        raise MalformedRequest("Request envelope has no 'path'")

    buf: bytes | None = None
    raw_buf = message.get("buf")
    if raw_buf is not None:
        if not isinstance(raw_buf, str):
            raise MalformedRequest("'buf' must be base64 text")
        buf = decode_buf(raw_buf)

    fields = {k: v for k, v in message.items() if k not in _ENVELOPE_KEYS}
    return Request(id=message["id"], op=op, path=path, fields=fields, buf=buf)


def encode_response(request_id: Any, op: str, result: Mapping[str, Any] | None) -> dict[str, Any]:
    """Frame handler result fields as a success response.

    ``None`` is treated as an empty result. Raises ``TypeError`` for any
    other non-mapping result or for fields JSON cannot carry (a ``bytes``
    value outside ``buf``, a datetime). Raises ``ValueError`` if the result
    carries its own ``error`` field.
    """
    if result is None:
        result = {}
    if not isinstance(result, Mapping):
        msg = f"Operation {op!r} returned {type(result).__name__}, expected a mapping"
        raise TypeError(msg)
    if "error" in result:
        msg = f"Operation {op!r} returned an 'error' field; raise FSError instead"
        raise ValueError(msg)

    response: dict[str, Any] = {"id": request_id, "op": op}
    for key, value in result.items():
        if key in ("id", "op"):
            continue
        response[key] = encode_buf(value) if key == "buf" else value

    try:
        json.dumps(response)
    except (TypeError, ValueError) as exc:
        msg = f"Operation {op!r} returned a field that cannot be sent: {exc}"
        raise TypeError(msg) from exc
    return response


def error_response(request_id: Any, op: str | None, code: Errno) -> dict[str, Any]:
    """Frame an error response. Carries no result fields."""
    return {"id": request_id, "op": op, "error": int(code)}
