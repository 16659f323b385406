"""Filename sanitization for routes that turn live data into path segments.

Tab titles, window names and the like can contain anything. ``sanitize()``
makes them safe to use as a single filename on any host OS.
"""

import re

_ILLEGAL = re.compile(r'[/?<>\\:*|" ]')
_CONTROL = re.compile(r"[\x00-\x1f\x80-\x9f]")
_RESERVED = re.compile(r"^\.+$")
_WINDOWS_RESERVED = re.compile(r"^(con|prn|aux|nul|com[0-9]|lpt[0-9])(\..*)?$", re.IGNORECASE)
_WINDOWS_TRAILING = re.compile(r"[. ]+$")

MAX_NAME_LENGTH = 200


def sanitize(name: str, replacement: str = "_") -> str:
    """Replace characters that are illegal in filenames and cap the length.

    Spaces count as illegal. All-dot names (``.``, ``..``) and Windows
    device names (``CON``, ``lpt1.txt``) are replaced wholesale.

        >>> sanitize("GitHub: home / feed")
        'GitHub__home___feed'
    """
    if not isinstance(name, str):
        msg = f"sanitize() expects str, got {type(name).__name__}"
        raise TypeError(msg)
    cleaned = _ILLEGAL.sub(replacement, name)
    cleaned = _CONTROL.sub(replacement, cleaned)
    cleaned = _RESERVED.sub(replacement, cleaned)
    cleaned = _WINDOWS_RESERVED.sub(replacement, cleaned)
    cleaned = _WINDOWS_TRAILING.sub(replacement, cleaned)
    return cleaned[:MAX_NAME_LENGTH]
