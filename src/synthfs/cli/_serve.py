"""``synthfs serve``: load a filesystem by import string and serve it on stdio.

stdout carries the message channel, so logging always goes to stderr.
"""

import argparse
import dataclasses
import importlib
import logging
import sys
from typing import Any

from synthfs.app import Filesystem

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def load_filesystem(target: str, **overrides: Any) -> Filesystem:
    """Import ``module[:attr]`` and return the Filesystem it names.

    *attr* defaults to ``fs``. A callable that is not itself a Filesystem
    is treated as a factory and called with no arguments. Keyword
    *overrides* replace ``FSConfig`` fields; ``None`` values are skipped so
    unset CLI flags keep the filesystem's own settings.

    Usage::

        fs = load_filesystem("browser_routes:build", timeout=2.5)

    Raises ``ModuleNotFoundError`` or ``AttributeError`` when *target*
    names nothing, and ``TypeError`` when it does not lead to a Filesystem.
    """
    module_name, _, attr = target.partition(":")
    found = getattr(importlib.import_module(module_name), attr or "fs")

    if not isinstance(found, Filesystem) and callable(found):
        try:
            found = found()
        except Exception as exc:
            msg = f"Building a filesystem from {target!r} failed: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(found, Filesystem):
        msg = f"{target!r} is a {type(found).__name__}, expected a synthfs.Filesystem"
        raise TypeError(msg)

    changes = {name: value for name, value in overrides.items() if value is not None}
    if changes:
        found.config = dataclasses.replace(found.config, **changes)
    return found


def serve_filesystem(args: argparse.Namespace) -> None:
    """Load ``args.fs`` with the CLI's config overrides and serve it until EOF."""
    try:
        fs = load_filesystem(args.fs, timeout=args.timeout, log_level=args.log_level)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    level = "debug" if fs.config.debug else fs.config.log_level
    logging.basicConfig(level=level.upper(), format=_LOG_FORMAT, stream=sys.stderr)

    try:
        fs.serve()
    except KeyboardInterrupt:
        pass
