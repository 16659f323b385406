"""synthfs CLI: serve a filesystem to a host over stdio.

Entry point registered as ``synthfs`` in ``pyproject.toml``::

    [project.scripts]
    synthfs = "synthfs.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``synthfs`` command."""
    parser = argparse.ArgumentParser(
        prog="synthfs",
        description="synthfs: serve live state as a synthetic filesystem.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- synthfs serve ----------------------------------------------------
    serve_parser = subparsers.add_parser(
        "serve",
        help="Serve a filesystem over stdin/stdout (length-prefixed JSON)",
    )
    serve_parser.add_argument(
        "fs",
        help="Import string (e.g. myroutes:fs)",
    )
    serve_parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds before a request is answered with ETIMEDOUT",
    )
    serve_parser.add_argument(
        "--log-level",
        default=None,
        choices=["debug", "info", "warning", "error"],
        help="Log level (logs go to stderr)",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "serve":
        from synthfs.cli._serve import serve_filesystem

        serve_filesystem(args)
