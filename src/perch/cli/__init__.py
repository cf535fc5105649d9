"""Perch CLI: serve a directory or package over HTTP.

Entry point registered as ``perch`` in ``pyproject.toml``::

    [project.scripts]
    perch = "perch.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``perch`` command."""
    parser = argparse.ArgumentParser(
        prog="perch",
        description="Perch: static resources over ASGI.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- perch serve ------------------------------------------------------
    serve_parser = subparsers.add_parser("serve", help="Serve a directory or package")
    serve_parser.add_argument(
        "source",
        help="Directory to serve (or package name with --package)",
    )
    serve_parser.add_argument(
        "--package",
        action="store_true",
        help="Treat SOURCE as an importable package name",
    )
    serve_parser.add_argument("--prefix", default="", help="URL prefix to mount under")
    serve_parser.add_argument("--base", default="", help="Sub-path inside SOURCE to serve from")
    serve_parser.add_argument(
        "--gzip",
        action="store_true",
        help="Serve pre-compressed .gz siblings to clients that accept gzip",
    )
    serve_parser.add_argument(
        "--cache-control",
        default=None,
        help="Cache-Control value sent with every resource",
    )
    serve_parser.add_argument("--host", default=None, help="Bind host address")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    serve_parser.add_argument(
        "--threads",
        type=int,
        default=None,
        help="Worker threads for blocking file I/O",
    )
    serve_parser.add_argument(
        "--log-level",
        default="info",
        choices=["critical", "error", "warning", "info", "debug"],
        help="Logging verbosity",
    )
    serve_parser.add_argument("--debug", action="store_true", help="Detailed error bodies")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "serve":
        from perch.cli._serve import serve

        serve(args)
