"""``perch serve``: mount one resource source and start uvicorn."""

import argparse
import logging
import sys
from pathlib import Path

from perch.app import App
from perch.config import AppConfig, MountConfig
from perch.errors import ConfigurationError


def build_app(args: argparse.Namespace) -> App:
    """Build the App described by parsed ``perch serve`` arguments.

    Raises:
        ConfigurationError: A flag value is invalid or the directory
            does not exist.
    """
    defaults = AppConfig()
    config = AppConfig(
        host=args.host or defaults.host,
        port=args.port or defaults.port,
        debug=args.debug,
        log_level=args.log_level,
        blocking_threads=args.threads if args.threads is not None else defaults.blocking_threads,
    )

    if args.package:
        mount = MountConfig.for_package(args.source)
    else:
        directory = Path(args.source)
        if not directory.is_dir():
            msg = f"Not a directory: {args.source}"
            raise ConfigurationError(msg)
        mount = MountConfig.for_directory(directory)

    mount = (
        mount.with_path_prefix(args.prefix)
        .with_base_path(args.base)
        .with_prefer_gzip(args.gzip)
        .with_cache_control(args.cache_control)
    )

    app = App(config)
    app.mount(mount)
    return app


def serve(args: argparse.Namespace) -> None:
    """Start serving until interrupted."""
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        app = build_app(args)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    try:
        app.run()
    except RuntimeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
