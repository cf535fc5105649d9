"""Serve a live perch App with uvicorn.

uvicorn is an optional dependency (``pip install perch[server]``), imported
only when a server is actually started.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from perch.app import App

logger = logging.getLogger("perch.server")


def run_server(app: App, host: str, port: int, *, log_level: str = "info") -> None:
    """Start uvicorn with the given App and block until it exits.

    uvicorn accepts a live ASGI callable, so the app is passed as-is and
    freezes during the lifespan startup.
    """
    try:
        import uvicorn
    except ImportError as exc:
        msg = "Serving requires uvicorn. Install it with: pip install perch[server]"
        raise RuntimeError(msg) from exc

    logger.info("Serving on http://%s:%d", host, port)
    uvicorn.run(app, host=host, port=port, log_level=log_level, lifespan="on")
