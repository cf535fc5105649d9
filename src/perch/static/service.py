"""ResourceService — the resource-serving pipeline for one mount.

Flow for each request::

    raw path ──► resolve ──► negotiate (stat .gz?, stat identity)
                                 │
                                 ▼
             to_response ◄── assemble ◄── evaluate (If-Modified-Since)

Stateless per request. The only shared pieces are the frozen
``MountConfig`` and a ``WorkerPool`` bounding how many blocking loader
calls run at once.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from perch._internal.pool import WorkerPool
from perch.http.request import Request
from perch.http.response import FileResponse, Response
from perch.static.assembler import assemble, to_response
from perch.static.conditional import evaluate
from perch.static.encoding import negotiate, parse_accept_encoding
from perch.static.loader import ResourceMetadata
from perch.static.outcome import BadRequest, NotFound, Ok, Outcome
from perch.static.paths import (
    PathNotMounted,
    PathRejected,
    ResolvedPath,
    RootRequested,
    resolve,
)

if TYPE_CHECKING:
    from perch.config import MountConfig

logger = logging.getLogger("perch.static")

# Methods a mount answers; everything else is left to the next handler
SERVED_METHODS = frozenset({"GET", "HEAD"})

DEFAULT_BLOCKING_THREADS = 40


class ResourceService:
    """Serve resources for one ``MountConfig``.

    Usage::

        service = ResourceService(MountConfig.for_directory("./public"))
        outcome = await service.serve(request)

    Several services may share one pool, so the whole app stays within a
    single bound on blocking threads.
    """

    __slots__ = ("config", "pool")

    def __init__(self, config: MountConfig, *, pool: WorkerPool | None = None) -> None:
        self.config = config
        self.pool = pool if pool is not None else WorkerPool(DEFAULT_BLOCKING_THREADS)

    async def stat(self, path: ResolvedPath) -> ResourceMetadata:
        """Look up *path* through the configured loader on the worker pool."""
        return await self.pool.run(self.config.loader.stat, path)

    async def serve(self, request: Request) -> Outcome:
        """Run the pipeline for *request* and return its outcome.

        Raises:
            StorageError: The loader failed for a reason other than
                the resource being absent.
        """
        if request.method not in SERVED_METHODS:
            return NotFound(f"method {request.method} is not served")

        try:
            path = resolve(request.raw_path, self.config)
        except PathRejected as exc:
            logger.warning("Rejected %s %s: %s", request.method, request.raw_path, exc.reason)
            return BadRequest(exc.reason)
        except PathNotMounted:
            return NotFound("outside mount prefix")
        except RootRequested:
            return NotFound("mount root")

        codings = parse_accept_encoding(request.accept_encoding)
        variant = await negotiate(path, codings, self.config, self.stat)
        freshness = evaluate(variant.metadata, request.if_modified_since)
        outcome = assemble(variant, freshness)
        if isinstance(outcome, NotFound):
            logger.debug("%s %s: %s", request.method, request.raw_path, outcome.reason)
        return outcome

    async def respond(self, request: Request) -> Response | FileResponse:
        """Serve *request* and render the outcome as a response.

        For a 200 the chosen variant is opened before the response is
        built, so an open failure never turns into a partial 200.
        """
        outcome = await self.serve(request)
        if not isinstance(outcome, Ok):
            return to_response(outcome, self.config)

        path = outcome.variant.path
        source = await self.pool.run(self.config.loader.open, path)
        if source is None:
            # Removed between stat and open
            return to_response(NotFound(f"{path} disappeared"), self.config)
        return to_response(outcome, self.config, source=source)

    def __repr__(self) -> str:
        return f"ResourceService({self.config!r})"
