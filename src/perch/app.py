"""Perch application class.

Mutable during setup (mounts, middleware, lifecycle hooks).
Frozen at runtime when the first ASGI scope arrives.
"""

import inspect
import threading
from collections.abc import Callable
from typing import Any

from perch._internal.asgi import Receive, Scope, Send
from perch._internal.pool import WorkerPool
from perch.config import AppConfig, MountConfig
from perch.middleware.protocol import Middleware, Next
from perch.middleware.static import StaticResources
from perch.server.handler import build_chain, handle_request
from perch.static.service import ResourceService


class App:
    """The perch application.

    Usage::

        app = App(AppConfig(blocking_threads=8))
        app.mount(MountConfig.for_directory("./public").with_path_prefix("/static"))
        app.run()

    Mounts and middleware run in registration order. Every mount shares
    the app's worker pool, so ``AppConfig.blocking_threads`` bounds the
    blocking resource I/O of the whole app.

    The middleware chain is built once, by whichever caller gets there
    first; after that mounts, middleware and hooks can no longer change.
    """

    __slots__ = (
        "_freeze_lock",
        "_frozen",
        "_handler",
        "_middleware_list",
        "_pool",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
    )

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self._middleware_list: list[Middleware] = []
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._pool = WorkerPool(self.config.blocking_threads)
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()
        self._handler: Next | None = None

    @property
    def pool(self) -> WorkerPool:
        """The worker pool shared by every mount."""
        return self._pool

    # -- Mounts & middleware --

    def mount(self, config: MountConfig) -> StaticResources:
        """Serve resources described by *config*.

        Returns the middleware that was added.
        """
        self._check_not_frozen()
        middleware = StaticResources(ResourceService(config, pool=self._pool))
        self._middleware_list.append(middleware)
        return middleware

    def add_middleware(self, middleware: Middleware) -> None:
        """Add a middleware to the pipeline."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a sync or async hook to run at lifespan startup."""
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a sync or async hook to run at lifespan shutdown."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Serve the app with uvicorn until interrupted; *host*/*port* override the config."""
        from perch.server.run import run_server

        run_server(
            self,
            host or self.config.host,
            port or self.config.port,
            log_level=self.config.log_level,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return

        self._ensure_frozen()
        assert self._handler is not None

        await handle_request(
            scope,
            receive,
            send,
            handler=self._handler,
            debug=self.config.debug,
            chunk_size=self.config.chunk_size,
            pool=self._pool,
        )

    async def startup(self) -> None:
        """Freeze the app and run its startup hooks."""
        self._ensure_frozen()
        await _run_hooks(self._startup_hooks)

    async def shutdown(self) -> None:
        """Run the shutdown hooks."""
        await _run_hooks(self._shutdown_hooks)

    async def _handle_lifespan(self, scope: Scope, receive: Receive, send: Send) -> None:
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                try:
                    await self.startup()
                except Exception as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        if self._frozen:
            return
        with self._freeze_lock:
            if not self._frozen:
                self._handler = build_chain(tuple(self._middleware_list))
                self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = "App is already serving; mount, add middleware and register hooks first"
            raise RuntimeError(msg)


async def _run_hooks(hooks: list[Callable[..., Any]]) -> None:
    """Call each hook in order, awaiting the async ones."""
    for hook in hooks:
        result = hook()
        if inspect.isawaitable(result):
            await result
