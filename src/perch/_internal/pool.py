"""Bounded worker pool for blocking resource I/O.

Wraps ``anyio.to_thread.run_sync`` with one shared ``CapacityLimiter`` so
slow storage can tie up at most ``size`` threads and never the event loop.
The limiter is created lazily on first use, from inside the running event
loop.
"""

import threading
from collections.abc import Callable
from typing import Any

import anyio
import anyio.to_thread


class WorkerPool:
    """A size-bounded gate in front of anyio's worker threads."""

    __slots__ = ("_limiter", "_lock", "size")

    def __init__(self, size: int = 40) -> None:
        if size < 1:
            msg = f"WorkerPool size must be at least 1, got {size}"
            raise ValueError(msg)
        self.size = size
        self._limiter: anyio.CapacityLimiter | None = None
        self._lock = threading.Lock()

    @property
    def limiter(self) -> anyio.CapacityLimiter:
        if self._limiter is None:
            with self._lock:
                if self._limiter is None:
                    self._limiter = anyio.CapacityLimiter(self.size)
        return self._limiter

    async def run(self, func: Callable[..., Any], *args: Any) -> Any:
        """Run blocking *func* on a worker thread, waiting for a free slot."""
        return await anyio.to_thread.run_sync(func, *args, limiter=self.limiter)

    def __repr__(self) -> str:
        return f"WorkerPool(size={self.size})"
