"""Tests for perch._internal.pool: the bounded worker pool."""

import threading
import time

import anyio
import pytest

from perch._internal.pool import WorkerPool


class TestWorkerPool:
    def test_rejects_zero(self) -> None:
        with pytest.raises(ValueError):
            WorkerPool(0)

    def test_limiter_created_lazily(self) -> None:
        # Safe to build outside an event loop
        pool = WorkerPool(4)
        assert pool._limiter is None
        assert repr(pool) == "WorkerPool(size=4)"

    @pytest.mark.asyncio
    async def test_runs_off_the_event_loop(self) -> None:
        pool = WorkerPool(2)
        loop_thread = threading.get_ident()
        worker_thread = await pool.run(threading.get_ident)
        assert worker_thread != loop_thread

    @pytest.mark.asyncio
    async def test_limiter_is_shared(self) -> None:
        pool = WorkerPool(2)
        assert pool.limiter is pool.limiter
        assert pool.limiter.total_tokens == 2

    @pytest.mark.asyncio
    async def test_bounds_concurrency(self) -> None:
        pool = WorkerPool(2)
        active = 0
        peak = 0
        lock = threading.Lock()

        def blocking() -> None:
            nonlocal active, peak
            with lock:
                active += 1
                peak = max(peak, active)
            time.sleep(0.02)
            with lock:
                active -= 1

        async with anyio.create_task_group() as tg:
            for _ in range(6):
                tg.start_soon(pool.run, blocking)

        assert peak <= 2
