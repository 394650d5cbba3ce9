"""Fixed-size worker pool with blocking submission and bounded shutdown."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any

from reviewstore.lib.logging_config import get_logger

logger = get_logger("ingestion.pool")


class BoundedWorkerPool:
    """Run tasks on a fixed number of threads with a bounded backlog.

    At most ``workers + queue_size`` tasks are pending at once. ``submit``
    blocks the caller while the backlog is full, which keeps a fast
    reader from running ahead of slow writes.

    Args:
        workers: Number of worker threads.
        queue_size: Tasks allowed to wait for a free worker.
        name: Thread name prefix.
    """

    def __init__(self, *, workers: int, queue_size: int, name: str = "ingest") -> None:
        if workers < 1 or queue_size < 0:
            msg = f"Invalid pool size: workers={workers}, queue_size={queue_size}"
            raise ValueError(msg)
        self.workers = workers
        self.queue_size = queue_size
        self._executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix=name)
        self._slots = threading.BoundedSemaphore(workers + queue_size)
        self._pending: set[Future] = set()
        self._lock = threading.Lock()
        self._closed = False

    @property
    def pending(self) -> int:
        """Tasks submitted but not yet finished."""
        with self._lock:
            return len(self._pending)

    def submit(
        self,
        fn: Callable[..., Any],
        *args: Any,
        deadline: float | None = None,
    ) -> bool:
        """Submit a task, blocking while the backlog is full.

        Args:
            fn: Task callable.
            *args: Positional arguments for ``fn``.
            deadline: ``time.monotonic()`` value after which to stop waiting
                for a free slot. ``None`` waits indefinitely.

        Returns:
            True if the task was queued, False if the deadline passed first.

        Raises:
            RuntimeError: If the pool has been shut down.
        """
        if self._closed:
            msg = "Cannot submit to a pool that has been shut down"
            raise RuntimeError(msg)

        timeout = None if deadline is None else max(0.0, deadline - time.monotonic())
        if not self._slots.acquire(timeout=timeout):
            return False

        try:
            future = self._executor.submit(fn, *args)
        except BaseException:
            self._slots.release()
            raise
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._release)
        return True

    def _release(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)
        if not future.cancelled() and future.exception() is not None:
            error = future.exception()
            logger.error("Pool task raised %s: %s", type(error).__name__, error, exc_info=error)
        self._slots.release()

    def shutdown(self, *, deadline: float | None = None, grace: float = 0.0) -> bool:
        """Stop accepting work and wait for submitted tasks to finish.

        If the deadline passes first, tasks that have not started are
        cancelled and running tasks get ``grace`` more seconds.

        Args:
            deadline: ``time.monotonic()`` value to wait until. ``None``
                waits indefinitely.
            grace: Extra seconds granted to running tasks after a timeout.

        Returns:
            True if every task finished, False if the deadline expired.
        """
        self._closed = True
        with self._lock:
            pending = set(self._pending)

        timeout = None if deadline is None else max(0.0, deadline - time.monotonic())
        _, not_done = wait(pending, timeout=timeout)
        if not not_done:
            self._executor.shutdown(wait=True)
            return True

        logger.warning(
            "Pool deadline expired with %d task(s) outstanding; cancelling queued work",
            len(not_done),
        )
        self._executor.shutdown(wait=False, cancel_futures=True)
        _, still_running = wait(not_done, timeout=grace)
        if still_running:
            logger.error("%d task(s) still running after %.1fs grace", len(still_running), grace)
        return False
