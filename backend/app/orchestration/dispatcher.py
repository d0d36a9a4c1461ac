"""Rate-limited dispatch loop: one chunk at a time, strict priority order.

A single long-lived worker task loops:
1. Wait for work (or the interval, whichever comes first)
2. Wait until DISPATCH_INTERVAL has passed since the previous dispatch started
3. Dispatch one chunk: mark running, call the unit processor per identifier,
   mark done (the store re-derives the request status on each transition)

Faults escaping a cycle are logged and counted; the loop keeps going.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

from backend.app.db.repositories import IngestionStore
from backend.app.ingestion.errors import UnitProcessingError
from backend.app.models.ingestion import ProcessingStatus
from backend.app.orchestration.scheduler import PriorityScheduler, QueueEntry
from backend.app.tools.executor import UnitContext, UnitExecutor

logger = logging.getLogger(__name__)


# Metrics interface (implemented by PrometheusDispatchMetrics)
class DispatchMetrics:
    """Interface for dispatch loop metrics."""

    def inc_dispatched(self, priority: str) -> None:
        """Count a completed chunk."""
        pass

    def inc_loop_error(self) -> None:
        """Count a fault recovered at the loop boundary."""
        pass

    def set_queue_depth(self, depth: dict[str, int]) -> None:
        """Publish per-lane queue depth."""
        pass


# Logging interface (implemented by StructuredDispatchLogger)
class TransitionLogger:
    """Interface for chunk transition logging."""

    def log_transition(
        self,
        ingestion_id: str,
        chunk_id: str,
        status: str,
        priority: str,
        failed: int = 0,
    ) -> None:
        """Log a chunk status transition."""
        pass


class Dispatcher:
    """Single serialized worker draining the priority scheduler."""

    def __init__(
        self,
        store: IngestionStore,
        scheduler: PriorityScheduler,
        executor: UnitExecutor,
        interval_seconds: float,
        *,
        metrics: DispatchMetrics | None = None,
        transition_logger: TransitionLogger | None = None,
        clock: Callable[[], float] | None = None,
        sleep_fn: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        """Initialize dispatcher.

        Args:
            store: Ingestion store mutated on every chunk transition
            scheduler: Source of the next chunk
            executor: Runs the per-identifier unit calls
            interval_seconds: Minimum time between the starts of two dispatches
            metrics: Metrics recorder (optional, defaults to no-op)
            transition_logger: Structured logger (optional, defaults to no-op)
            clock: Monotonic clock (default: time.monotonic)
            sleep_fn: Injectable sleep function (default: asyncio.sleep)
        """
        self._store = store
        self._scheduler = scheduler
        self._executor = executor
        self._interval = interval_seconds
        self._metrics = metrics or DispatchMetrics()
        self._transitions = transition_logger or TransitionLogger()
        self._clock = clock or time.monotonic
        self._sleep = sleep_fn or asyncio.sleep

        self._busy = False
        self._idle = asyncio.Event()
        self._idle.set()
        self._last_started: float | None = None
        self._task: asyncio.Task[None] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._wakeup: asyncio.Event | None = None

    @property
    def is_running(self) -> bool:
        """Whether the worker task is alive."""
        if self._task is None or self._task.done():
            return False
        # A task left behind on a closed loop never completes
        return self._loop is not None and not self._loop.is_closed()

    @property
    def is_busy(self) -> bool:
        """Whether a chunk is being dispatched right now."""
        return self._busy

    @property
    def last_started(self) -> float | None:
        """Clock reading at the start of the most recent dispatch."""
        return self._last_started

    def start(self) -> None:
        """Start the worker task on the running event loop (idempotent).

        Raises:
            RuntimeError: If called outside a running event loop, or while the
                worker is alive on another loop
        """
        loop = asyncio.get_running_loop()
        if self.is_running:
            if self._loop is loop:
                return
            raise RuntimeError("Dispatcher is already running on another event loop")

        self._loop = loop
        self._wakeup = asyncio.Event()
        self._idle = asyncio.Event()
        if not self._busy:
            self._idle.set()
        self._task = loop.create_task(self._run(), name="ingestion-dispatcher")
        logger.info(f"[dispatcher] started interval={self._interval}s")

    async def stop(self) -> None:
        """Stop the worker task and wait for it to finish.

        A chunk already marked running is processed to completion first;
        queued chunks stay queued.
        """
        task = self._task
        if task is None:
            return

        if self._loop is not None and self._loop.is_closed():
            self._task = None
            logger.info("[dispatcher] stopped (event loop already closed)")
            return

        # Worker counts as running until the in-flight chunk is done
        while not task.done() and self._busy:
            await self._idle.wait()
        self._task = None

        if not task.done():
            # No await between the idle check and cancel
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        logger.info("[dispatcher] stopped")

    def notify(self) -> None:
        """Wake the worker after new work was enqueued. Safe from any thread."""
        loop, wakeup = self._loop, self._wakeup
        if loop is None or wakeup is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(wakeup.set)

    async def dispatch_once(self) -> bool:
        """Run one dispatch cycle.

        Returns:
            True if a chunk was dispatched, False if busy or nothing queued
        """
        if self._busy:
            return False

        self._busy = True
        self._idle.clear()
        try:
            entry = self._scheduler.select_next()
            if entry is None:
                return False

            self._last_started = self._clock()
            await self._dispatch(entry)
            return True
        finally:
            self._busy = False
            self._idle.set()
            self._publish_depth()

    async def _dispatch(self, entry: QueueEntry) -> None:
        priority = entry.priority.value

        self._store.mark_chunk_running(entry.ingestion_id, entry.chunk_id)
        self._transitions.log_transition(
            entry.ingestion_id, entry.chunk_id, ProcessingStatus.running.name, priority
        )

        failed_ids: list[int] = []
        for identifier in entry.ids:
            ctx = UnitContext(
                ingestion_id=entry.ingestion_id,
                chunk_id=entry.chunk_id,
                identifier=identifier,
            )
            try:
                await self._executor.execute(ctx)
            except UnitProcessingError as e:
                # Continue with the rest of the chunk
                logger.warning(f"[dispatcher] chunk={entry.chunk_id} id={identifier} failed: {e}")
                failed_ids.append(identifier)

        self._store.mark_chunk_done(entry.ingestion_id, entry.chunk_id, failed_ids)
        self._transitions.log_transition(
            entry.ingestion_id,
            entry.chunk_id,
            ProcessingStatus.done.name,
            priority,
            failed=len(failed_ids),
        )
        self._metrics.inc_dispatched(priority)

    async def _run(self) -> None:
        while True:
            try:
                await self._wait_for_work()
                await self._wait_for_interval()
                await self.dispatch_once()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("[dispatcher] dispatch cycle failed, retrying after interval")
                self._metrics.inc_loop_error()
                await self._sleep(self._interval)

    async def _wait_for_work(self) -> None:
        wakeup = self._wakeup
        if wakeup is None:
            return

        while len(self._scheduler) == 0:
            wakeup.clear()
            if len(self._scheduler) > 0:
                break
            try:
                await asyncio.wait_for(wakeup.wait(), timeout=self._interval)
            except TimeoutError:
                pass

    async def _wait_for_interval(self) -> None:
        if self._last_started is None:
            return

        # Loop guards against the event loop waking a hair early
        remaining = self._last_started + self._interval - self._clock()
        while remaining > 0:
            await self._sleep(remaining)
            remaining = self._last_started + self._interval - self._clock()

    def _publish_depth(self) -> None:
        depth = self._scheduler.depth()
        self._metrics.set_queue_depth({p.value: n for p, n in depth.items()})
