"""Ingestion service: owns the store, scheduler and dispatcher.

One instance per application, injected into route handlers. Store and
scheduler share a single lock, so a submission (store + enqueue) is atomic
with respect to dispatch mutations and status reads.
"""

import logging
import threading
import time
import uuid
from datetime import UTC, datetime
from typing import Any

from backend.app.config import Settings
from backend.app.db.inmemory import InMemoryIngestionStore
from backend.app.db.repositories import IngestionRecord
from backend.app.ingestion.batcher import build_chunks
from backend.app.ingestion.errors import IngestionNotFoundError
from backend.app.ingestion.validator import validate_submission
from backend.app.orchestration.dispatcher import Dispatcher
from backend.app.orchestration.scheduler import PriorityScheduler
from backend.app.tools.executor import SimulatedUnitProcessor, UnitExecutor, UnitProcessor
from backend.app.utils.logging import StructuredDispatchLogger
from backend.app.utils.metrics import PrometheusDispatchMetrics, PrometheusUnitMetrics

logger = logging.getLogger(__name__)


class IngestionService:
    """Submission and status operations over one scheduling engine."""

    def __init__(
        self,
        settings: Settings,
        processor: UnitProcessor | None = None,
        *,
        auto_start: bool = True,
    ) -> None:
        """Initialize service.

        Args:
            settings: Application settings (bounds, batch size, timings)
            processor: Unit processor (default: fixed-latency simulation)
            auto_start: Start the dispatcher on first submission if idle
        """
        self._settings = settings
        self._auto_start = auto_start
        self._lock = threading.RLock()

        self.store = InMemoryIngestionStore(self._lock)
        self.scheduler = PriorityScheduler(self._lock)

        structured_logger = StructuredDispatchLogger()
        executor = UnitExecutor(
            processor or SimulatedUnitProcessor(settings.unit_latency_seconds),
            timeout_seconds=settings.unit_timeout_seconds,
            metrics=PrometheusUnitMetrics(),
            logger=structured_logger,
        )
        self.dispatcher = Dispatcher(
            self.store,
            self.scheduler,
            executor,
            settings.dispatch_interval_seconds,
            metrics=PrometheusDispatchMetrics(),
            transition_logger=structured_logger,
        )

    def submit(self, ids: Any, priority: Any) -> str:
        """Validate, batch, store and enqueue a submission.

        Args:
            ids: Candidate identifiers
            priority: Candidate priority token

        Returns:
            New ingestion token

        Raises:
            InvalidInputError: If validation fails (nothing is stored)
        """
        valid_ids, valid_priority = validate_submission(
            ids, priority, max_id=self._settings.max_id
        )
        ingestion_id = str(uuid.uuid4())

        with self._lock:
            chunks, entries = build_chunks(
                ingestion_id,
                valid_ids,
                valid_priority,
                time.monotonic(),
                batch_size=self._settings.batch_size,
            )
            self.store.add(
                IngestionRecord(
                    ingestion_id=ingestion_id,
                    priority=valid_priority,
                    chunks=chunks,
                    created_at=datetime.now(UTC),
                )
            )
            for entry in entries:
                self.scheduler.enqueue(entry)

        logger.info(
            f"[submit] ingestion_id={ingestion_id} priority={valid_priority.value} "
            f"ids={len(valid_ids)} chunks={len(chunks)}"
        )

        self.dispatcher.notify()
        if self._auto_start and not self.dispatcher.is_running:
            self._start_dispatcher()

        return ingestion_id

    def get_status(self, ingestion_id: str) -> IngestionRecord:
        """Get a snapshot of an ingestion request.

        Raises:
            IngestionNotFoundError: If the token is unknown
        """
        record = self.store.get(ingestion_id)
        if record is None:
            raise IngestionNotFoundError(ingestion_id)
        return record

    async def start(self) -> None:
        """Start the dispatcher on the running event loop."""
        self.dispatcher.start()

    async def stop(self) -> None:
        """Stop the dispatcher. Queued chunks stay queued."""
        await self.dispatcher.stop()

    def _start_dispatcher(self) -> None:
        try:
            self.dispatcher.start()
        except RuntimeError as e:
            logger.debug(f"[submit] dispatcher not started here: {e}")
