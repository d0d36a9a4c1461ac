"""In-memory implementations of repository interfaces."""

import copy
import threading
from datetime import UTC, datetime

from backend.app.db.repositories import ChunkRecord, IngestionRecord
from backend.app.ingestion.errors import IngestionNotFoundError, InvalidTransitionError
from backend.app.models.ingestion import ProcessingStatus
from backend.app.orchestration.aggregator import derive_ingestion_status


class InMemoryIngestionStore:
    """In-memory implementation of IngestionStore.

    Keeps a (ingestion_id, chunk_id) index for O(1) chunk mutation. Every
    read and write happens under one lock, and reads return deep copies, so a
    reader never sees a half-applied transition.
    """

    def __init__(self, lock: "threading.RLock | None" = None) -> None:
        """Initialize store.

        Args:
            lock: Lock to share with other components (default: private lock)
        """
        self._lock = lock or threading.RLock()
        self._records: dict[str, IngestionRecord] = {}
        self._chunks: dict[tuple[str, str], ChunkRecord] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, ingestion_id: object) -> bool:
        with self._lock:
            return ingestion_id in self._records

    def add(self, record: IngestionRecord) -> None:
        """Add a new ingestion record with all of its chunks."""
        with self._lock:
            if record.ingestion_id in self._records:
                raise ValueError(f"Duplicate ingestion ID: {record.ingestion_id}")

            self._records[record.ingestion_id] = record
            for chunk in record.chunks:
                self._chunks[(record.ingestion_id, chunk.chunk_id)] = chunk
            record.status = derive_ingestion_status(c.status for c in record.chunks)

    def get(self, ingestion_id: str) -> IngestionRecord | None:
        """Get a snapshot copy of an ingestion record."""
        with self._lock:
            record = self._records.get(ingestion_id)
            if record is None:
                return None
            return copy.deepcopy(record)

    def mark_chunk_running(self, ingestion_id: str, chunk_id: str) -> None:
        """Transition a chunk pending -> running."""
        with self._lock:
            chunk = self._get_chunk(ingestion_id, chunk_id)
            if chunk.status != ProcessingStatus.pending:
                raise InvalidTransitionError(
                    f"Chunk {chunk_id} cannot start from status {chunk.status.name}"
                )
            chunk.status = ProcessingStatus.running
            chunk.started_at = datetime.now(UTC)
            self._refresh_status(ingestion_id)

    def mark_chunk_done(
        self, ingestion_id: str, chunk_id: str, failed_ids: list[int] | None = None
    ) -> None:
        """Transition a chunk running -> done, recording failed identifiers."""
        with self._lock:
            chunk = self._get_chunk(ingestion_id, chunk_id)
            if chunk.status != ProcessingStatus.running:
                raise InvalidTransitionError(
                    f"Chunk {chunk_id} cannot complete from status {chunk.status.name}"
                )
            chunk.status = ProcessingStatus.done
            chunk.failed_ids = list(failed_ids or [])
            chunk.completed_at = datetime.now(UTC)
            self._refresh_status(ingestion_id)

    def _get_chunk(self, ingestion_id: str, chunk_id: str) -> ChunkRecord:
        chunk = self._chunks.get((ingestion_id, chunk_id))
        if chunk is None:
            raise IngestionNotFoundError(ingestion_id)
        return chunk

    def _refresh_status(self, ingestion_id: str) -> None:
        record = self._records[ingestion_id]
        record.status = derive_ingestion_status(c.status for c in record.chunks)
