"""Repository protocol interfaces and records for ingestion state."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from backend.app.models.ingestion import Priority, ProcessingStatus


@dataclass
class ChunkRecord:
    """One unit of dispatch: an ordered slice of a request's identifiers."""

    chunk_id: str
    ids: list[int]
    status: ProcessingStatus = ProcessingStatus.pending
    failed_ids: list[int] = field(default_factory=list)
    started_at: datetime | None = None
    completed_at: datetime | None = None


@dataclass
class IngestionRecord:
    """An accepted submission and its chunks.

    `status` is always derived from the chunk statuses.
    """

    ingestion_id: str
    priority: Priority
    chunks: list[ChunkRecord]
    created_at: datetime
    status: ProcessingStatus = ProcessingStatus.pending


class IngestionStore(Protocol):
    """Store for ingestion records and their chunks."""

    def add(self, record: IngestionRecord) -> None:
        """Add a new ingestion record with all of its chunks.

        Args:
            record: Fully built record, all chunks pending
        """
        ...

    def get(self, ingestion_id: str) -> IngestionRecord | None:
        """Get a consistent snapshot of an ingestion record.

        Args:
            ingestion_id: Ingestion token

        Returns:
            Snapshot copy or None if not found
        """
        ...

    def mark_chunk_running(self, ingestion_id: str, chunk_id: str) -> None:
        """Transition a chunk pending -> running and re-derive request status."""
        ...

    def mark_chunk_done(
        self, ingestion_id: str, chunk_id: str, failed_ids: list[int] | None = None
    ) -> None:
        """Transition a chunk running -> done and re-derive request status.

        Args:
            ingestion_id: Ingestion token
            chunk_id: Chunk token
            failed_ids: Identifiers whose unit call failed
        """
        ...
