"""Split validated identifiers into fixed-size chunks and queue entries."""

import uuid

from backend.app.db.repositories import ChunkRecord
from backend.app.models.ingestion import Priority
from backend.app.orchestration.scheduler import QueueEntry


def build_chunks(
    ingestion_id: str,
    ids: list[int],
    priority: Priority,
    enqueued_at: float,
    *,
    batch_size: int,
) -> tuple[list[ChunkRecord], list[QueueEntry]]:
    """Partition identifiers into contiguous ordered chunks.

    Args:
        ingestion_id: Owning ingestion token
        ids: Validated identifiers, in submission order
        priority: Submission priority, copied onto every queue entry
        enqueued_at: Monotonic submission timestamp used for lane ordering
        batch_size: Maximum identifiers per chunk

    Returns:
        Tuple of (chunks, queue entries), one entry per chunk, same order
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be positive, got {batch_size}")

    chunks: list[ChunkRecord] = []
    entries: list[QueueEntry] = []

    for start in range(0, len(ids), batch_size):
        group = ids[start : start + batch_size]
        chunk_id = str(uuid.uuid4())
        chunks.append(ChunkRecord(chunk_id=chunk_id, ids=list(group)))
        entries.append(
            QueueEntry(
                ingestion_id=ingestion_id,
                chunk_id=chunk_id,
                ids=tuple(group),
                priority=priority,
                enqueued_at=enqueued_at,
            )
        )

    return chunks, entries
