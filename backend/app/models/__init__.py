"""Models package - re-exports for convenience."""

from backend.app.models.ingestion import (
    BatchView,
    IngestRequest,
    IngestResponse,
    Priority,
    ProcessingStatus,
    StatusResponse,
)

__all__ = [
    # Enums
    "Priority",
    "ProcessingStatus",
    # Wire payloads
    "IngestRequest",
    "IngestResponse",
    "BatchView",
    "StatusResponse",
]
