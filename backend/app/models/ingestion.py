"""Ingestion API models: priorities, lifecycle statuses and wire payloads."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class Priority(str, Enum):
    """Scheduling priority of an ingestion request."""

    high = "HIGH"
    medium = "MEDIUM"
    low = "LOW"


class ProcessingStatus(str, Enum):
    """Lifecycle status shared by batches and ingestion requests.

    Values keep the wire vocabulary clients already poll for.
    """

    pending = "yet_to_start"
    running = "triggered"
    done = "completed"


class IngestRequest(BaseModel):
    """Request body for POST /ingest.

    Fields are deliberately loose: shape and range checks happen in the
    request validator so every violation is reported together.
    """

    ids: Any = Field(None, description="Identifiers to process, 1..MAX_ID")
    priority: Any = Field(None, description="HIGH, MEDIUM or LOW")


class IngestResponse(BaseModel):
    """Response for POST /ingest."""

    ingestion_id: str
    message: str = "Ingestion request created successfully"


class BatchView(BaseModel):
    """One batch as reported by GET /status/{ingestion_id}."""

    batch_id: str
    ids: list[int]
    status: ProcessingStatus
    failed_ids: list[int] = Field(default_factory=list)
    started_at: datetime | None = None
    completed_at: datetime | None = None


class StatusResponse(BaseModel):
    """Response for GET /status/{ingestion_id}."""

    ingestion_id: str
    priority: Priority
    status: ProcessingStatus
    created_at: datetime
    batches: list[BatchView]
    message: str = "Ingestion status retrieved successfully"
