"""Ingestion endpoints - POST /ingest and GET /status/{ingestion_id}."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from backend.app.api.deps import get_ingestion_service
from backend.app.db.repositories import IngestionRecord
from backend.app.ingestion.errors import (
    IngestionNotFoundError,
    InvalidInputError,
    ValidationIssue,
)
from backend.app.ingestion.service import IngestionService
from backend.app.models.ingestion import BatchView, IngestRequest, IngestResponse, StatusResponse

logger = logging.getLogger(__name__)

router = APIRouter()

INGEST_PATH = "/ingest"
INGEST_FAILED_MESSAGE = "Failed to create ingestion request"
MALFORMED_BODY_REASON = "Request body must be a JSON object with ids and priority"


def rejection_detail(issues: list[ValidationIssue]) -> dict[str, Any]:
    """Error body shared by every rejected submission."""
    return {
        "message": INGEST_FAILED_MESSAGE,
        "errors": [issue.as_dict() for issue in issues],
    }


@router.post(INGEST_PATH, response_model=IngestResponse, status_code=status.HTTP_202_ACCEPTED)
async def ingest(
    request: IngestRequest,
    service: Annotated[IngestionService, Depends(get_ingestion_service)],
) -> IngestResponse:
    """Accept an ingestion request and queue its batches.

    Args:
        request: Identifiers and priority
        service: Ingestion service

    Returns:
        New ingestion ID

    Raises:
        HTTPException: 400 with every validation issue if input is invalid
    """
    try:
        ingestion_id = service.submit(request.ids, request.priority)
    except InvalidInputError as e:
        logger.info(f"[POST /ingest] rejected: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=rejection_detail(e.issues),
        ) from e

    return IngestResponse(ingestion_id=ingestion_id)


async def handle_malformed_ingest_body(
    request: Request, exc: RequestValidationError
) -> Response:
    """Report an unparseable /ingest body like any other rejected submission.

    Bodies that are missing, not JSON, or not a JSON object never reach the
    route. Other paths keep FastAPI's default handling.
    """
    if request.url.path != INGEST_PATH:
        return await request_validation_exception_handler(request, exc)

    logger.info(f"[POST /ingest] rejected malformed body: {len(exc.errors())} error(s)")
    issue = ValidationIssue(field="body", reason=MALFORMED_BODY_REASON)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": rejection_detail([issue])},
    )


@router.get("/status/{ingestion_id}", response_model=StatusResponse)
async def get_status(
    ingestion_id: str,
    service: Annotated[IngestionService, Depends(get_ingestion_service)],
) -> StatusResponse:
    """Get overall and per-batch progress of an ingestion request.

    Raises:
        HTTPException: 404 if the ingestion ID is unknown
    """
    try:
        record = service.get_status(ingestion_id)
    except IngestionNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Ingestion ID not found",
        ) from e

    return to_status_response(record)


def to_status_response(record: IngestionRecord) -> StatusResponse:
    """Convert a stored record snapshot to the wire payload."""
    return StatusResponse(
        ingestion_id=record.ingestion_id,
        priority=record.priority,
        status=record.status,
        created_at=record.created_at,
        batches=[
            BatchView(
                batch_id=chunk.chunk_id,
                ids=chunk.ids,
                status=chunk.status,
                failed_ids=chunk.failed_ids,
                started_at=chunk.started_at,
                completed_at=chunk.completed_at,
            )
            for chunk in record.chunks
        ],
    )
