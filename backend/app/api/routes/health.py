"""Health check endpoints.

- /health: process is up
- /healthz: dispatcher liveness and per-lane queue depth
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Response

from backend.app.api.deps import get_ingestion_service
from backend.app.ingestion.service import IngestionService

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, str]:
    """Simple health check for Docker/k8s.

    Returns:
        200 OK always (application is running)
    """
    return {"status": "ok"}


@router.get("/healthz", response_model=None)
async def healthz(
    service: Annotated[IngestionService, Depends(get_ingestion_service)],
) -> dict[str, Any] | Response:
    """Health check endpoint.

    Returns:
        200 with dispatcher state if the worker is alive
        503 if the dispatcher task is not running
    """
    dispatcher = service.dispatcher
    depth = service.scheduler.depth()

    response_body = {
        "status": "ok" if dispatcher.is_running else "degraded",
        "components": {
            "dispatcher": "running" if dispatcher.is_running else "stopped",
            "busy": dispatcher.is_busy,
            "queue": {p.value: n for p, n in depth.items()},
            "ingestions": len(service.store),
        },
    }

    if not dispatcher.is_running:
        import json

        return Response(
            content=json.dumps(response_body),
            status_code=503,
            media_type="application/json",
        )

    return response_body
