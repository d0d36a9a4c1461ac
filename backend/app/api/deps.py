"""FastAPI dependencies."""

from fastapi import Request

from backend.app.ingestion.service import IngestionService


def get_ingestion_service(request: Request) -> IngestionService:
    """Return the application's ingestion service.

    Override with `app.dependency_overrides` in tests.
    """
    service: IngestionService = request.app.state.ingestion_service
    return service
