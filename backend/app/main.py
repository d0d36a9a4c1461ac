"""FastAPI application - data ingestion API."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from backend.app.api.routes.health import router as health_router
from backend.app.api.routes.ingest import handle_malformed_ingest_body
from backend.app.api.routes.ingest import router as ingest_router
from backend.app.api.routes.metrics import router as metrics_router
from backend.app.config import get_settings
from backend.app.ingestion.service import IngestionService
from backend.app.middleware.request_logging import log_requests
from backend.app.utils.logging import configure_logging


def create_app(service: IngestionService | None = None) -> FastAPI:
    """Build the application around one ingestion service.

    Args:
        service: Ingestion service (default: built from settings)

    Returns:
        Configured FastAPI app; the dispatcher runs for the app's lifespan
    """
    settings = get_settings()
    configure_logging(settings.log_level)
    ingestion_service = service or IngestionService(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await ingestion_service.start()
        yield
        await ingestion_service.stop()

    app = FastAPI(title="Data Ingestion API", version="0.1.0", lifespan=lifespan)
    app.state.ingestion_service = ingestion_service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.ui_origin],
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.middleware("http")(log_requests)
    app.add_exception_handler(RequestValidationError, handle_malformed_ingest_body)

    # Register routes
    app.include_router(health_router, tags=["health"])
    app.include_router(metrics_router, tags=["metrics"])
    app.include_router(ingest_router, tags=["ingest"])

    @app.get("/")
    async def root() -> dict[str, object]:
        """Root endpoint."""
        return {
            "message": "Welcome to the Data Ingestion API",
            "endpoints": {
                "ingest": "/ingest (POST)",
                "status": "/status/{ingestion_id} (GET)",
            },
        }

    return app


app = create_app()
