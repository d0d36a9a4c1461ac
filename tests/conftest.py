"""Shared pytest fixtures for all test suites."""

from collections.abc import AsyncGenerator, Awaitable, Callable

import pytest
import pytest_asyncio

from backend.app.config import Settings
from backend.app.ingestion.service import IngestionService
from tests.helpers import RecordingProcessor


@pytest.fixture
def fast_settings() -> Settings:
    """Settings with short timings for dispatch tests."""
    return Settings(
        dispatch_interval_seconds=0.2,
        unit_latency_seconds=0.0,
        unit_timeout_seconds=1.0,
    )


@pytest.fixture
def processor() -> RecordingProcessor:
    """Recording unit processor."""
    return RecordingProcessor()


@pytest.fixture
def service(fast_settings: Settings, processor: RecordingProcessor) -> IngestionService:
    """Ingestion service driven manually via dispatcher.dispatch_once().

    Usage:
        ingestion_id = service.submit([1, 2, 3], "HIGH")
        await service.dispatcher.dispatch_once()
    """
    return IngestionService(fast_settings, processor, auto_start=False)


@pytest_asyncio.fixture
async def running_service(
    fast_settings: Settings, processor: RecordingProcessor
) -> AsyncGenerator[IngestionService, None]:
    """Ingestion service whose dispatcher worker runs on the test loop."""
    svc = IngestionService(fast_settings, processor)
    await svc.start()
    yield svc
    await svc.stop()


@pytest.fixture
def drain() -> Callable[[IngestionService], Awaitable[int]]:
    """Dispatch queued chunks one by one until the scheduler is empty."""

    async def _drain(svc: IngestionService) -> int:
        count = 0
        while await svc.dispatcher.dispatch_once():
            count += 1
        return count

    return _drain
