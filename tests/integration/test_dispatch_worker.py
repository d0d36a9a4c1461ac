"""Integration tests for the long-lived dispatch worker.

Uses a 0.2s interval and a zero-latency processor instead of the production
5s / 1s timings.
"""

import pytest
from prometheus_client import REGISTRY

from backend.app.config import Settings
from backend.app.ingestion.service import IngestionService
from backend.app.models.ingestion import Priority, ProcessingStatus
from backend.app.orchestration.scheduler import QueueEntry
from tests.helpers import RecordingProcessor, wait_until

INTERVAL = 0.2
# Allowance for timestamps taken just after the dispatch start
TOLERANCE = 0.005


def all_done(service: IngestionService, ingestion_ids: list[str]) -> bool:
    return all(service.get_status(i).status == ProcessingStatus.done for i in ingestion_ids)


@pytest.mark.asyncio
async def test_burst_submissions_respect_dispatch_interval(
    running_service: IngestionService, processor: RecordingProcessor
) -> None:
    ids = [
        running_service.submit([1, 2, 3, 4, 5], "LOW"),
        running_service.submit([10, 11, 12, 13], "MEDIUM"),
        running_service.submit([20, 21], "HIGH"),
    ]

    await wait_until(lambda: all_done(running_service, ids), timeout=5.0)

    first_ids = [
        chunk.ids[0]
        for ingestion_id in ids
        for chunk in running_service.get_status(ingestion_id).chunks
    ]
    starts = sorted(processor.started_at(i) for i in first_ids)

    assert len(starts) == 5
    for earlier, later in zip(starts, starts[1:]):
        assert later - earlier >= INTERVAL - TOLERANCE


@pytest.mark.asyncio
async def test_high_submitted_mid_request_preempts_remaining_low_chunks(
    running_service: IngestionService, processor: RecordingProcessor
) -> None:
    low = running_service.submit([1, 2, 3, 4, 5, 6, 7, 8, 9], "LOW")

    await wait_until(
        lambda: running_service.get_status(low).chunks[0].status == ProcessingStatus.done
    )
    high = running_service.submit([50], "HIGH")

    await wait_until(lambda: all_done(running_service, [low, high]), timeout=5.0)

    assert processor.processed == [1, 2, 3, 50, 4, 5, 6, 7, 8, 9]


@pytest.mark.asyncio
async def test_worker_survives_faulty_entry(
    running_service: IngestionService, processor: RecordingProcessor
) -> None:
    before = REGISTRY.get_sample_value("dispatch_loop_errors_total") or 0.0

    # Entry pointing at a request the store never saw
    running_service.scheduler.enqueue(
        QueueEntry(
            ingestion_id="ghost",
            chunk_id="ghost-chunk",
            ids=(999,),
            priority=Priority.high,
            enqueued_at=0.0,
        )
    )
    ingestion_id = running_service.submit([1, 2], "LOW")

    await wait_until(lambda: all_done(running_service, [ingestion_id]), timeout=5.0)

    assert running_service.dispatcher.is_running
    assert processor.processed == [1, 2]
    assert (REGISTRY.get_sample_value("dispatch_loop_errors_total") or 0.0) >= before + 1


@pytest.mark.asyncio
async def test_worker_idles_then_wakes_on_submission(
    running_service: IngestionService, processor: RecordingProcessor
) -> None:
    first = running_service.submit([1], "MEDIUM")
    await wait_until(lambda: all_done(running_service, [first]))

    # Queue drained; worker keeps running and picks up later work
    assert len(running_service.scheduler) == 0
    assert running_service.dispatcher.is_running

    second = running_service.submit([2], "MEDIUM")
    await wait_until(lambda: all_done(running_service, [second]), timeout=5.0)

    assert processor.processed == [1, 2]
    assert processor.started_at(2) - processor.started_at(1) >= INTERVAL - TOLERANCE


@pytest.mark.asyncio
async def test_submission_starts_idle_worker(
    processor: RecordingProcessor, fast_settings: Settings
) -> None:
    auto = IngestionService(fast_settings, processor)
    assert not auto.dispatcher.is_running

    ingestion_id = auto.submit([7, 8], "HIGH")
    try:
        assert auto.dispatcher.is_running
        await wait_until(lambda: all_done(auto, [ingestion_id]))
    finally:
        await auto.stop()

    assert processor.processed == [7, 8]
