"""Test doubles and polling helpers shared across test suites."""

import asyncio
import time
from collections.abc import Callable

import pytest


class RecordingProcessor:
    """Unit processor that records every call and can fail or hang on demand."""

    def __init__(
        self,
        latency_seconds: float = 0.0,
        fail_ids: set[int] | None = None,
        hang_ids: set[int] | None = None,
    ) -> None:
        self.latency_seconds = latency_seconds
        self.fail_ids = fail_ids or set()
        self.hang_ids = hang_ids or set()
        self.calls: list[tuple[int, float]] = []

    @property
    def processed(self) -> list[int]:
        return [identifier for identifier, _ in self.calls]

    def started_at(self, identifier: int) -> float:
        """Monotonic time of the first call for an identifier."""
        return next(ts for i, ts in self.calls if i == identifier)

    async def process(self, identifier: int) -> None:
        self.calls.append((identifier, time.monotonic()))
        if identifier in self.hang_ids:
            await asyncio.sleep(3600)
        if self.latency_seconds:
            await asyncio.sleep(self.latency_seconds)
        if identifier in self.fail_ids:
            raise RuntimeError(f"downstream rejected {identifier}")


async def wait_until(
    predicate: Callable[[], bool], timeout: float = 5.0, poll: float = 0.01
) -> None:
    """Poll until predicate is true or fail the test."""
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            pytest.fail(f"condition not met within {timeout}s")
        await asyncio.sleep(poll)
