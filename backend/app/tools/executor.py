"""Async unit executor: runs the per-identifier downstream call.

Wraps every unit processor call with:
- Hard timeout per identifier
- Metrics and structured logging
- Normalized failure types (UnitTimeoutError / UnitProcessingError)

No retries: a failed identifier is reported to the dispatcher, which records
it and moves on to the next identifier.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol

from backend.app.ingestion.errors import UnitProcessingError, UnitTimeoutError


class UnitProcessor(Protocol):
    """External operation invoked once per identifier."""

    async def process(self, identifier: int) -> None:
        """Process one identifier, raising on failure."""
        ...


class SimulatedUnitProcessor:
    """Fixed-latency stand-in for a real downstream call."""

    def __init__(
        self,
        latency_seconds: float = 1.0,
        sleep_fn: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        """Initialize processor.

        Args:
            latency_seconds: Simulated latency per identifier
            sleep_fn: Injectable sleep function (default: asyncio.sleep)
        """
        self._latency_seconds = latency_seconds
        self._sleep = sleep_fn or asyncio.sleep

    async def process(self, identifier: int) -> None:
        """Simulate an external API call for one identifier."""
        await self._sleep(self._latency_seconds)


@dataclass(frozen=True)
class UnitContext:
    """Context for one unit call, used for tracing."""

    ingestion_id: str
    chunk_id: str
    identifier: int


# Metrics interface (implemented by PrometheusUnitMetrics)
class UnitMetrics:
    """Interface for unit execution metrics."""

    def record_latency(self, outcome: str, latency_ms: float) -> None:
        """Record unit call latency."""
        pass

    def inc_error(self, reason: str) -> None:
        """Increment error counter."""
        pass


# Logging interface (implemented by StructuredDispatchLogger)
class UnitLogger:
    """Interface for structured unit logging."""

    def log_attempt(
        self,
        ctx: UnitContext,
        outcome: str,
        latency_ms: float,
        error_reason: str | None = None,
    ) -> None:
        """Log one unit call."""
        pass


class UnitExecutor:
    """Runs unit processor calls with a hard timeout."""

    def __init__(
        self,
        processor: UnitProcessor,
        timeout_seconds: float,
        metrics: UnitMetrics | None = None,
        logger: UnitLogger | None = None,
    ) -> None:
        """Initialize executor.

        Args:
            processor: Downstream unit processor
            timeout_seconds: Hard timeout per identifier
            metrics: Metrics recorder (optional, defaults to no-op)
            logger: Structured logger (optional, defaults to no-op)
        """
        self._processor = processor
        self._timeout_seconds = timeout_seconds
        self._metrics = metrics or UnitMetrics()
        self._logger = logger or UnitLogger()

    async def execute(self, ctx: UnitContext) -> None:
        """Process one identifier.

        Args:
            ctx: Unit context (ingestion, chunk, identifier)

        Raises:
            UnitTimeoutError: Call exceeded the hard timeout
            UnitProcessingError: Call raised any other exception
        """
        start = time.monotonic()

        try:
            await asyncio.wait_for(
                self._processor.process(ctx.identifier), timeout=self._timeout_seconds
            )
        except TimeoutError as e:
            elapsed_ms = (time.monotonic() - start) * 1000
            self._metrics.record_latency("timeout", elapsed_ms)
            self._metrics.inc_error("timeout")
            self._logger.log_attempt(ctx, "timeout", elapsed_ms, error_reason="timeout")
            raise UnitTimeoutError(
                f"Unit call for ID {ctx.identifier} timed out after {self._timeout_seconds}s"
            ) from e
        except Exception as e:
            elapsed_ms = (time.monotonic() - start) * 1000
            self._metrics.record_latency("error", elapsed_ms)
            self._metrics.inc_error("execution_error")
            self._logger.log_attempt(ctx, "error", elapsed_ms, error_reason=type(e).__name__)
            raise UnitProcessingError(f"Unit call for ID {ctx.identifier} failed") from e

        elapsed_ms = (time.monotonic() - start) * 1000
        self._metrics.record_latency("success", elapsed_ms)
        self._logger.log_attempt(ctx, "success", elapsed_ms)
