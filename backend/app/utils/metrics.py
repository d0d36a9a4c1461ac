"""Prometheus metrics for unit execution and dispatch."""

from prometheus_client import Counter, Gauge, Histogram

# Unit execution metrics
unit_latency_ms = Histogram(
    "unit_latency_ms",
    "Unit processor call latency in milliseconds",
    ["outcome"],
    buckets=[10, 50, 100, 200, 500, 1000, 2000, 4000, 8000, 16000],
)

unit_errors_total = Counter(
    "unit_errors_total",
    "Total unit processor failures",
    ["reason"],
)

# Dispatch metrics
chunks_dispatched_total = Counter(
    "chunks_dispatched_total",
    "Total chunks dispatched to completion",
    ["priority"],
)

dispatch_loop_errors_total = Counter(
    "dispatch_loop_errors_total",
    "Unexpected faults caught at the dispatch loop boundary",
)

scheduler_queue_depth = Gauge(
    "scheduler_queue_depth",
    "Chunks waiting in each priority lane",
    ["priority"],
)


class PrometheusUnitMetrics:
    """Prometheus-based unit metrics implementation."""

    def record_latency(self, outcome: str, latency_ms: float) -> None:
        """Record unit call latency."""
        unit_latency_ms.labels(outcome=outcome).observe(latency_ms)

    def inc_error(self, reason: str) -> None:
        """Increment error counter."""
        unit_errors_total.labels(reason=reason).inc()


class PrometheusDispatchMetrics:
    """Prometheus-based dispatch loop metrics implementation."""

    def inc_dispatched(self, priority: str) -> None:
        """Count a completed chunk."""
        chunks_dispatched_total.labels(priority=priority).inc()

    def inc_loop_error(self) -> None:
        """Count a fault recovered at the loop boundary."""
        dispatch_loop_errors_total.inc()

    def set_queue_depth(self, depth: dict[str, int]) -> None:
        """Publish per-lane queue depth."""
        for priority, count in depth.items():
            scheduler_queue_depth.labels(priority=priority).set(count)
