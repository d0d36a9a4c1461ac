"""Structured logging for unit execution and dispatch."""

import logging
from typing import Any

from backend.app.tools.executor import UnitContext

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once at application start-up."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    logging.getLogger("backend").setLevel(level.upper())


class StructuredDispatchLogger:
    """Structured logger for unit calls and chunk transitions."""

    def log_attempt(
        self,
        ctx: UnitContext,
        outcome: str,
        latency_ms: float,
        error_reason: str | None = None,
    ) -> None:
        """Log one unit call with structured data."""
        log_data: dict[str, Any] = {
            "ingestion_id": ctx.ingestion_id,
            "chunk_id": ctx.chunk_id,
            "identifier": ctx.identifier,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
        }

        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Unit call: ID {ctx.identifier} - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})

    def log_transition(
        self,
        ingestion_id: str,
        chunk_id: str,
        status: str,
        priority: str,
        failed: int = 0,
    ) -> None:
        """Log a chunk status transition."""
        log_data: dict[str, Any] = {
            "ingestion_id": ingestion_id,
            "chunk_id": chunk_id,
            "status": status,
            "priority": priority,
            "failed": failed,
        }
        logger.info(f"Chunk {chunk_id} -> {status}", extra={"structured": log_data})
