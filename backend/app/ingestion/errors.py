"""Exception types for ingestion, scheduling and unit execution."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ValidationIssue:
    """A single reason a submission was rejected."""

    field: str
    reason: str
    index: int | None = None
    value: Any = None

    def as_dict(self) -> dict[str, Any]:
        """Serialize for an HTTP error body."""
        return {
            "field": self.field,
            "index": self.index,
            "value": self.value,
            "reason": self.reason,
        }


class IngestionError(Exception):
    """Base class for ingestion errors."""

    pass


class InvalidInputError(IngestionError):
    """Submission rejected before any state was created."""

    def __init__(self, issues: list[ValidationIssue]) -> None:
        self.issues = issues
        reasons = "; ".join(issue.reason for issue in issues)
        super().__init__(f"Invalid ingestion request: {reasons}")


class IngestionNotFoundError(IngestionError):
    """Unknown ingestion token."""

    def __init__(self, ingestion_id: str) -> None:
        self.ingestion_id = ingestion_id
        super().__init__(f"Ingestion ID not found: {ingestion_id}")


class InvalidTransitionError(IngestionError):
    """Chunk status change that would regress or skip a state."""

    pass


class UnitProcessingError(Exception):
    """Unit processor call for one identifier failed."""

    pass


class UnitTimeoutError(UnitProcessingError):
    """Unit processor call exceeded its hard timeout."""

    pass
