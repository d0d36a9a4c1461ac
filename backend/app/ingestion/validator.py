"""Request validation for ingestion submissions."""

from typing import Any

from backend.app.ingestion.errors import InvalidInputError, ValidationIssue
from backend.app.models.ingestion import Priority

_PRIORITY_VALUES = {p.value: p for p in Priority}


def _is_identifier(value: Any, max_id: int) -> bool:
    # bool is an int subclass but never a valid identifier
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return 1 <= value <= max_id


def validate_submission(ids: Any, priority: Any, *, max_id: int) -> tuple[list[int], Priority]:
    """Validate a candidate submission.

    Every identifier and the priority are checked, and all violations are
    reported together rather than stopping at the first one.

    Args:
        ids: Candidate identifier sequence (expected: non-empty list of ints)
        priority: Candidate priority token ("HIGH", "MEDIUM" or "LOW")
        max_id: Inclusive upper bound for identifiers

    Returns:
        Tuple of (identifiers, priority) ready for batching

    Raises:
        InvalidInputError: If any check fails
    """
    issues: list[ValidationIssue] = []

    if not isinstance(ids, list) or not ids:
        issues.append(
            ValidationIssue(field="ids", reason="IDs must be a non-empty array", value=ids)
        )
    else:
        for index, value in enumerate(ids):
            if not _is_identifier(value, max_id):
                issues.append(
                    ValidationIssue(
                        field="ids",
                        index=index,
                        value=value,
                        reason=f"ID must be an integer between 1 and {max_id}",
                    )
                )

    resolved_priority = _PRIORITY_VALUES.get(priority) if isinstance(priority, str) else None
    if resolved_priority is None:
        issues.append(
            ValidationIssue(
                field="priority",
                value=priority,
                reason="Priority must be HIGH, MEDIUM, or LOW",
            )
        )

    if issues or resolved_priority is None:
        raise InvalidInputError(issues)

    return list(ids), resolved_priority
