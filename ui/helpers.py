"""Helper functions for UI - /ingest and /status client + status views."""

from typing import Any

import httpx

PRIORITIES = ["HIGH", "MEDIUM", "LOW"]

# Wire status -> display label
STATUS_LABELS = {
    "yet_to_start": "⏸️ Yet to start",
    "triggered": "⏳ Triggered",
    "completed": "✅ Completed",
}


def parse_ids(raw: str) -> list[int]:
    """Parse a comma-separated list of identifiers.

    Args:
        raw: User input (e.g. "1, 2, 3")

    Returns:
        List of ints in input order

    Raises:
        ValueError: If any token is not an integer
    """
    ids = []
    for token in raw.split(","):
        token = token.strip()
        if not token:
            continue
        try:
            ids.append(int(token))
        except ValueError as e:
            raise ValueError(f"Not an integer ID: {token!r}") from e
    return ids


def submit_ingestion(backend_url: str, ids: list[int], priority: str) -> dict[str, Any]:
    """Call POST /ingest.

    Args:
        backend_url: Backend base URL (e.g. http://localhost:8000)
        ids: Identifiers to ingest
        priority: HIGH, MEDIUM or LOW

    Returns:
        IngestResponse dict with ingestion_id

    Raises:
        httpx.HTTPStatusError: If request fails
    """
    response = httpx.post(
        f"{backend_url}/ingest",
        json={"ids": ids, "priority": priority},
        timeout=10.0,
    )
    response.raise_for_status()
    result: dict[str, Any] = response.json()
    return result


def fetch_status(backend_url: str, ingestion_id: str) -> dict[str, Any]:
    """Call GET /status/{ingestion_id}.

    Raises:
        httpx.HTTPStatusError: If request fails (404 for unknown IDs)
    """
    response = httpx.get(f"{backend_url}/status/{ingestion_id}", timeout=10.0)
    response.raise_for_status()
    result: dict[str, Any] = response.json()
    return result


def describe_error(error: httpx.HTTPStatusError) -> str:
    """Turn an API error response into a one-line message."""
    try:
        detail = error.response.json().get("detail")
    except ValueError:
        return str(error)

    if isinstance(detail, dict):
        reasons = [e.get("reason", "") for e in detail.get("errors", [])]
        return " | ".join(r for r in reasons if r) or detail.get("message", str(error))
    if isinstance(detail, str):
        return detail
    return str(error)


def build_batch_rows(status: dict[str, Any]) -> list[dict[str, Any]]:
    """Build table rows, one per batch, in dispatch order within the request.

    Args:
        status: StatusResponse dict

    Returns:
        List of row dicts for st.dataframe
    """
    rows = []
    for index, batch in enumerate(status.get("batches", []), start=1):
        batch_status = batch.get("status", "unknown")
        rows.append(
            {
                "batch": index,
                "batch_id": batch.get("batch_id", ""),
                "ids": ", ".join(str(i) for i in batch.get("ids", [])),
                "status": STATUS_LABELS.get(batch_status, batch_status),
                "failed": len(batch.get("failed_ids", [])),
            }
        )
    return rows


def summarize_status(status: dict[str, Any]) -> dict[str, Any]:
    """Summarize overall progress.

    Args:
        status: StatusResponse dict

    Returns:
        Dict with status label, batch counts and progress fraction
    """
    batches = status.get("batches", [])
    total = len(batches)
    completed = sum(1 for b in batches if b.get("status") == "completed")
    overall = status.get("status", "unknown")

    return {
        "status": STATUS_LABELS.get(overall, overall),
        "total_batches": total,
        "completed_batches": completed,
        "progress": completed / total if total else 0.0,
        "finished": overall == "completed",
    }
