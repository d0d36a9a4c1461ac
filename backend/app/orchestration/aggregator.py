"""Overall ingestion status derived from chunk statuses."""

from collections.abc import Iterable

from backend.app.models.ingestion import ProcessingStatus


def derive_ingestion_status(chunk_statuses: Iterable[ProcessingStatus]) -> ProcessingStatus:
    """Derive a request's status from its chunks. First matching rule wins.

    - all done -> done
    - any running -> running
    - all pending -> pending
    - otherwise (some done, some pending, none running) -> running

    Args:
        chunk_statuses: Status of every chunk of one request

    Returns:
        Derived overall status
    """
    statuses = list(chunk_statuses)

    if not statuses:
        return ProcessingStatus.pending

    if all(s == ProcessingStatus.done for s in statuses):
        return ProcessingStatus.done
    if any(s == ProcessingStatus.running for s in statuses):
        return ProcessingStatus.running
    if all(s == ProcessingStatus.pending for s in statuses):
        return ProcessingStatus.pending

    # Started but not finished, between two dispatches
    return ProcessingStatus.running
