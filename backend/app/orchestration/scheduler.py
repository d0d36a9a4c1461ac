"""Priority scheduler: three FIFO lanes with strict lane precedence."""

import itertools
import threading
from collections import deque
from dataclasses import dataclass, field

from backend.app.models.ingestion import Priority

# Lanes are examined in this order
LANE_ORDER: tuple[Priority, ...] = (Priority.high, Priority.medium, Priority.low)

_sequence = itertools.count()


@dataclass(frozen=True)
class QueueEntry:
    """Ordering projection of a chunk awaiting dispatch.

    References the chunk by (ingestion_id, chunk_id); does not own it.
    """

    ingestion_id: str
    chunk_id: str
    ids: tuple[int, ...]
    priority: Priority
    enqueued_at: float
    sequence: int = field(default_factory=lambda: next(_sequence))

    @property
    def sort_key(self) -> tuple[float, int]:
        """Key for FIFO ordering within a lane."""
        return (self.enqueued_at, self.sequence)


class PriorityScheduler:
    """Selects the next chunk to dispatch.

    HIGH beats MEDIUM beats LOW at chunk granularity; within a lane entries
    leave in (enqueued_at, sequence) order.
    """

    def __init__(self, lock: "threading.RLock | None" = None) -> None:
        """Initialize scheduler.

        Args:
            lock: Lock to share with the store (default: private lock)
        """
        self._lock = lock or threading.RLock()
        self._lanes: dict[Priority, deque[QueueEntry]] = {p: deque() for p in LANE_ORDER}

    def __len__(self) -> int:
        with self._lock:
            return sum(len(lane) for lane in self._lanes.values())

    def enqueue(self, entry: QueueEntry) -> None:
        """Append an entry to the lane for its priority."""
        with self._lock:
            lane = self._lanes[entry.priority]
            if lane and entry.sort_key < lane[-1].sort_key:
                # Out-of-order timestamp: keep the lane sorted
                items = sorted([*lane, entry], key=lambda e: e.sort_key)
                lane.clear()
                lane.extend(items)
            else:
                lane.append(entry)

    def select_next(self) -> QueueEntry | None:
        """Remove and return the next entry, or None if all lanes are empty."""
        with self._lock:
            for priority in LANE_ORDER:
                lane = self._lanes[priority]
                if lane:
                    return lane.popleft()
            return None

    def depth(self) -> dict[Priority, int]:
        """Number of waiting entries per lane."""
        with self._lock:
            return {p: len(self._lanes[p]) for p in LANE_ORDER}
