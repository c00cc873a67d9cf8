"""In-memory batch accumulator.

Producers (one per payout event) append, the cutoff scheduler drains. The
drain swaps the pending list under the same lock ``append`` takes, so every
entry lands in exactly one drain.
"""

from __future__ import annotations

import threading

from payrail.models.nacha import NachaEntry


class InMemoryBatchAccumulator:
    """IBatchAccumulator backed by a list and a lock. Not durable."""

    def __init__(self) -> None:
        self._pending: list[NachaEntry] = []
        self._lock = threading.Lock()

    def append(self, entry: NachaEntry) -> None:
        with self._lock:
            self._pending.append(entry)

    def drain_all(self) -> list[NachaEntry]:
        with self._lock:
            drained, self._pending = self._pending, []
        return drained

    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)


class InMemoryEventDedupStore:
    """IEventDedupStore backed by a set. Forgets on restart."""

    def __init__(self) -> None:
        self._seen: set[str] = set()
        self._lock = threading.Lock()

    def claim(self, key: str) -> bool:
        with self._lock:
            if key in self._seen:
                return False
            self._seen.add(key)
            return True

    def release(self, key: str) -> None:
        with self._lock:
            self._seen.discard(key)
