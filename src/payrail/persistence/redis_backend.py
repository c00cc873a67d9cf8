"""Redis backends: durable pending-entry queue, trace counter, redelivery guard."""

from __future__ import annotations

import redis

from payrail.core.exceptions import AccumulatorError
from payrail.models.nacha import NachaEntry


def _client(host: str, port: int, db: int) -> redis.Redis:
    return redis.Redis(host=host, port=port, db=db, decode_responses=True)


class RedisBatchAccumulator:
    """IBatchAccumulator backed by a Redis list.

    Entries survive a process restart. The drain reads and deletes the list
    in one MULTI/EXEC transaction, so an RPUSH lands either before the
    transaction (in this drain) or after it (in the next one).
    """

    def __init__(self, host: str = "localhost", port: int = 6379, db: int = 0,
                 key_prefix: str = "payrail") -> None:
        self._key = f"{key_prefix}:pending_entries"
        self._client = _client(host, port, db)

    def append(self, entry: NachaEntry) -> None:
        try:
            self._client.rpush(self._key, entry.model_dump_json())
        except Exception as exc:
            raise AccumulatorError(f"Redis RPUSH failed for key={self._key!r}: {exc}") from exc

    def drain_all(self) -> list[NachaEntry]:
        try:
            pipe = self._client.pipeline(transaction=True)
            pipe.lrange(self._key, 0, -1)
            pipe.delete(self._key)
            raw, _ = pipe.execute()
        except Exception as exc:
            raise AccumulatorError(f"Redis drain failed for key={self._key!r}: {exc}") from exc
        return [NachaEntry.model_validate_json(item) for item in raw]

    def pending_count(self) -> int:
        try:
            return int(self._client.llen(self._key))
        except Exception as exc:
            raise AccumulatorError(f"Redis LLEN failed for key={self._key!r}: {exc}") from exc


class RedisTraceSequence:
    """ITraceSequence backed by INCR: atomic across processes and restarts."""

    def __init__(self, host: str = "localhost", port: int = 6379, db: int = 0,
                 key_prefix: str = "payrail") -> None:
        self._key = f"{key_prefix}:trace_seq"
        self._client = _client(host, port, db)

    def next(self) -> int:
        try:
            return int(self._client.incr(self._key))
        except Exception as exc:
            raise AccumulatorError(f"Redis INCR failed for key={self._key!r}: {exc}") from exc


class RedisEventDedupStore:
    """IEventDedupStore using SET NX with a TTL per payout key."""

    def __init__(self, host: str = "localhost", port: int = 6379, db: int = 0,
                 key_prefix: str = "payrail", ttl: int = 7 * 24 * 3600) -> None:
        self._prefix = f"{key_prefix}:payout"
        self._ttl = ttl
        self._client = _client(host, port, db)

    def claim(self, key: str) -> bool:
        try:
            return bool(self._client.set(f"{self._prefix}:{key}", "1", nx=True, ex=self._ttl))
        except Exception as exc:
            raise AccumulatorError(f"Redis SET NX failed for payout {key!r}: {exc}") from exc

    def release(self, key: str) -> None:
        try:
            self._client.delete(f"{self._prefix}:{key}")
        except Exception as exc:
            raise AccumulatorError(f"Redis DELETE failed for payout {key!r}: {exc}") from exc
