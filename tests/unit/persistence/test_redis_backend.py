"""Unit tests for the Redis queue, trace counter and dedup store using fakeredis."""

from __future__ import annotations

from unittest.mock import patch

import fakeredis
import pytest

from payrail.core.exceptions import AccumulatorError
from payrail.core.protocols import IBatchAccumulator, IEventDedupStore, ITraceSequence
from payrail.persistence.redis_backend import (
    RedisBatchAccumulator,
    RedisEventDedupStore,
    RedisTraceSequence,
)
from tests.fakes import make_entry


@pytest.fixture
def fake_server():
    return fakeredis.FakeServer()


def _patched(fake_server):
    return patch("redis.Redis", return_value=fakeredis.FakeRedis(server=fake_server, decode_responses=True))


@pytest.fixture
def accumulator(fake_server):
    with _patched(fake_server):
        return RedisBatchAccumulator(host="localhost", port=6379, db=0)


@pytest.fixture
def trace_sequence(fake_server):
    with _patched(fake_server):
        return RedisTraceSequence(host="localhost", port=6379, db=0)


@pytest.fixture
def dedup(fake_server):
    with _patched(fake_server):
        return RedisEventDedupStore(host="localhost", port=6379, db=0, ttl=60)


class TestAccumulator:
    def test_satisfies_protocol(self, accumulator):
        assert isinstance(accumulator, IBatchAccumulator)

    def test_drain_returns_entries_in_append_order(self, accumulator):
        for seq in (3, 1, 2):
            accumulator.append(make_entry(seq))
        assert accumulator.pending_count() == 3
        assert [e.trace_seq for e in accumulator.drain_all()] == [3, 1, 2]
        assert accumulator.pending_count() == 0
        assert accumulator.drain_all() == []

    def test_entries_round_trip_unchanged(self, accumulator):
        entry = make_entry(9, routing="011000015", amount_cents=987654, code="32")
        accumulator.append(entry)
        assert accumulator.drain_all() == [entry]

    def test_queue_survives_new_client(self, accumulator, fake_server):
        accumulator.append(make_entry(1))
        with _patched(fake_server):
            restarted = RedisBatchAccumulator()
        assert restarted.pending_count() == 1

    def test_key_prefix_isolates_queues(self, fake_server):
        with _patched(fake_server):
            a = RedisBatchAccumulator(key_prefix="llc")
            b = RedisBatchAccumulator(key_prefix="trust")
        a.append(make_entry(1))
        assert b.pending_count() == 0


class TestTraceSequence:
    def test_satisfies_protocol(self, trace_sequence):
        assert isinstance(trace_sequence, ITraceSequence)

    def test_starts_at_one_and_increments(self, trace_sequence):
        assert [trace_sequence.next() for _ in range(3)] == [1, 2, 3]

    def test_continues_after_restart(self, trace_sequence, fake_server):
        trace_sequence.next()
        trace_sequence.next()
        with _patched(fake_server):
            restarted = RedisTraceSequence()
        assert restarted.next() == 3


class TestDedup:
    def test_satisfies_protocol(self, dedup):
        assert isinstance(dedup, IEventDedupStore)

    def test_claim_once(self, dedup):
        assert dedup.claim("1:1700000000") is True
        assert dedup.claim("1:1700000000") is False
        assert dedup.claim("2:1700000000") is True

    def test_release_allows_reclaim(self, dedup):
        dedup.claim("1:1")
        dedup.release("1:1")
        assert dedup.claim("1:1") is True

    def test_claim_sets_ttl(self, dedup, fake_server):
        dedup.claim("1:1")
        client = fakeredis.FakeRedis(server=fake_server)
        assert 0 < client.ttl("payrail:payout:1:1") <= 60


class TestErrorWrapping:
    def test_append_wraps_redis_error(self):
        acc = RedisBatchAccumulator.__new__(RedisBatchAccumulator)
        acc._key = "payrail:pending_entries"
        acc._client = None  # AttributeError -> AccumulatorError
        with pytest.raises(AccumulatorError):
            acc.append(make_entry(1))

    def test_drain_wraps_redis_error(self):
        acc = RedisBatchAccumulator.__new__(RedisBatchAccumulator)
        acc._key = "payrail:pending_entries"
        acc._client = None
        with pytest.raises(AccumulatorError):
            acc.drain_all()

    def test_next_wraps_redis_error(self):
        seq = RedisTraceSequence.__new__(RedisTraceSequence)
        seq._key = "payrail:trace_seq"
        seq._client = None
        with pytest.raises(AccumulatorError):
            seq.next()
