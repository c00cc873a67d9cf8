"""Tests for the in-memory accumulator, dedup store and trace sequence."""

from __future__ import annotations

import threading

import pytest

from payrail.core.protocols import IBatchAccumulator, IEventDedupStore, ITraceSequence
from payrail.pipeline.accumulator import InMemoryBatchAccumulator, InMemoryEventDedupStore
from payrail.pipeline.sequence import TraceSequenceGenerator
from tests.fakes import make_entry


class TestInMemoryBatchAccumulator:
    def test_satisfies_protocol(self):
        assert isinstance(InMemoryBatchAccumulator(), IBatchAccumulator)

    def test_drain_returns_in_append_order_and_empties(self):
        acc = InMemoryBatchAccumulator()
        for seq in (1, 2, 3):
            acc.append(make_entry(seq))
        assert [e.trace_seq for e in acc.drain_all()] == [1, 2, 3]
        assert acc.pending_count() == 0
        assert acc.drain_all() == []

    def test_entries_after_drain_go_to_next_drain(self):
        acc = InMemoryBatchAccumulator()
        acc.append(make_entry(1))
        first = acc.drain_all()
        acc.append(make_entry(2))
        assert [e.trace_seq for e in first] == [1]
        assert [e.trace_seq for e in acc.drain_all()] == [2]

    def test_concurrent_appends_never_lost_or_duplicated(self):
        acc = InMemoryBatchAccumulator()
        producers, per_producer = 8, 500
        done = threading.Event()
        drained: list = []

        def produce(offset: int) -> None:
            for i in range(per_producer):
                acc.append(make_entry(offset * per_producer + i + 1))

        def drain() -> None:
            while not done.is_set():
                drained.extend(acc.drain_all())
            drained.extend(acc.drain_all())

        drainer = threading.Thread(target=drain)
        drainer.start()
        threads = [threading.Thread(target=produce, args=(n,)) for n in range(producers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        done.set()
        drainer.join()
        drained.extend(acc.drain_all())

        seqs = [e.trace_seq for e in drained]
        assert len(seqs) == producers * per_producer
        assert set(seqs) == set(range(1, producers * per_producer + 1))


class TestInMemoryEventDedupStore:
    def test_satisfies_protocol(self):
        assert isinstance(InMemoryEventDedupStore(), IEventDedupStore)

    def test_second_claim_refused(self):
        store = InMemoryEventDedupStore()
        assert store.claim("1:1700000000") is True
        assert store.claim("1:1700000000") is False

    def test_release_allows_reclaim(self):
        store = InMemoryEventDedupStore()
        store.claim("k")
        store.release("k")
        assert store.claim("k") is True


class TestTraceSequenceGenerator:
    def test_satisfies_protocol(self):
        assert isinstance(TraceSequenceGenerator(), ITraceSequence)

    def test_starts_at_one(self):
        seq = TraceSequenceGenerator()
        assert [seq.next(), seq.next(), seq.next()] == [1, 2, 3]

    def test_resumes_from_start(self):
        seq = TraceSequenceGenerator(start=500)
        assert seq.next() == 500
        assert seq.peek() == 501

    def test_rejects_non_positive_start(self):
        with pytest.raises(ValueError):
            TraceSequenceGenerator(start=0)

    def test_concurrent_next_is_unique(self):
        seq = TraceSequenceGenerator()
        results: list[int] = []
        lock = threading.Lock()

        def take() -> None:
            local = [seq.next() for _ in range(1000)]
            with lock:
                results.extend(local)

        threads = [threading.Thread(target=take) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert sorted(results) == list(range(1, 8001))
