"""Pluggable persistence backends behind Protocol interfaces."""

from __future__ import annotations

from typing import NamedTuple

from payrail.core.config import AppSettings
from payrail.core.protocols import (
    IBankProfileStore,
    IBatchAccumulator,
    IEventDedupStore,
    IFileStore,
    ISubmissionTransport,
    ITraceSequence,
)
from payrail.persistence.dynamodb_backend import DynamoDBBankProfileStore
from payrail.persistence.encrypted_store import EncryptedBankProfileStore
from payrail.persistence.local_transport import LocalFileStore, LocalFileTransport
from payrail.persistence.memory_backend import MemoryBankProfileStore
from payrail.persistence.redis_backend import (
    RedisBatchAccumulator,
    RedisEventDedupStore,
    RedisTraceSequence,
)
from payrail.persistence.s3_backend import S3FileStore, S3SubmissionTransport
from payrail.pipeline.accumulator import InMemoryBatchAccumulator, InMemoryEventDedupStore
from payrail.pipeline.sequence import TraceSequenceGenerator


class Persistence(NamedTuple):
    profiles: IBankProfileStore
    accumulator: IBatchAccumulator
    trace_sequence: ITraceSequence
    dedup: IEventDedupStore
    transport: ISubmissionTransport
    dead_letters: IFileStore | None


def create_persistence(settings: AppSettings | None = None) -> Persistence:
    """Create wired-up persistence backends from application settings."""
    if settings is None:
        settings = AppSettings()

    if settings.profile_store == "dynamodb":
        profiles: IBankProfileStore = DynamoDBBankProfileStore(
            table_suffix=settings.dynamodb.table_suffix,
            region=settings.dynamodb.region,
            endpoint_url=settings.dynamodb.endpoint_url,
        )
    elif settings.profile_store == "encrypted":
        profiles = EncryptedBankProfileStore(settings.vault.encryption_key)
    else:
        profiles = MemoryBankProfileStore()

    if settings.backend == "redis":
        redis_kwargs = {
            "host": settings.redis.host,
            "port": settings.redis.port,
            "db": settings.redis.db,
            "key_prefix": settings.redis.key_prefix,
        }
        accumulator: IBatchAccumulator = RedisBatchAccumulator(**redis_kwargs)
        trace_sequence: ITraceSequence = RedisTraceSequence(**redis_kwargs)
        dedup: IEventDedupStore = RedisEventDedupStore(
            ttl=settings.redis.dedup_ttl_seconds, **redis_kwargs,
        )
    else:
        accumulator = InMemoryBatchAccumulator()
        trace_sequence = TraceSequenceGenerator()
        dedup = InMemoryEventDedupStore()

    if settings.submission.mode == "s3":
        store = S3FileStore(
            bucket=settings.s3.bucket,
            region=settings.s3.region,
            endpoint_url=settings.s3.endpoint_url,
        )
        transport: ISubmissionTransport = S3SubmissionTransport(store, prefix=settings.submission.s3_prefix)
    else:
        transport = LocalFileTransport(settings.submission.local_dir)

    dead_letters = (
        LocalFileStore(settings.submission.dead_letter_dir)
        if settings.submission.dead_letter_dir
        else None
    )

    return Persistence(
        profiles=profiles,
        accumulator=accumulator,
        trace_sequence=trace_sequence,
        dedup=dedup,
        transport=transport,
        dead_letters=dead_letters,
    )
