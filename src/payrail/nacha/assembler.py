"""NACHA PPD file assembly.

Renders File Header, each batch (header, entries in input order, control),
File Control and then ``9``-filler records up to a whole block of ten.
Every record is rendered before any text is returned, so a validation error
anywhere means no file at all.
"""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from payrail.core.exceptions import NachaValidationError
from payrail.core.logging import get_logger
from payrail.models.nacha import NachaBatch, NachaFileHeader
from payrail.nacha import encoder

logger = get_logger(__name__)

LINE_TERMINATOR = "\n"


def build_file(
    header: NachaFileHeader,
    batches: Sequence[NachaBatch],
    *,
    created_at: datetime | None = None,
) -> str:
    """Render a complete NACHA file.

    ``created_at`` feeds the File Header creation date/time; it defaults to
    now and is the only input that is not part of ``header`` or ``batches``.
    """
    if not batches:
        raise NachaValidationError("A NACHA file needs at least one batch")
    for number, batch in enumerate(batches, start=1):
        if not batch.entries:
            raise NachaValidationError(f"Batch {number} has no entries")

    created_at = created_at or datetime.now()
    records = [encoder.file_header_record(header, created_at)]

    for number, batch in enumerate(batches, start=1):
        records.append(encoder.batch_header_record(batch, number))
        for entry in batch.entries:
            records.append(encoder.entry_detail_record(entry, batch.odfi_id8))
        records.append(encoder.batch_control_record(batch, number))

    record_count = len(records) + 1  # plus File Control
    records.append(encoder.file_control_record(batches, encoder.block_count(record_count)))
    records.extend(encoder.block_fill(record_count))

    logger.debug(
        "Rendered NACHA file: %d batches, %d records", len(batches), len(records),
    )
    return LINE_TERMINATOR.join(records) + LINE_TERMINATOR
