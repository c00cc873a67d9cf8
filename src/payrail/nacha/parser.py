"""NACHA file parser and control-total verifier.

Slices each 94-character record by column, skips block filler, and lets
``verify_totals`` recompute every count, hash and amount from the Entry
Detail records so a rendered file can be checked before it leaves.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from payrail.core.exceptions import NachaValidationError
from payrail.nacha.encoder import (
    BLOCKING_FACTOR,
    FILLER_RECORD,
    HASH_MODULUS,
    RECORD_LENGTH,
    block_count,
)


class ParsedEntry(BaseModel):
    transaction_code: str
    rdfi_routing8: str
    check_digit: str
    dfi_account: str
    amount_cents: int
    individual_id: str
    individual_name: str
    addenda_indicator: str
    trace_number: str


class ParsedBatch(BaseModel):
    service_class: str
    company_name: str
    company_id: str
    sec_code: str
    entry_desc: str
    effective_date: str
    odfi_id8: str
    batch_number: int
    entries: list[ParsedEntry] = Field(default_factory=list)
    control_entry_count: int = 0
    control_entry_hash: int = 0
    control_debit_total: int = 0
    control_credit_total: int = 0


class ParsedFile(BaseModel):
    immediate_dest: str
    immediate_origin: str
    creation_date: str
    creation_time: str
    file_id_mod: str
    dest_name: str
    origin_name: str
    batches: list[ParsedBatch] = Field(default_factory=list)
    batch_count: int = 0
    block_count: int = 0
    entry_count: int = 0
    entry_hash: int = 0
    debit_total: int = 0
    credit_total: int = 0
    filler_count: int = 0
    record_count: int = 0


def _int(field: str, name: str, line_no: int) -> int:
    try:
        return int(field)
    except ValueError as exc:
        raise NachaValidationError(f"Line {line_no}: {name} is not numeric: {field!r}") from exc


def parse_file(text: str) -> ParsedFile:
    """Parse NACHA text into a ``ParsedFile``.

    Raises:
        NachaValidationError: wrong record length, unknown record type or
            records out of order.
    """
    parsed: ParsedFile | None = None
    current: ParsedBatch | None = None
    lines = text.splitlines()
    saw_control = False

    for line_no, line in enumerate(lines, start=1):
        if len(line) != RECORD_LENGTH:
            raise NachaValidationError(f"Line {line_no} is {len(line)} chars, expected {RECORD_LENGTH}")
        kind = line[0]

        if line == FILLER_RECORD and saw_control:
            parsed.filler_count += 1
            continue

        if kind == "1":
            parsed = ParsedFile(
                immediate_dest=line[3:13].strip(),
                immediate_origin=line[13:23].strip(),
                creation_date=line[23:29],
                creation_time=line[29:33],
                file_id_mod=line[33],
                dest_name=line[40:63].strip(),
                origin_name=line[63:86].strip(),
            )
        elif parsed is None:
            raise NachaValidationError(f"Line {line_no}: record before File Header")
        elif kind == "5":
            if current is not None:
                raise NachaValidationError(f"Line {line_no}: Batch Header inside an open batch")
            current = ParsedBatch(
                service_class=line[1:4],
                company_name=line[4:20].strip(),
                company_id=line[40:50].strip(),
                sec_code=line[50:53],
                entry_desc=line[53:63].strip(),
                effective_date=line[69:75],
                odfi_id8=line[79:87],
                batch_number=_int(line[87:94], "batch number", line_no),
            )
        elif kind == "6":
            if current is None:
                raise NachaValidationError(f"Line {line_no}: Entry Detail outside a batch")
            current.entries.append(ParsedEntry(
                transaction_code=line[1:3],
                rdfi_routing8=line[3:11],
                check_digit=line[11],
                dfi_account=line[12:29].strip(),
                amount_cents=_int(line[29:39], "amount", line_no),
                individual_id=line[39:54].strip(),
                individual_name=line[54:76].strip(),
                addenda_indicator=line[78],
                trace_number=line[79:94],
            ))
        elif kind == "8":
            if current is None:
                raise NachaValidationError(f"Line {line_no}: Batch Control outside a batch")
            current.control_entry_count = _int(line[4:10], "entry count", line_no)
            current.control_entry_hash = _int(line[10:20], "entry hash", line_no)
            current.control_debit_total = _int(line[20:32], "debit total", line_no)
            current.control_credit_total = _int(line[32:44], "credit total", line_no)
            parsed.batches.append(current)
            current = None
        elif kind == "9":
            if current is not None:
                raise NachaValidationError(f"Line {line_no}: File Control inside an open batch")
            parsed.batch_count = _int(line[1:7], "batch count", line_no)
            parsed.block_count = _int(line[7:13], "block count", line_no)
            parsed.entry_count = _int(line[13:21], "entry count", line_no)
            parsed.entry_hash = _int(line[21:31], "entry hash", line_no)
            parsed.debit_total = _int(line[31:43], "debit total", line_no)
            parsed.credit_total = _int(line[43:55], "credit total", line_no)
            saw_control = True
        else:
            raise NachaValidationError(f"Line {line_no}: unknown record type {kind!r}")

    if parsed is None or not saw_control:
        raise NachaValidationError("File Header or File Control record missing")
    parsed.record_count = len(lines)
    return parsed


def verify_totals(parsed: ParsedFile) -> None:
    """Recompute every control field from the entries and compare.

    Raises:
        NachaValidationError: listing every mismatch found.
    """
    problems: list[str] = []
    all_hash = 0
    all_credits = 0
    all_entries = 0

    for batch in parsed.batches:
        batch_hash = sum(int(e.rdfi_routing8) for e in batch.entries)
        batch_credits = sum(e.amount_cents for e in batch.entries)
        all_hash += batch_hash
        all_credits += batch_credits
        all_entries += len(batch.entries)
        label = f"batch {batch.batch_number}"
        if batch.control_entry_count != len(batch.entries):
            problems.append(f"{label} entry count {batch.control_entry_count} != {len(batch.entries)}")
        if batch.control_entry_hash != batch_hash % HASH_MODULUS:
            problems.append(f"{label} entry hash {batch.control_entry_hash} != {batch_hash % HASH_MODULUS}")
        if batch.control_credit_total != batch_credits:
            problems.append(f"{label} credit total {batch.control_credit_total} != {batch_credits}")
        if batch.control_debit_total != 0:
            problems.append(f"{label} debit total {batch.control_debit_total} != 0")

    if parsed.batch_count != len(parsed.batches):
        problems.append(f"file batch count {parsed.batch_count} != {len(parsed.batches)}")
    if parsed.entry_count != all_entries:
        problems.append(f"file entry count {parsed.entry_count} != {all_entries}")
    if parsed.entry_hash != all_hash % HASH_MODULUS:
        problems.append(f"file entry hash {parsed.entry_hash} != {all_hash % HASH_MODULUS}")
    if parsed.credit_total != all_credits:
        problems.append(f"file credit total {parsed.credit_total} != {all_credits}")
    if parsed.debit_total != 0:
        problems.append(f"file debit total {parsed.debit_total} != 0")

    real_records = parsed.record_count - parsed.filler_count
    if parsed.block_count != block_count(real_records):
        problems.append(f"block count {parsed.block_count} != {block_count(real_records)}")
    if parsed.record_count % BLOCKING_FACTOR:
        problems.append(f"record count {parsed.record_count} is not a multiple of {BLOCKING_FACTOR}")

    if problems:
        raise NachaValidationError("Control totals do not reconcile: " + "; ".join(problems))
