"""NACHA fixed-width record encoder.

Each function renders one record type as exactly 94 ASCII characters.
Numeric fields are zero-left-padded and must be syntactically numeric and
fit their width; anything else raises ``NachaValidationError``. Alphanumeric
fields are upper-cased, folded to ASCII, right-padded with spaces and
silently truncated to their width.

Batch and file control totals are never passed in: they are folded over the
entries being rendered, so a control record cannot disagree with its
entries.
"""

from __future__ import annotations

import re
import unicodedata
from datetime import datetime
from typing import Iterable, NamedTuple, Sequence

from payrail.core.exceptions import NachaValidationError
from payrail.models.nacha import NachaBatch, NachaEntry, NachaFileHeader

RECORD_LENGTH = 94
BLOCKING_FACTOR = 10
HASH_MODULUS = 10_000_000_000
FILLER_RECORD = "9" * RECORD_LENGTH

SERVICE_CLASS_CREDITS_ONLY = "200"
SEC_CODE_PPD = "PPD"
CREDIT_TRANSACTION_CODES = frozenset({"22", "32"})
DFI_ACCOUNT_WIDTH = 17

_DIGITS = re.compile(r"^[0-9]+$")
_FILE_ID_MOD = re.compile(r"^[A-Z0-9]$")


class ControlTotals(NamedTuple):
    entry_count: int
    entry_hash: int  # already reduced mod 10**10
    debit_total: int
    credit_total: int


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------

def _numeric(value: int | str, width: int, field: str) -> str:
    if isinstance(value, bool):
        raise NachaValidationError(f"{field} must be numeric, got {value!r}")
    if isinstance(value, int):
        if value < 0:
            raise NachaValidationError(f"{field} must not be negative, got {value}")
        text = str(value)
    else:
        text = value.strip()
    if not _DIGITS.match(text):
        raise NachaValidationError(f"{field} must be numeric, got {value!r}")
    if len(text) > width:
        raise NachaValidationError(f"{field} {text} does not fit in {width} digits")
    return text.zfill(width)


def _alpha(value: str, width: int) -> str:
    folded = unicodedata.normalize("NFKD", value or "").encode("ascii", "ignore").decode("ascii")
    folded = "".join(ch if ch.isprintable() else " " for ch in folded)
    return folded.upper()[:width].ljust(width)


def _blank(width: int) -> str:
    return " " * width


def _routing9(value: str, field: str) -> str:
    text = (value or "").strip()
    if len(text) != 9 or not _DIGITS.match(text):
        raise NachaValidationError(f"{field} must be exactly 9 digits, got {value!r}")
    return text


def _immediate_routing(value: str, field: str) -> str:
    """10-char immediate destination/origin: ' ' + 9-digit routing, or 10 digits."""
    text = (value or "").strip()
    if not _DIGITS.match(text) or len(text) not in (9, 10):
        raise NachaValidationError(f"{field} must be a 9 or 10 digit routing identifier, got {value!r}")
    return text.rjust(10)


def _record(parts: Iterable[str], kind: str) -> str:
    record = "".join(parts)
    if len(record) != RECORD_LENGTH:
        raise NachaValidationError(f"{kind} record rendered {len(record)} chars, expected {RECORD_LENGTH}")
    return record


# ---------------------------------------------------------------------------
# Totals
# ---------------------------------------------------------------------------

def routing_hash_value(rdfi_routing: str) -> int:
    """The 8-digit RDFI prefix that contributes to the entry hash."""
    return int(_routing9(rdfi_routing, "rdfi_routing")[:8])


def entry_hash(entries: Iterable[NachaEntry]) -> int:
    return sum(routing_hash_value(e.rdfi_routing) for e in entries) % HASH_MODULUS


def control_totals(entries: Sequence[NachaEntry]) -> ControlTotals:
    """Fold counts, hash and amounts directly over entries."""
    return ControlTotals(
        entry_count=len(entries),
        entry_hash=entry_hash(entries),
        debit_total=0,
        credit_total=sum(e.amount_cents for e in entries),
    )


def file_totals(batches: Sequence[NachaBatch]) -> ControlTotals:
    """File-level totals over every entry of every batch (not over batch hashes)."""
    every_entry = [e for b in batches for e in b.entries]
    return control_totals(every_entry)


def block_count(record_count: int) -> int:
    return -(-record_count // BLOCKING_FACTOR)


def block_fill(record_count: int) -> list[str]:
    """Filler records needed to round ``record_count`` up to a whole block."""
    return [FILLER_RECORD] * (-record_count % BLOCKING_FACTOR)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def validate_entry(entry: NachaEntry) -> None:
    """Run every Entry Detail check without rendering."""
    if entry.transaction_code not in CREDIT_TRANSACTION_CODES:
        raise NachaValidationError(f"Unsupported transaction code {entry.transaction_code!r}")
    _routing9(entry.rdfi_routing, "rdfi_routing")
    if not entry.dfi_account.strip():
        raise NachaValidationError("dfi_account must not be blank")
    if len(entry.dfi_account.strip()) > DFI_ACCOUNT_WIDTH:
        raise NachaValidationError(
            f"dfi_account is longer than {DFI_ACCOUNT_WIDTH} characters"
        )
    if isinstance(entry.amount_cents, bool) or not isinstance(entry.amount_cents, int):
        raise NachaValidationError(f"amount_cents must be an integer, got {entry.amount_cents!r}")
    if entry.amount_cents <= 0:
        raise NachaValidationError(f"amount_cents must be positive, got {entry.amount_cents}")
    _numeric(entry.amount_cents, 10, "amount_cents")
    if entry.trace_seq <= 0:
        raise NachaValidationError(f"trace_seq must be positive, got {entry.trace_seq}")
    _numeric(entry.trace_seq, 7, "trace_seq")


def _validate_batch(batch: NachaBatch) -> None:
    if batch.service_class != SERVICE_CLASS_CREDITS_ONLY:
        raise NachaValidationError(f"Unsupported service class {batch.service_class!r}")
    if batch.sec_code != SEC_CODE_PPD:
        raise NachaValidationError(f"Unsupported SEC code {batch.sec_code!r}")
    _numeric(batch.odfi_id8, 8, "odfi_id8")
    if len(batch.odfi_id8.strip()) != 8:
        raise NachaValidationError(f"odfi_id8 must be exactly 8 digits, got {batch.odfi_id8!r}")
    effective = _numeric(batch.effective_date_yymmdd, 6, "effective_date_yymmdd")
    if len(batch.effective_date_yymmdd.strip()) != 6:
        raise NachaValidationError(f"effective_date_yymmdd must be YYMMDD, got {batch.effective_date_yymmdd!r}")
    try:
        datetime.strptime(effective, "%y%m%d")
    except ValueError as exc:
        raise NachaValidationError(f"effective_date_yymmdd is not a date: {effective}") from exc


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

def file_header_record(header: NachaFileHeader, created_at: datetime) -> str:
    """Record type 1."""
    if not _FILE_ID_MOD.match(header.file_id_mod or ""):
        raise NachaValidationError(f"file_id_mod must be one of A-Z or 0-9, got {header.file_id_mod!r}")
    return _record([
        "1",
        "01",  # priority code
        _immediate_routing(header.immediate_dest, "immediate_dest"),
        _immediate_routing(header.immediate_origin, "immediate_origin"),
        created_at.strftime("%y%m%d"),
        created_at.strftime("%H%M"),
        header.file_id_mod,
        "094",  # record size
        "10",  # blocking factor
        "1",  # format code
        _alpha(header.dest_name, 23),
        _alpha(header.origin_name, 23),
        _blank(8),  # reference code
    ], "File Header")


def batch_header_record(batch: NachaBatch, batch_number: int) -> str:
    """Record type 5."""
    _validate_batch(batch)
    return _record([
        "5",
        batch.service_class,
        _alpha(batch.company_name, 16),
        _blank(20),  # company discretionary data
        _alpha(batch.company_id, 10),
        batch.sec_code,
        _alpha(batch.entry_desc, 10),
        _blank(6),  # company descriptive date
        batch.effective_date_yymmdd.strip(),
        _blank(3),  # settlement date, inserted by the ACH operator
        "1",  # originator status code
        batch.odfi_id8.strip(),
        _numeric(batch_number, 7, "batch_number"),
    ], "Batch Header")


def entry_detail_record(entry: NachaEntry, odfi_id8: str) -> str:
    """Record type 6."""
    validate_entry(entry)
    rdfi = entry.rdfi_routing.strip()
    return _record([
        "6",
        entry.transaction_code,
        rdfi[:8],
        rdfi[8],  # check digit
        _alpha(entry.dfi_account.strip(), DFI_ACCOUNT_WIDTH),
        _numeric(entry.amount_cents, 10, "amount_cents"),
        _alpha(entry.individual_id, 15),
        _alpha(entry.individual_name, 22),
        _blank(2),  # discretionary data
        "0",  # addenda record indicator
        _numeric(odfi_id8, 8, "odfi_id8") + _numeric(entry.trace_seq, 7, "trace_seq"),
    ], "Entry Detail")


def batch_control_record(batch: NachaBatch, batch_number: int) -> str:
    """Record type 8."""
    totals = control_totals(batch.entries)
    return _record([
        "8",
        batch.service_class,
        _numeric(totals.entry_count, 6, "batch entry count"),
        _numeric(totals.entry_hash, 10, "batch entry hash"),
        _numeric(totals.debit_total, 12, "batch debit total"),
        _numeric(totals.credit_total, 12, "batch credit total"),
        _alpha(batch.company_id, 10),
        _blank(19),  # message authentication code
        _blank(6),  # reserved
        _numeric(batch.odfi_id8, 8, "odfi_id8"),
        _numeric(batch_number, 7, "batch_number"),
    ], "Batch Control")


def file_control_record(batches: Sequence[NachaBatch], blocks: int) -> str:
    """Record type 9."""
    totals = file_totals(batches)
    return _record([
        "9",
        _numeric(len(batches), 6, "batch count"),
        _numeric(blocks, 6, "block count"),
        _numeric(totals.entry_count, 8, "file entry count"),
        _numeric(totals.entry_hash, 10, "file entry hash"),
        _numeric(totals.debit_total, 12, "file debit total"),
        _numeric(totals.credit_total, 12, "file credit total"),
        _blank(39),  # reserved
    ], "File Control")
