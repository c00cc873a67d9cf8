"""Protocol interfaces for all PayRail collaborators.

Every seam between the core and the outside world (bank profiles, ledger,
submission transport, queue and counter storage) is one of these Protocols,
so backends are swapped by construction and tests use dict-backed fakes.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from payrail.models.ledger import JournalEntry
from payrail.models.nacha import NachaEntry
from payrail.models.payout import EmployeeBankProfile
from payrail.models.submission import SubmissionReceipt


# ---------------------------------------------------------------------------
# Bank profiles
# ---------------------------------------------------------------------------

@runtime_checkable
class IBankProfileStore(Protocol):
    """Read-only employee bank lookup."""

    def get_employee_bank(self, employee_id: int) -> EmployeeBankProfile | None: ...


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------

@runtime_checkable
class ILedger(Protocol):
    """General-ledger sink for journal entries."""

    def post_journal_entry(self, entry: JournalEntry) -> None: ...


# ---------------------------------------------------------------------------
# Submission transport
# ---------------------------------------------------------------------------

@runtime_checkable
class ISubmissionTransport(Protocol):
    """Hands a rendered NACHA file to the bank (disk, S3, SFTP, gateway)."""

    def submit(self, file_text: str, tag: str) -> SubmissionReceipt: ...


# ---------------------------------------------------------------------------
# File store (dead letters)
# ---------------------------------------------------------------------------

@runtime_checkable
class IFileStore(Protocol):
    """Minimal blob storage."""

    def read(self, path: str) -> bytes: ...

    def write(self, path: str, data: bytes, content_type: str = "application/octet-stream") -> str: ...

    def list_files(self, prefix: str) -> list[str]: ...


# ---------------------------------------------------------------------------
# Pending-entry queue
# ---------------------------------------------------------------------------

@runtime_checkable
class IBatchAccumulator(Protocol):
    """Multi-producer, single-consumer queue of pending ACH entries."""

    def append(self, entry: NachaEntry) -> None: ...

    def drain_all(self) -> list[NachaEntry]: ...

    def pending_count(self) -> int: ...


# ---------------------------------------------------------------------------
# Trace sequence
# ---------------------------------------------------------------------------

@runtime_checkable
class ITraceSequence(Protocol):
    """Atomic, strictly increasing trace sequence source."""

    def next(self) -> int: ...


# ---------------------------------------------------------------------------
# Redelivery guard
# ---------------------------------------------------------------------------

@runtime_checkable
class IEventDedupStore(Protocol):
    """Remembers which payout events were already reconciled."""

    def claim(self, key: str) -> bool: ...

    def release(self, key: str) -> None: ...
