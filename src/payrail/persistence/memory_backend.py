"""In-memory backends for development and unit tests."""

from __future__ import annotations

from payrail.core.exceptions import LedgerError, SubmissionConflictError
from payrail.models.ledger import JournalEntry
from payrail.models.payout import EmployeeBankProfile
from payrail.models.submission import SubmissionReceipt


class MemoryBankProfileStore:
    """Dict-backed IBankProfileStore."""

    def __init__(self, profiles: list[EmployeeBankProfile] | None = None) -> None:
        self._profiles: dict[int, EmployeeBankProfile] = {}
        for profile in profiles or []:
            self.upsert_employee_bank(profile)

    def upsert_employee_bank(self, profile: EmployeeBankProfile) -> None:
        self._profiles[profile.employee_id] = profile

    def get_employee_bank(self, employee_id: int) -> EmployeeBankProfile | None:
        return self._profiles.get(employee_id)


class MemoryLedger:
    """List-backed ILedger. Set ``fail_with`` to simulate a GL outage."""

    def __init__(self) -> None:
        self.entries: list[JournalEntry] = []
        self.fail_with: str | None = None

    def post_journal_entry(self, entry: JournalEntry) -> None:
        if self.fail_with:
            raise LedgerError(self.fail_with)
        self.entries.append(entry)


class MemoryTransport:
    """ISubmissionTransport that keeps submitted files keyed by tag.

    ``failures`` makes the next N submissions raise ``ConnectionError``.
    """

    def __init__(self, failures: int = 0) -> None:
        self.files: dict[str, str] = {}
        self.attempts: int = 0
        self.failures = failures

    def submit(self, file_text: str, tag: str) -> SubmissionReceipt:
        self.attempts += 1
        if self.failures > 0:
            self.failures -= 1
            raise ConnectionError("bank gateway unreachable")
        if tag in self.files and self.files[tag] != file_text:
            raise SubmissionConflictError(f"payroll_{tag}.ach already exists with different content")
        self.files[tag] = file_text
        return SubmissionReceipt(mode="MEMORY", location=f"payroll_{tag}.ach")


class MemoryFileStore:
    """Dict-backed IFileStore."""

    def __init__(self) -> None:
        self._files: dict[str, bytes] = {}

    def read(self, path: str) -> bytes:
        return self._files[path]

    def write(self, path: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        self._files[path] = data
        return path

    def list_files(self, prefix: str) -> list[str]:
        return [k for k in self._files if k.startswith(prefix)]
