"""Payroll journal entries and the logging ledger sink."""

from __future__ import annotations

from datetime import datetime, timezone

from payrail.core.config import LedgerConfig
from payrail.core.logging import get_logger
from payrail.models.ledger import JournalEntry, JournalLine

logger = get_logger(__name__)


def build_payroll_journal(
    employee_id: int,
    amount_cents: int,
    config: LedgerConfig,
    timestamp: datetime | None = None,
) -> JournalEntry:
    """Debit payroll expense, credit ACH clearing, for the same amount."""
    return JournalEntry(
        timestamp=timestamp or datetime.now(timezone.utc),
        memo=f"Payroll ACH queued for employee #{employee_id}",
        lines=(
            JournalLine(account=config.expense_account, dc="D", amount_cents=amount_cents, entity=config.entity),
            JournalLine(account=config.clearing_account, dc="C", amount_cents=amount_cents, entity=config.entity),
        ),
    )


def reverse_journal(entry: JournalEntry, timestamp: datetime | None = None) -> JournalEntry:
    """Mirror an entry with debits and credits swapped, netting it to zero."""
    return JournalEntry(
        timestamp=timestamp or datetime.now(timezone.utc),
        memo=f"Reversal: {entry.memo}",
        lines=tuple(
            line.model_copy(update={"dc": "C" if line.dc == "D" else "D"})
            for line in entry.lines
        ),
    )


class LoggingLedger:
    """ILedger that writes each journal entry to the log as JSON.

    Stand-in until a general-ledger database is wired up.
    """

    def post_journal_entry(self, entry: JournalEntry) -> None:
        logger.info("JE: %s", entry.model_dump_json())
