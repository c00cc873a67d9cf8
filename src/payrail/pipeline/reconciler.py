"""Payout-to-entry reconciliation.

Turns one on-chain payout into one NACHA credit entry plus the matching
journal entry. Both carry the same ``amount_cents`` value, computed once.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import NamedTuple

from payrail.conversion.currency import convert_to_cents
from payrail.core.config import ConversionConfig, LedgerConfig
from payrail.core.logging import get_logger
from payrail.core.protocols import (
    IBankProfileStore,
    IBatchAccumulator,
    IEventDedupStore,
    ILedger,
    ITraceSequence,
)
from payrail.ledger.journal import build_payroll_journal, reverse_journal
from payrail.models.ledger import JournalEntry
from payrail.models.nacha import NachaEntry
from payrail.models.payout import (
    AccountType,
    EmployeeBankProfile,
    PayoutEvent,
    PayoutReceipt,
    PayPreference,
    ReconcileOutcome,
    TokenAmount,
)
from payrail.nacha.encoder import validate_entry

logger = get_logger(__name__)

NAME_WIDTH = 22


class ReconciledPayout(NamedTuple):
    entry: NachaEntry
    journal: JournalEntry


def transaction_code_for(account_type: AccountType) -> str:
    return "22" if account_type == AccountType.CHECKING else "32"


class PayoutReconciler:
    """Resolves bank details, converts amounts and emits entry/journal pairs."""

    def __init__(
        self,
        *,
        profiles: IBankProfileStore,
        trace_sequence: ITraceSequence,
        dedup: IEventDedupStore,
        conversion: ConversionConfig,
        ledger_config: LedgerConfig,
        accumulator: IBatchAccumulator | None = None,
        ledger: ILedger | None = None,
    ) -> None:
        self._profiles = profiles
        self._trace = trace_sequence
        self._dedup = dedup
        self._conversion = conversion
        self._ledger_config = ledger_config
        self._accumulator = accumulator
        self._ledger = ledger

    def reconcile(self, event: PayoutEvent) -> ReconciledPayout | None:
        """Build the entry and journal for a payout, or ``None`` to skip it.

        Skips (never raises) for unknown employees, on-chain pay preference,
        zero-cent amounts and redelivered events.

        A returned pair claims the event's dedup key and consumes a trace
        sequence, so a later ``reconcile`` or ``handle`` of the same event is
        skipped as a duplicate. Callers that queue entries use ``handle``.

        Raises:
            ConversionError / ConfigurationError: the amount cannot be valued.
            NachaValidationError: the bank profile cannot form a valid entry.
        """
        result = self._evaluate(event)
        return None if isinstance(result, str) else result

    def handle(self, event: PayoutEvent) -> PayoutReceipt:
        """Reconcile, post the journal entry, then queue the ACH entry.

        If the ledger rejects the journal entry nothing is queued and the
        event may be delivered again. If queueing fails after the journal
        was posted, a reversing journal is posted and the event may also be
        delivered again.
        """
        if self._accumulator is None or self._ledger is None:
            raise RuntimeError("PayoutReconciler.handle needs an accumulator and a ledger")

        result = self._evaluate(event)
        if isinstance(result, str):
            return PayoutReceipt(
                employee_id=event.employee_id,
                outcome=ReconcileOutcome.SKIPPED,
                reason=result,
            )

        try:
            self._ledger.post_journal_entry(result.journal)
        except Exception:
            self._dedup.release(event.dedup_key)
            raise
        try:
            self._accumulator.append(result.entry)
        except Exception:
            self._unwind_journal(event, result)
            raise

        logger.info(
            "Queued ACH credit trace_seq=%d for employee #%s: %d cents",
            result.entry.trace_seq, event.employee_id, result.entry.amount_cents,
        )
        return PayoutReceipt(
            employee_id=event.employee_id,
            outcome=ReconcileOutcome.QUEUED,
            trace_seq=result.entry.trace_seq,
            amount_cents=result.entry.amount_cents,
        )

    def _unwind_journal(self, event: PayoutEvent, result: ReconciledPayout) -> None:
        """Net out a posted journal whose ACH entry never reached the queue."""
        try:
            self._ledger.post_journal_entry(reverse_journal(result.journal))
        except Exception:
            # Claim stays taken: a redelivery would post a second journal.
            logger.exception(
                "Journal for employee #%s trace_seq=%d is posted but its ACH entry was not queued; "
                "reverse it manually",
                event.employee_id, result.entry.trace_seq,
            )
            return
        self._dedup.release(event.dedup_key)
        logger.warning(
            "Queueing failed for employee #%s trace_seq=%d; journal reversed",
            event.employee_id, result.entry.trace_seq,
        )

    def _evaluate(self, event: PayoutEvent) -> ReconciledPayout | str:
        """Return the reconciled pair, or the reason the event is skipped."""
        profile = self._profiles.get_employee_bank(event.employee_id)
        if profile is None:
            return self._skip(event, "no bank profile")
        if profile.pay_preference != PayPreference.ACH:
            return self._skip(event, f"pay preference {profile.pay_preference}")

        rule = self._conversion.rule_for(event.token)
        amount_cents = convert_to_cents(
            TokenAmount(amount_base_units=event.amount_base_units, decimals=rule.decimals),
            rule.mode,
        )
        if amount_cents <= 0:
            logger.warning(
                "Skipping payout for employee #%s: %s base units rounds to 0 cents",
                event.employee_id, event.amount_base_units,
            )
            return "zero amount"

        if not self._dedup.claim(event.dedup_key):
            logger.warning("Skipping redelivered payout %s", event.dedup_key)
            return "duplicate event"

        try:
            entry = self._build_entry(profile, amount_cents)
            validate_entry(entry)
        except Exception:
            self._dedup.release(event.dedup_key)
            raise

        journal = build_payroll_journal(
            event.employee_id,
            entry.amount_cents,
            self._ledger_config,
            timestamp=datetime.now(timezone.utc),
        )
        return ReconciledPayout(entry=entry, journal=journal)

    def _build_entry(self, profile: EmployeeBankProfile, amount_cents: int) -> NachaEntry:
        return NachaEntry(
            transaction_code=transaction_code_for(profile.account_type),
            rdfi_routing=profile.routing_number,
            dfi_account=profile.account_number,
            amount_cents=amount_cents,
            individual_id=profile.individual_id,
            individual_name=profile.name.upper()[:NAME_WIDTH],
            trace_seq=self._trace.next(),
        )

    @staticmethod
    def _skip(event: PayoutEvent, reason: str) -> str:
        logger.info("Skipping payout for employee #%s: %s", event.employee_id, reason)
        return reason
