"""Service facade wiring reconciler, queue, ledger and scheduler together."""

from __future__ import annotations

from payrail.core.config import AppSettings
from payrail.core.protocols import ILedger
from payrail.ledger.journal import LoggingLedger
from payrail.models.payout import PayoutEvent, PayoutReceipt
from payrail.models.submission import FlushResult
from payrail.persistence import Persistence, create_persistence
from payrail.pipeline.reconciler import PayoutReconciler
from payrail.pipeline.scheduler import CutoffScheduler


class PayrailService:
    """One reconciler and one scheduler sharing one accumulator."""

    def __init__(
        self,
        settings: AppSettings,
        persistence: Persistence,
        ledger: ILedger,
    ) -> None:
        self.settings = settings
        self.persistence = persistence
        self.reconciler = PayoutReconciler(
            profiles=persistence.profiles,
            trace_sequence=persistence.trace_sequence,
            dedup=persistence.dedup,
            conversion=settings.conversion,
            ledger_config=settings.ledger,
            accumulator=persistence.accumulator,
            ledger=ledger,
        )
        self.scheduler = CutoffScheduler(
            accumulator=persistence.accumulator,
            transport=persistence.transport,
            nacha=settings.nacha,
            interval_seconds=settings.scheduler.interval_seconds,
            dead_letters=persistence.dead_letters,
        )

    def on_payout(self, event: PayoutEvent) -> PayoutReceipt:
        """Subscription callback: invoked once per finalized on-chain payout."""
        return self.reconciler.handle(event)

    def flush(self) -> FlushResult | None:
        return self.scheduler.flush()

    def pending_count(self) -> int:
        return self.persistence.accumulator.pending_count()


def build_service(settings: AppSettings | None = None, ledger: ILedger | None = None) -> PayrailService:
    settings = settings or AppSettings()
    return PayrailService(settings, create_persistence(settings), ledger or LoggingLedger())
