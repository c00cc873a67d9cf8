"""Cutoff scheduler: drain pending entries, render, verify, submit.

Rendering happens after the drain and outside any lock. A flush that fails
after draining raises ``FlushError`` (``SubmissionError`` for transport
failures) carrying the drained entries and, when rendering succeeded, the
exact file text; nothing is retried here. Resubmit with ``resubmit`` so the
bank receives the same bytes, creation timestamp included.
"""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timedelta
from typing import Callable, Sequence

from payrail.core.config import NachaConfig
from payrail.core.exceptions import (
    ConfigurationError,
    FlushError,
    NachaValidationError,
    PayRailError,
    SubmissionError,
)
from payrail.core.logging import get_logger
from payrail.core.protocols import IBatchAccumulator, IFileStore, ISubmissionTransport
from payrail.models.nacha import NachaBatch, NachaEntry
from payrail.models.submission import FlushResult, SubmissionReceipt
from payrail.nacha.assembler import build_file
from payrail.nacha.parser import parse_file, verify_totals

logger = get_logger(__name__)


def submission_tag(now: datetime, entries: Sequence[NachaEntry]) -> str:
    """Name one drain: cutoff time to the second plus its trace sequence span.

    Every trace sequence belongs to exactly one drain, so two flushes never
    share a tag even within the same second.
    """
    seqs = [e.trace_seq for e in entries]
    return f"{now:%Y%m%d_%H%M%S}_{min(seqs):07d}-{max(seqs):07d}"


class CutoffScheduler:
    """Periodically turns the pending queue into one submitted NACHA file."""

    def __init__(
        self,
        *,
        accumulator: IBatchAccumulator,
        transport: ISubmissionTransport,
        nacha: NachaConfig,
        interval_seconds: float = 1800.0,
        dead_letters: IFileStore | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._accumulator = accumulator
        self._transport = transport
        self._nacha = nacha
        self._interval = interval_seconds
        self._dead_letters = dead_letters
        self._clock = clock
        self.failures: list[FlushError] = []

    def flush(self, now: datetime | None = None) -> FlushResult | None:
        """Run one cutoff. Returns ``None`` when nothing is pending.

        Raises:
            ConfigurationError: originator data missing (checked before draining).
            FlushError: rendering or verification failed after draining.
            SubmissionError: the transport rejected the rendered file.
        """
        now = now or self._clock()
        header = self._nacha.file_header()
        self._nacha.require("company_name", "company_id", "odfi_id8")

        entries = self._accumulator.drain_all()
        if not entries:
            logger.debug("Cutoff at %s: no pending entries, no file generated", now.isoformat())
            return None

        tag = submission_tag(now, entries)
        batch = self._batch_for(entries, now)
        try:
            file_text = build_file(header, [batch], created_at=now)
            verify_totals(parse_file(file_text))
        except NachaValidationError as exc:
            raise self._fail(FlushError(tag, "", entries, f"render failed: {exc}")) from exc

        try:
            receipt = self._transport.submit(file_text, tag)
        except Exception as exc:
            raise self._fail(
                SubmissionError(tag, file_text, entries, f"{type(exc).__name__}: {exc}")
            ) from exc

        credit_total = sum(e.amount_cents for e in entries)
        logger.info(
            "NACHA file payroll_%s submitted via %s to %s: %d entries, %d cents",
            tag, receipt.mode, receipt.location, len(entries), credit_total,
        )
        return FlushResult(
            tag=tag,
            created_at=now,
            entry_count=len(entries),
            credit_total_cents=credit_total,
            record_count=file_text.count("\n"),
            receipt=receipt,
            file_text=file_text,
        )

    def resubmit(self, error: SubmissionError) -> SubmissionReceipt:
        """Send the cached file text of a failed submission again."""
        receipt = self._transport.submit(error.file_text, error.tag)
        if error in self.failures:
            self.failures.remove(error)
        logger.info("Resubmitted payroll_%s via %s", error.tag, receipt.mode)
        return receipt

    async def run(self, stop: asyncio.Event) -> None:
        """Flush every ``interval_seconds`` until ``stop`` is set."""
        logger.info("Cutoff scheduler started, interval=%ss", self._interval)
        while not stop.is_set():
            try:
                await asyncio.wait_for(stop.wait(), timeout=self._interval)
                break
            except asyncio.TimeoutError:
                pass
            try:
                await asyncio.to_thread(self.flush)
            except FlushError as exc:
                logger.error("Cutoff flush failed, %d entries held for recovery: %s", len(exc.entries), exc)
            except ConfigurationError as exc:
                logger.error("Cutoff skipped, pending entries left queued: %s", exc)
            except PayRailError:
                logger.exception("Cutoff flush aborted, retrying at the next interval")
        logger.info("Cutoff scheduler stopped")

    def _batch_for(self, entries: list[NachaEntry], now: datetime) -> NachaBatch:
        effective = now + timedelta(days=self._nacha.effective_date_offset_days)
        return NachaBatch(
            company_name=self._nacha.company_name,
            company_id=self._nacha.company_id,
            entry_desc=self._nacha.entry_desc,
            effective_date_yymmdd=effective.strftime("%y%m%d"),
            odfi_id8=self._nacha.odfi_id8,
            entries=tuple(entries),
        )

    def _fail(self, error: FlushError) -> FlushError:
        self.failures.append(error)
        logger.error("Flush payroll_%s failed: %s", error.tag, error.diagnostic)
        if self._dead_letters is not None:
            self._write_dead_letter(error)
        return error

    def _write_dead_letter(self, error: FlushError) -> None:
        # Bank account data stays out of the diagnostic; the file text already carries it.
        diagnostic = {
            "tag": error.tag,
            "error": error.diagnostic,
            "entry_count": len(error.entries),
            "credit_total_cents": sum(e.amount_cents for e in error.entries),
            "trace_seqs": [e.trace_seq for e in error.entries],
            "rendered": bool(error.file_text),
        }
        try:
            if error.file_text:
                self._dead_letters.write(
                    f"failed/payroll_{error.tag}.ach", error.file_text.encode("ascii"), "text/plain",
                )
            self._dead_letters.write(
                f"failed/payroll_{error.tag}.json",
                json.dumps(diagnostic, indent=2).encode("utf-8"),
                "application/json",
            )
        except Exception:
            logger.exception("Could not write dead letter for payroll_%s", error.tag)
