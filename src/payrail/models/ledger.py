"""Double-entry journal models."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class JournalLine(BaseModel):
    account: str
    dc: Literal["D", "C"]
    amount_cents: int
    entity: str

    model_config = {"frozen": True}


class JournalEntry(BaseModel):
    """A balanced journal entry posted alongside each queued ACH credit."""

    timestamp: datetime
    memo: str
    lines: tuple[JournalLine, ...] = Field(default_factory=tuple)

    model_config = {"frozen": True}

    @property
    def debit_total(self) -> int:
        return sum(line.amount_cents for line in self.lines if line.dc == "D")

    @property
    def credit_total(self) -> int:
        return sum(line.amount_cents for line in self.lines if line.dc == "C")

    @property
    def is_balanced(self) -> bool:
        return bool(self.lines) and self.debit_total == self.credit_total
