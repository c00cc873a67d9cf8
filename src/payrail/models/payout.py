"""Payout events, token amounts and employee bank profiles.

``PayoutEvent`` is the contract delivered by the on-chain collaborator for
each finalized ``PayoutExecuted`` log. ``EmployeeBankProfile`` is the
read-only record the bank profile store hands back per employee.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class ConversionMode(StrEnum):
    STABLE_1TO1 = "STABLE_1TO1"
    ORACLE = "ORACLE"


class AccountType(StrEnum):
    CHECKING = "CHECKING"
    SAVINGS = "SAVINGS"


class PayPreference(StrEnum):
    ACH = "ACH"
    ONCHAIN = "ONCHAIN"


class TokenAmount(BaseModel):
    """Raw token quantity as reported by the chain."""

    amount_base_units: str  # decimal string, may exceed 64 bits
    decimals: int

    model_config = {"frozen": True}


class ConversionRule(BaseModel):
    """How to value one ERC-20 token in cents."""

    token: str = ""
    decimals: int = 6
    mode: ConversionMode = ConversionMode.STABLE_1TO1


class PayoutEvent(BaseModel):
    """A finalized on-chain payout."""

    employee_id: int
    wallet: str = ""
    token: str = ""
    amount_base_units: str
    pay_time: int  # unix seconds

    model_config = {"frozen": True}

    @property
    def dedup_key(self) -> str:
        return f"{self.employee_id}:{self.pay_time}"


class EmployeeBankProfile(BaseModel):
    """Destination bank details for an employee.

    Holds account and routing numbers: never log or cache these values.
    """

    employee_id: int
    name: str
    individual_id: str = ""
    routing_number: str
    account_number: str
    account_type: AccountType = AccountType.CHECKING
    pay_preference: PayPreference = PayPreference.ACH

    model_config = {"str_strip_whitespace": True}


class ReconcileOutcome(StrEnum):
    QUEUED = "QUEUED"
    SKIPPED = "SKIPPED"


class PayoutReceipt(BaseModel):
    """Result of handling one payout event."""

    employee_id: int
    outcome: ReconcileOutcome
    trace_seq: int | None = None
    amount_cents: int | None = None
    reason: str = Field(default="")
