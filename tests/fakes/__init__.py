"""Shared test doubles and builders. Re-exports the memory backends."""

from __future__ import annotations

from datetime import datetime

from payrail.core.config import NachaConfig
from payrail.models.nacha import NachaBatch, NachaEntry, NachaFileHeader
from payrail.models.payout import AccountType, EmployeeBankProfile, PayPreference
from payrail.persistence.memory_backend import (
    MemoryBankProfileStore,
    MemoryFileStore,
    MemoryLedger,
    MemoryTransport,
)

CREATED_AT = datetime(2024, 3, 14, 15, 9)
ODFI_ID8 = "02100002"


def make_entry(
    trace_seq: int = 1,
    *,
    routing: str = "021000021",
    amount_cents: int = 150,
    code: str = "22",
    name: str = "ADA LOVELACE",
    account: str = "123456789",
    individual_id: str = "EMP0001",
) -> NachaEntry:
    return NachaEntry(
        transaction_code=code,
        rdfi_routing=routing,
        dfi_account=account,
        amount_cents=amount_cents,
        individual_id=individual_id,
        individual_name=name,
        trace_seq=trace_seq,
    )


def make_batch(entries: list[NachaEntry], **overrides) -> NachaBatch:
    fields = {
        "company_name": "ACME PAYROLL",
        "company_id": "1234567890",
        "entry_desc": "PAYROLL",
        "effective_date_yymmdd": "240315",
        "odfi_id8": ODFI_ID8,
        "entries": tuple(entries),
    }
    fields.update(overrides)
    return NachaBatch(**fields)


def make_header(**overrides) -> NachaFileHeader:
    fields = {
        "immediate_dest": " 021000021",
        "immediate_origin": "1234567890",
        "dest_name": "FEDERAL RESERVE BANK",
        "origin_name": "ACME PAYROLL LLC",
        "file_id_mod": "A",
    }
    fields.update(overrides)
    return NachaFileHeader(**fields)


def make_nacha_config(**overrides) -> NachaConfig:
    fields = {
        "immediate_dest": "021000021",
        "immediate_origin": "1234567890",
        "dest_name": "FEDERAL RESERVE BANK",
        "origin_name": "ACME PAYROLL LLC",
        "file_id_mod": "A",
        "company_name": "ACME PAYROLL",
        "company_id": "1234567890",
        "entry_desc": "PAYROLL",
        "odfi_id8": ODFI_ID8,
    }
    fields.update(overrides)
    return NachaConfig(**fields)


def make_profile(employee_id: int = 1, **overrides) -> EmployeeBankProfile:
    fields = {
        "employee_id": employee_id,
        "name": "Ada Lovelace",
        "individual_id": f"EMP{employee_id:04d}",
        "routing_number": "021000021",
        "account_number": "123456789",
        "account_type": AccountType.CHECKING,
        "pay_preference": PayPreference.ACH,
    }
    fields.update(overrides)
    return EmployeeBankProfile(**fields)


__all__ = [
    "CREATED_AT",
    "ODFI_ID8",
    "MemoryBankProfileStore",
    "MemoryFileStore",
    "MemoryLedger",
    "MemoryTransport",
    "make_batch",
    "make_entry",
    "make_header",
    "make_nacha_config",
    "make_profile",
]
