"""NACHA PPD entry, batch and file header models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class NachaEntry(BaseModel):
    """One ACH credit instruction (Entry Detail record)."""

    transaction_code: Literal["22", "32"]  # 22 checking credit, 32 savings credit
    rdfi_routing: str  # 9 digits
    dfi_account: str  # up to 17
    amount_cents: int
    individual_id: str = ""  # 15
    individual_name: str  # 22, upper-cased
    addenda: Literal[0] = 0
    trace_seq: int  # 7-digit sequence

    model_config = {"frozen": True}


class NachaBatch(BaseModel):
    """A PPD credits-only batch."""

    company_name: str
    company_id: str
    entry_desc: str = "PAYROLL"
    effective_date_yymmdd: str
    odfi_id8: str
    service_class: Literal["200"] = "200"
    sec_code: Literal["PPD"] = "PPD"
    entries: tuple[NachaEntry, ...] = Field(default_factory=tuple)

    model_config = {"frozen": True}


class NachaFileHeader(BaseModel):
    """Per-file metadata for the File Header record."""

    immediate_dest: str  # " " + 9-digit routing
    immediate_origin: str
    dest_name: str
    origin_name: str
    file_id_mod: str = "A"  # A..Z, rotates on same-day resubmission

    model_config = {"frozen": True}
