"""Submission and flush result models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class SubmissionReceipt(BaseModel):
    """What a transport returns after accepting a file."""

    mode: str  # LOCAL, S3, MEMORY
    location: str


class FlushResult(BaseModel):
    """Summary of one cutoff flush."""

    tag: str
    created_at: datetime
    entry_count: int
    credit_total_cents: int
    record_count: int
    receipt: SubmissionReceipt
    file_text: str
