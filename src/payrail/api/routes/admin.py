"""Admin endpoints: push payouts, inspect and flush the pending batch."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from starlette.concurrency import run_in_threadpool

from payrail.core.exceptions import ConfigurationError, ConversionError, FlushError, NachaValidationError
from payrail.models.payout import PayoutEvent, PayoutReceipt

router = APIRouter(tags=["admin"])


@router.post("/payouts")
async def push_payout(event: PayoutEvent, request: Request) -> PayoutReceipt:
    """Reconcile one payout event delivered by the chain listener."""
    service = request.app.state.service
    try:
        return await run_in_threadpool(service.on_payout, event)
    except (ConversionError, NachaValidationError) as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except ConfigurationError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@router.get("/batch")
async def pending_batch(request: Request) -> dict:
    """Return the number of entries waiting for the next cutoff."""
    service = request.app.state.service
    return {
        "pending_entries": service.pending_count(),
        "failed_flushes": [f.tag for f in service.scheduler.failures],
    }


@router.post("/batch/flush")
async def flush_batch(request: Request) -> dict:
    """Force a cutoff now."""
    service = request.app.state.service
    try:
        result = await run_in_threadpool(service.flush)
    except ConfigurationError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except FlushError as exc:
        raise HTTPException(
            status_code=502,
            detail={"tag": exc.tag, "diagnostic": exc.diagnostic, "entry_count": len(exc.entries)},
        ) from exc
    if result is None:
        return {"flushed": False, "entry_count": 0}
    return {
        "flushed": True,
        "tag": result.tag,
        "entry_count": result.entry_count,
        "credit_total_cents": result.credit_total_cents,
        "record_count": result.record_count,
        "location": result.receipt.location,
    }
