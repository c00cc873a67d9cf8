"""FastAPI application with lifespan and router mounting."""

from __future__ import annotations

import asyncio
import contextlib
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from payrail.api.routes import admin, health
from payrail.core.config import AppSettings
from payrail.core.logging import setup_logging
from payrail.pipeline.service import PayrailService, build_service


def create_app(service: PayrailService | None = None, *, run_scheduler: bool = True) -> FastAPI:
    """Create and configure the FastAPI application.

    ``service`` is built from ``AppSettings`` when not supplied; with
    ``run_scheduler`` the cutoff loop runs for the lifetime of the app.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        svc = service or build_service(AppSettings())
        setup_logging(svc.settings.log_level)
        app.state.service = svc

        stop = asyncio.Event()
        task = asyncio.create_task(svc.scheduler.run(stop)) if run_scheduler else None
        try:
            yield
        finally:
            stop.set()
            if task is not None:
                with contextlib.suppress(asyncio.CancelledError):
                    await task

    app = FastAPI(
        title="PayRail Payout-to-NACHA Bridge",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(health.router)
    app.include_router(admin.router, prefix="/admin")
    return app
