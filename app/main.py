from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.schemas.demand import HealthResponse
from app.services.snapshot_store import SnapshotStore, get_snapshot_store


def _validate_env() -> None:
    """
    Validate demand configuration at startup.

    Raises RuntimeError listing every invalid setting so the operator can
    fix all problems in one restart cycle.

    Rules:
    - DEMAND_DATA_DIR, when set, must be an existing directory.
    - A positive DEMAND_REFRESH_INTERVAL_MINUTES requires DEMAND_DATA_DIR.
    """

    from app.config import get_demand_settings

    settings = get_demand_settings()
    errors: list[str] = []

    if settings.data_dir is not None and not Path(settings.data_dir).is_dir():
        errors.append(f"DEMAND_DATA_DIR='{settings.data_dir}' is not an existing directory.")

    if settings.refresh_enabled and settings.data_dir is None:
        errors.append(
            "DEMAND_REFRESH_INTERVAL_MINUTES is positive but DEMAND_DATA_DIR is not set. "
            "Set DEMAND_DATA_DIR or disable refresh with DEMAND_REFRESH_INTERVAL_MINUTES=0."
        )

    if errors:
        raise RuntimeError(
            "Startup validation failed: missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Publish the initial snapshot and start the refresh scheduler on boot; shut it down on exit."""
    from app.config import get_demand_settings
    from app.services.csv_ingestion_service import get_csv_ingestion_service
    from app.services.snapshot_loader import load_initial_snapshot

    log = logging.getLogger(__name__)
    settings = get_demand_settings()
    load_initial_snapshot(
        settings=settings,
        store=get_snapshot_store(),
        ingestion_service=get_csv_ingestion_service(),
    )

    if not settings.refresh_enabled:
        yield
        return

    from app.scheduler.jobs import build_scheduler

    scheduler = build_scheduler(settings)
    scheduler.start()
    log.info("Scheduler started with %d jobs", len(scheduler.get_jobs()))
    try:
        yield
    finally:
        scheduler.shutdown(wait=True)
        log.info("Scheduler shut down")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    from app.config import get_demand_settings

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="Crop Demand API",
        version="1.0.0",
        lifespan=_lifespan,
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=list(get_demand_settings().cors_allow_origins),
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    from app.api.routers import demand_router

    application.include_router(demand_router)

    @application.get("/health", response_model=HealthResponse)
    def healthcheck(store: SnapshotStore = Depends(get_snapshot_store)) -> HealthResponse:
        return HealthResponse(
            status="ok",
            data_loaded=store.is_loaded,
            timestamp=datetime.now(tz=timezone.utc),
        )

    return application


app = create_app()
