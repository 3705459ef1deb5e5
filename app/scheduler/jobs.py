"""
app/scheduler/jobs.py

APScheduler-based periodic rebuild of the demand snapshot.

The job re-runs the whole CSV aggregation from ``DEMAND_DATA_DIR``; there is
no incremental update. A failed run is logged and the previously published
snapshot keeps serving.

Lifecycle
----------
Call ``build_scheduler()`` once to get a configured ``BackgroundScheduler``.
Start it on app boot; shut it down gracefully on app shutdown.
The scheduler is wired into FastAPI via the ``lifespan`` context in main.py
and only when ``DEMAND_REFRESH_INTERVAL_MINUTES`` is positive.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from app.config import DemandSettings, get_demand_settings
from app.services.csv_ingestion_service import get_csv_ingestion_service
from app.services.snapshot_loader import rebuild_snapshot
from app.services.snapshot_store import get_snapshot_store

logger = logging.getLogger(__name__)


def refresh_demand_snapshot() -> None:
    """
    Rebuild and publish the snapshot. Never raises.
    """

    try:
        summary = rebuild_snapshot(
            settings=get_demand_settings(),
            store=get_snapshot_store(),
            ingestion_service=get_csv_ingestion_service(),
        )
    except Exception as exc:  # noqa: BLE001
        logger.warning("Scheduler: demand snapshot refresh failed: %s", exc)
        return

    logger.info(
        "Scheduler: demand snapshot refreshed files=%d accepted=%d rejected=%d",
        len(summary.files),
        summary.rows_accepted,
        summary.rows_rejected,
    )


def build_scheduler(settings: DemandSettings | None = None) -> BackgroundScheduler:
    """
    Build and register the refresh job.

    Returns a configured but *not yet started* ``BackgroundScheduler``.
    The caller must call ``.start()`` and ``.shutdown(wait=True)`` at the
    appropriate lifecycle points.
    """

    settings = settings or get_demand_settings()
    scheduler = BackgroundScheduler(timezone="UTC")

    scheduler.add_job(
        refresh_demand_snapshot,
        trigger="interval",
        minutes=settings.refresh_interval_minutes,
        id="refresh_demand_snapshot",
        name="Demand snapshot rebuild",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=600,
    )

    return scheduler
