"""
app/services/snapshot_loader.py

Startup load and wholesale rebuild of the published snapshot.
"""

from __future__ import annotations

import logging

from app.config import DemandSettings
from app.domain.ingestion import IngestionSummary
from app.services.csv_ingestion_service import CSVIngestionService, CSVSourceError
from app.services.snapshot_store import SnapshotStore
from demand.document import read_snapshot, write_snapshot
from demand.errors import SnapshotDocumentError

logger = logging.getLogger(__name__)


def rebuild_snapshot(
    *,
    settings: DemandSettings,
    store: SnapshotStore,
    ingestion_service: CSVIngestionService,
) -> IngestionSummary:
    """
    Rebuild from ``settings.data_dir``, persist the document, then publish.

    The store is only touched after the new snapshot is complete, so a
    failure anywhere leaves the previous snapshot in place.
    """

    if settings.data_dir is None:
        raise RuntimeError("DEMAND_DATA_DIR is not configured; cannot rebuild snapshot.")

    snapshot, summary = ingestion_service.build_snapshot(settings.data_dir)
    write_snapshot(snapshot, settings.snapshot_path)
    store.publish(snapshot, source=f"csv:{settings.data_dir}")
    return summary


def load_initial_snapshot(
    *,
    settings: DemandSettings,
    store: SnapshotStore,
    ingestion_service: CSVIngestionService,
) -> bool:
    """
    Publish the persisted snapshot if present, else build one from CSVs.

    Returns True when a snapshot was published. Missing or unreadable data
    is not fatal: the API starts anyway and answers 503 until a later
    refresh succeeds.
    """

    if settings.snapshot_path.exists():
        try:
            snapshot = read_snapshot(settings.snapshot_path)
        except (SnapshotDocumentError, OSError) as exc:
            logger.error("Unable to load demand snapshot from %s: %s", settings.snapshot_path, exc)
        else:
            store.publish(snapshot, source=f"file:{settings.snapshot_path}")
            logger.info(
                "Demand snapshot loaded from %s (%d states)",
                settings.snapshot_path,
                len(snapshot),
            )
            return True

    if settings.data_dir is not None:
        try:
            summary = rebuild_snapshot(
                settings=settings,
                store=store,
                ingestion_service=ingestion_service,
            )
        except (CSVSourceError, OSError) as exc:
            logger.error("Unable to build demand snapshot from %s: %s", settings.data_dir, exc)
            return False
        logger.info(
            "Demand snapshot built from %d CSV file(s) (%d states)",
            len(summary.files),
            summary.total_states,
        )
        return True

    logger.error(
        "No demand snapshot at %s and DEMAND_DATA_DIR is not set; serving without data.",
        settings.snapshot_path,
    )
    return False
