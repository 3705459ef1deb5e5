"""
app/services package marker.
"""

from app.services.csv_ingestion_service import (
    CSVIngestionService,
    CSVSourceError,
    get_csv_ingestion_service,
)
from app.services.demand_query_service import DemandQueryService
from app.services.snapshot_loader import load_initial_snapshot, rebuild_snapshot
from app.services.snapshot_store import PublishedSnapshot, SnapshotStore, get_snapshot_store

__all__ = [
    "CSVIngestionService",
    "CSVSourceError",
    "DemandQueryService",
    "get_csv_ingestion_service",
    "get_snapshot_store",
    "load_initial_snapshot",
    "PublishedSnapshot",
    "rebuild_snapshot",
    "SnapshotStore",
]
