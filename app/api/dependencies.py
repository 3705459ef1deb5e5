"""
app/api/dependencies.py

Shared FastAPI dependencies for demand endpoints.
"""

from __future__ import annotations

from fastapi import Depends

from app.services.demand_query_service import DemandQueryService
from app.services.snapshot_store import SnapshotStore, get_snapshot_store


def get_demand_query_service(
    store: SnapshotStore = Depends(get_snapshot_store),
) -> DemandQueryService:
    """
    Query service bound to the process-wide snapshot store.
    """

    return DemandQueryService(store)
