"""
app/services/demand_query_service.py

Read-side query boundary over the published snapshot.

Validates query arguments, resolves the current snapshot (failing fast with
SnapshotUnavailableError) and delegates to the projection engines. No HTTP
concerns live here; the router maps exceptions to status codes.
"""

from __future__ import annotations

import logging

from app.services.snapshot_store import SnapshotStore
from demand.errors import CityNotFoundError, MissingQueryParameterError
from demand.models import CityEntry, CityIndex, CityProjection
from demand.projection import CityProjector

logger = logging.getLogger(__name__)


class DemandQueryService:
    def __init__(
        self,
        store: SnapshotStore,
        *,
        projector: CityProjector | None = None,
    ) -> None:
        self._store = store
        self._projector = projector or CityProjector()

    @property
    def store(self) -> SnapshotStore:
        return self._store

    def project_city(
        self,
        city: str | None,
        *,
        state: str | None = None,
        category: str | None = None,
    ) -> CityProjection:
        """
        Crops grown in *city*, optionally narrowed by state and category.

        Raises MissingQueryParameterError for a blank city,
        SnapshotUnavailableError before any lookup when nothing is loaded,
        and CityNotFoundError when the filters leave no data.
        """

        cleaned = self._require_city(city)
        snapshot = self._store.get()
        projection = self._projector.project(snapshot, cleaned, state=state, category=category)
        logger.debug(
            "City projection city=%r states=%d crops=%d",
            projection.city,
            projection.summary.total_states,
            projection.summary.total_crops,
        )
        return projection

    def list_cities(self) -> list[str]:
        return self._store.get().districts()

    def city_index(self) -> CityIndex:
        return self._store.city_index()

    def city_index_entry(self, city: str | None) -> CityEntry:
        cleaned = self._require_city(city)
        entry = self._store.city_index().get(cleaned)
        if entry is None:
            raise CityNotFoundError(cleaned)
        return entry

    @staticmethod
    def _require_city(city: str | None) -> str:
        cleaned = (city or "").strip()
        if not cleaned:
            raise MissingQueryParameterError("city")
        return cleaned
