"""
app/services/snapshot_store.py

Process-wide holder for the published demand snapshot.

Publishing swaps one reference under a lock; readers take the reference
without locking and work on an immutable object, so a query never sees a
half-built aggregation.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone

from app.logging_utils import log_event
from demand.city_index import CityIndexBuilder
from demand.errors import SnapshotUnavailableError
from demand.models import CityIndex, HierarchySnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublishedSnapshot:
    snapshot: HierarchySnapshot
    published_at: datetime
    source: str


class SnapshotStore:
    """
    Holds the current snapshot and its lazily built city index.
    """

    def __init__(self, *, index_builder: CityIndexBuilder | None = None) -> None:
        self._lock = threading.Lock()
        self._current: PublishedSnapshot | None = None
        self._index_builder = index_builder or CityIndexBuilder()
        # (snapshot, index) pair so a stale index is never served for a new snapshot
        self._city_index: tuple[HierarchySnapshot, CityIndex] | None = None

    @property
    def is_loaded(self) -> bool:
        current = self._current
        return current is not None and not current.snapshot.is_empty

    @property
    def current(self) -> PublishedSnapshot | None:
        return self._current

    def publish(self, snapshot: HierarchySnapshot, *, source: str) -> PublishedSnapshot:
        published = PublishedSnapshot(
            snapshot=snapshot,
            published_at=datetime.now(tz=timezone.utc),
            source=source,
        )
        with self._lock:
            self._current = published
            self._city_index = None
        log_event(
            logger,
            logging.INFO,
            "snapshot_published",
            source=source,
            states=len(snapshot),
            crops=snapshot.total_crops,
        )
        return published

    def clear(self) -> None:
        with self._lock:
            self._current = None
            self._city_index = None

    def get(self) -> HierarchySnapshot:
        """
        Return the published snapshot.

        Raises SnapshotUnavailableError when nothing (or only an empty
        aggregation) has been published.
        """

        current = self._current
        if current is None or current.snapshot.is_empty:
            raise SnapshotUnavailableError(
                "Demand data has not been loaded. Build or load a snapshot first."
            )
        return current.snapshot

    def city_index(self) -> CityIndex:
        snapshot = self.get()
        cached = self._city_index
        if cached is not None and cached[0] is snapshot:
            return cached[1]

        index = self._index_builder.build(snapshot)
        with self._lock:
            current = self._current
            if current is not None and current.snapshot is snapshot:
                self._city_index = (snapshot, index)
        return index


_store = SnapshotStore()


def get_snapshot_store() -> SnapshotStore:
    return _store
