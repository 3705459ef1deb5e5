"""
demand/builder.py

Folds canonical records into the State -> Category -> Crop hierarchy.

The builder owns every lookup map used during a run. Feed it records with
``add`` / ``add_all`` from a single thread, then call ``build`` once to get
the frozen :class:`~demand.models.HierarchySnapshot`. A builder cannot be
reused after ``build``.

Merge rules
-----------
- States are keyed by their exact state string.
- Categories are keyed by canonical category name within a state.
- Crops are keyed by lowercased, trimmed crop name within a state/category.
  The scientific name is not part of the key; the first-seen value is kept,
  even when it is blank.
- Every merged row adds its quantity to the crop's demand.
- Region facts are unique per crop by (district, suitability). The same
  district may appear more than once at different suitability levels.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Iterable

from demand.categories import VALID_CATEGORIES, category_slug
from demand.models import (
    CanonicalRecord,
    CategoryDemand,
    CategoryRef,
    Crop,
    DemandSummary,
    HierarchySnapshot,
    RegionFact,
    StateDemand,
)

logger = logging.getLogger(__name__)


def crop_key(crop_name: str) -> str:
    return crop_name.strip().lower()


def _new_crop_id() -> str:
    return str(uuid.uuid4())


def _utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


# ---------------------------------------------------------------------------
# Mutable accumulators (never escape the builder)
# ---------------------------------------------------------------------------


@dataclass
class _CropAccumulator:
    crop_id: str
    crop_name: str
    scientific_name: str
    category_ref: CategoryRef
    demand_quantity: float = 0.0
    regions: dict[tuple[str, str], RegionFact] = field(default_factory=dict)

    def merge(self, record: CanonicalRecord) -> None:
        self.demand_quantity += record.quantity
        fact = RegionFact(
            district=record.district,
            state=record.state,
            suitability=record.suitability,
        )
        self.regions.setdefault(fact.identity, fact)

    def freeze(self) -> Crop:
        return Crop(
            crop_id=self.crop_id,
            crop_name=self.crop_name,
            scientific_name=self.scientific_name,
            category_ref=self.category_ref,
            demand_quantity=self.demand_quantity,
            regions=tuple(self.regions.values()),
        )


@dataclass
class _StateAccumulator:
    name: str
    # category name -> crop key -> crop
    categories: dict[str, dict[str, _CropAccumulator]] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


class AggregationBuilder:
    """
    Single-pass, single-owner aggregation of canonical records.

    Parameters
    ----------
    categories:
        Canonical category order emitted for every state.
    id_factory:
        Mints crop ids; defaults to random UUID4 strings.
    clock:
        Returns the completion timestamp stamped on every state summary.
    """

    def __init__(
        self,
        *,
        categories: tuple[str, ...] = VALID_CATEGORIES,
        id_factory: Callable[[], str] = _new_crop_id,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._categories = categories
        self._id_factory = id_factory
        self._clock = clock
        self._states: dict[str, _StateAccumulator] = {}
        self._records_merged = 0
        self._built = False

    @property
    def records_merged(self) -> int:
        return self._records_merged

    @property
    def total_quantity(self) -> float:
        return sum(
            crop.demand_quantity
            for state in self._states.values()
            for crops in state.categories.values()
            for crop in crops.values()
        )

    def add(self, record: CanonicalRecord) -> None:
        if self._built:
            raise RuntimeError("AggregationBuilder.build() has already been called.")
        if record.category not in self._categories:
            raise ValueError(f"Record category '{record.category}' is not a known category.")
        if record.quantity <= 0:
            logger.debug("Skipping non-positive quantity for crop=%r", record.crop_name)
            return

        state = self._states.get(record.state)
        if state is None:
            state = self._states[record.state] = _StateAccumulator(name=record.state)

        crops = state.categories.setdefault(record.category, {})
        key = crop_key(record.crop_name)
        crop = crops.get(key)
        if crop is None:
            crop = crops[key] = _CropAccumulator(
                crop_id=self._id_factory(),
                crop_name=record.crop_name.strip(),
                scientific_name=record.scientific_name,
                category_ref=CategoryRef(
                    id=category_slug(record.category),
                    name=record.category,
                ),
            )

        crop.merge(record)
        self._records_merged += 1

    def add_all(self, records: Iterable[CanonicalRecord]) -> int:
        count = 0
        for record in records:
            self.add(record)
            count += 1
        return count

    def build(self) -> HierarchySnapshot:
        """
        Freeze the accumulated hierarchy.

        Every state lists the full category set in canonical order, empty
        categories included. All states share one completion timestamp.
        """

        if self._built:
            raise RuntimeError("AggregationBuilder.build() has already been called.")
        self._built = True

        completed_at = self._clock()
        states: list[StateDemand] = []
        for accumulator in self._states.values():
            categories = tuple(
                CategoryDemand(
                    name=name,
                    crops=tuple(
                        crop.freeze()
                        for crop in accumulator.categories.get(name, {}).values()
                    ),
                )
                for name in self._categories
            )
            states.append(
                StateDemand(
                    name=accumulator.name,
                    categories=categories,
                    summary=DemandSummary.from_categories(
                        categories,
                        total_categories=len(self._categories),
                        last_updated=completed_at,
                    ),
                )
            )

        snapshot = HierarchySnapshot(states=tuple(states), generated_at=completed_at)
        logger.debug(
            "Aggregation built states=%d crops=%d records=%d",
            len(snapshot),
            snapshot.total_crops,
            self._records_merged,
        )
        self._states = {}
        return snapshot


def build_snapshot(
    records: Iterable[CanonicalRecord],
    *,
    builder: AggregationBuilder | None = None,
) -> HierarchySnapshot:
    """
    Convenience wrapper: aggregate *records* in one call.
    """

    builder = builder or AggregationBuilder()
    builder.add_all(records)
    return builder.build()
