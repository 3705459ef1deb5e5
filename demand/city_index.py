"""
demand/city_index.py

Inverts a State-first snapshot into a District-first index
(City -> State -> Category -> Crop).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from demand.models import (
    CategoryDemand,
    CityEntry,
    CityIndex,
    Crop,
    HierarchySnapshot,
    ProjectionSummary,
    RegionFact,
    StateDemand,
)
from demand.projection import projected_state

logger = logging.getLogger(__name__)


@dataclass
class _CropBucket:
    crop: Crop
    regions: list[RegionFact] = field(default_factory=list)

    def add(self, region: RegionFact) -> None:
        if all(existing.identity != region.identity for existing in self.regions):
            self.regions.append(region)

    def freeze(self) -> Crop:
        return replace(self.crop, regions=tuple(self.regions))


# city -> state -> category -> crop id -> bucket
_Buckets = dict[str, dict[str, dict[str, dict[str, _CropBucket]]]]


class CityIndexBuilder:
    """
    Builds the full city index for a snapshot.

    A crop whose regions span several districts appears once under each of
    them, carrying only the facts observed for that district. Districts are
    grouped case-insensitively under the first spelling seen. Crops are
    deduplicated by ``crop_id`` within a (city, state, category) bucket.
    """

    def build(self, snapshot: HierarchySnapshot) -> CityIndex:
        buckets: _Buckets = {}
        # casefolded district -> first spelling seen
        display_names: dict[str, str] = {}
        skipped = 0

        for state in snapshot.states:
            for category in state.categories:
                for crop in category.crops:
                    if crop.demand_quantity <= 0:
                        skipped += 1
                        continue
                    for region in crop.regions:
                        if not region.district:
                            continue
                        key = region.district.casefold()
                        display_names.setdefault(key, region.district)
                        by_crop = (
                            buckets.setdefault(key, {})
                            .setdefault(region.state, {})
                            .setdefault(category.name, {})
                        )
                        bucket = by_crop.get(crop.crop_id)
                        if bucket is None:
                            bucket = by_crop[crop.crop_id] = _CropBucket(crop=crop)
                        bucket.add(region)

        if skipped:
            logger.debug("City index skipped %d crops with non-positive demand", skipped)

        entries = [self._entry(display_names[key], states) for key, states in buckets.items()]
        entries.sort(key=lambda entry: entry.city)
        return CityIndex(cities=tuple(entries))

    @staticmethod
    def _entry(
        city: str,
        states: dict[str, dict[str, dict[str, _CropBucket]]],
    ) -> CityEntry:
        projected: list[StateDemand] = []
        category_names: set[str] = set()

        for state_name, categories in states.items():
            demands = [
                CategoryDemand(
                    name=category_name,
                    crops=tuple(bucket.freeze() for bucket in by_crop.values()),
                )
                for category_name, by_crop in categories.items()
            ]
            category_names.update(categories)
            projected.append(projected_state(state_name, demands))

        frozen = tuple(projected)
        return CityEntry(
            city=city,
            states=frozen,
            summary=ProjectionSummary(
                total_states=len(frozen),
                # distinct names, so a category present in two states counts once
                total_categories=len(category_names),
                total_crops=sum(state.summary.total_crops for state in frozen),
                total_demand=sum(state.summary.total_demand for state in frozen),
            ),
        )


def build_city_index(snapshot: HierarchySnapshot) -> CityIndex:
    return CityIndexBuilder().build(snapshot)
