"""
demand/models.py

Domain models for the aggregated crop demand hierarchy.

Everything here is frozen. The builder keeps its own mutable accumulators
and only hands out these types once a run has finished, so a published
snapshot can be shared by any number of readers without locking.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Final, Iterator

UNIT: Final[str] = "tons per week"
GEOGRAPHY: Final[str] = "India"

SUITABILITY_LEVELS: Final[tuple[str, ...]] = ("Low", "Medium", "High")
DEFAULT_SUITABILITY: Final[str] = "Medium"


@dataclass(frozen=True)
class CanonicalRecord:
    """
    One validated, field-normalized input row.
    """

    state: str
    category: str
    crop_name: str
    scientific_name: str
    district: str
    quantity: float
    suitability: str = DEFAULT_SUITABILITY


@dataclass(frozen=True)
class RegionFact:
    """
    One (district, suitability) observation attached to a crop.
    """

    district: str
    state: str
    suitability: str
    geography: str = GEOGRAPHY

    @property
    def identity(self) -> tuple[str, str]:
        # state is deliberately excluded: a crop is already scoped to one state.
        return (self.district, self.suitability)


@dataclass(frozen=True)
class CategoryRef:
    id: str
    name: str


@dataclass(frozen=True)
class Crop:
    """
    Deduplicated aggregate of every row sharing a crop name within one
    state/category.
    """

    crop_id: str
    crop_name: str
    scientific_name: str
    category_ref: CategoryRef
    demand_quantity: float
    regions: tuple[RegionFact, ...] = ()

    def regions_in(self, district: str, state: str) -> tuple[RegionFact, ...]:
        """
        Return facts whose district matches case-insensitively and whose
        recorded state equals *state*.
        """

        wanted = district.casefold()
        return tuple(
            region
            for region in self.regions
            if region.district.casefold() == wanted and region.state == state
        )


@dataclass(frozen=True)
class CategoryDemand:
    name: str
    crops: tuple[Crop, ...] = ()

    @property
    def count(self) -> int:
        return len(self.crops)

    @property
    def total_demand(self) -> float:
        return sum(crop.demand_quantity for crop in self.crops)


@dataclass(frozen=True)
class DemandSummary:
    """
    Roll-up over a state (or a projected state).

    ``last_updated`` is only stamped on snapshot states; projections leave
    it unset.
    """

    total_categories: int
    total_crops: int
    total_demand: float
    unit: str = UNIT
    last_updated: datetime | None = None

    @classmethod
    def from_categories(
        cls,
        categories: tuple[CategoryDemand, ...],
        *,
        total_categories: int,
        last_updated: datetime | None = None,
    ) -> "DemandSummary":
        return cls(
            total_categories=total_categories,
            total_crops=sum(category.count for category in categories),
            total_demand=sum(category.total_demand for category in categories),
            last_updated=last_updated,
        )


@dataclass(frozen=True)
class StateDemand:
    name: str
    categories: tuple[CategoryDemand, ...]
    summary: DemandSummary

    def iter_crops(self) -> Iterator[Crop]:
        for category in self.categories:
            yield from category.crops


@dataclass(frozen=True)
class HierarchySnapshot:
    """
    Complete immutable result of one aggregation run.
    """

    states: tuple[StateDemand, ...] = ()
    generated_at: datetime | None = None

    def __len__(self) -> int:
        return len(self.states)

    @property
    def is_empty(self) -> bool:
        return not self.states

    def iter_crops(self) -> Iterator[Crop]:
        for state in self.states:
            yield from state.iter_crops()

    @property
    def total_crops(self) -> int:
        return sum(state.summary.total_crops for state in self.states)

    @property
    def total_demand(self) -> float:
        return sum(state.summary.total_demand for state in self.states)

    def districts(self) -> list[str]:
        """
        Distinct non-empty district names seen in any region fact, sorted.
        """

        seen: set[str] = {
            region.district
            for crop in self.iter_crops()
            for region in crop.regions
            if region.district
        }
        return sorted(seen)


@dataclass(frozen=True)
class ProjectionSummary:
    """
    Top-level roll-up for city projections and city index entries.
    """

    total_states: int
    total_categories: int
    total_crops: int
    total_demand: float
    unit: str = UNIT


@dataclass(frozen=True)
class CityProjection:
    """
    District-scoped view over a snapshot.

    ``demand_quantity`` on every crop is still the state-wide total; only the
    region list is narrowed to the queried district.
    """

    city: str
    states: tuple[StateDemand, ...]
    summary: ProjectionSummary
    state_filter: str | None = None
    category_filter: str | None = None


@dataclass(frozen=True)
class CityEntry:
    city: str
    states: tuple[StateDemand, ...]
    summary: ProjectionSummary


@dataclass(frozen=True)
class CityIndex:
    cities: tuple[CityEntry, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.cities)

    def get(self, city: str) -> CityEntry | None:
        wanted = city.casefold()
        for entry in self.cities:
            if entry.city.casefold() == wanted:
                return entry
        return None
