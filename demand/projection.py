"""
demand/projection.py

District-scoped projection of a published snapshot.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from demand.errors import CityNotFoundError
from demand.models import (
    CategoryDemand,
    CityProjection,
    Crop,
    DemandSummary,
    HierarchySnapshot,
    ProjectionSummary,
    StateDemand,
)

logger = logging.getLogger(__name__)


def _clean_filter(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def _matches(value: str, wanted: str | None) -> bool:
    return wanted is None or value.casefold() == wanted.casefold()


def summarize_states(states: tuple[StateDemand, ...]) -> ProjectionSummary:
    """
    Roll projected states up into a top-level summary.
    """

    return ProjectionSummary(
        total_states=len(states),
        total_categories=sum(state.summary.total_categories for state in states),
        total_crops=sum(state.summary.total_crops for state in states),
        total_demand=sum(state.summary.total_demand for state in states),
    )


def projected_state(name: str, categories: list[CategoryDemand]) -> StateDemand:
    """
    Build a projected state from its non-empty categories.
    """

    frozen = tuple(categories)
    return StateDemand(
        name=name,
        categories=frozen,
        summary=DemandSummary.from_categories(frozen, total_categories=len(frozen)),
    )


class CityProjector:
    """
    Re-projects a snapshot onto one district.

    Crops keep their state-wide ``demand_quantity``; the region list of each
    crop is narrowed to the single fact for the queried district within the
    containing state. Never mutates the snapshot.
    """

    def project(
        self,
        snapshot: HierarchySnapshot,
        district: str,
        *,
        state: str | None = None,
        category: str | None = None,
    ) -> CityProjection:
        """
        Project *snapshot* onto *district*.

        ``city`` on the result is the district as recorded in the first
        matching region fact, not the query string.

        Raises
        ------
        CityNotFoundError
            When no state retains any crop after filtering.
        """

        city = district.strip()
        state_filter = _clean_filter(state)
        category_filter = _clean_filter(category)

        states: list[StateDemand] = []
        for state_demand in snapshot.states:
            if not _matches(state_demand.name, state_filter):
                continue

            categories: list[CategoryDemand] = []
            for category_demand in state_demand.categories:
                if not _matches(category_demand.name, category_filter):
                    continue
                crops = self._crops_in_city(category_demand, city, state_demand.name)
                if crops:
                    categories.append(CategoryDemand(name=category_demand.name, crops=crops))

            if categories:
                states.append(projected_state(state_demand.name, categories))

        if not states:
            logger.debug(
                "City projection empty city=%r state=%r category=%r",
                city,
                state_filter,
                category_filter,
            )
            raise CityNotFoundError(city, state=state_filter, category=category_filter)

        projected = tuple(states)
        # Report the district as recorded so differently-cased queries agree.
        recorded = projected[0].categories[0].crops[0].regions[0].district
        return CityProjection(
            city=recorded,
            states=projected,
            summary=summarize_states(projected),
            state_filter=state_filter,
            category_filter=category_filter,
        )

    @staticmethod
    def _crops_in_city(
        category: CategoryDemand,
        city: str,
        state_name: str,
    ) -> tuple[Crop, ...]:
        selected: list[Crop] = []
        for crop in category.crops:
            matching = crop.regions_in(city, state_name)
            if matching:
                selected.append(replace(crop, regions=matching[:1]))
        return tuple(selected)
