"""
Shared fixtures for the demand test suite.

All fixtures are in-memory; crop ids and timestamps are deterministic.
"""

from __future__ import annotations

import itertools
from datetime import datetime, timezone
from typing import Callable

import pytest

from demand.builder import AggregationBuilder
from demand.models import CanonicalRecord, HierarchySnapshot

FIXED_NOW = datetime(2026, 1, 15, 8, 30, 0, 123456, tzinfo=timezone.utc)


def make_record(
    state: str = "Karnataka",
    category: str = "Vegetables",
    crop_name: str = "Tomato",
    district: str = "Bangalore",
    quantity: float = 100.0,
    suitability: str = "Medium",
    scientific_name: str = "",
) -> CanonicalRecord:
    return CanonicalRecord(
        state=state,
        category=category,
        crop_name=crop_name,
        scientific_name=scientific_name,
        district=district,
        quantity=quantity,
        suitability=suitability,
    )


def make_builder() -> AggregationBuilder:
    counter = itertools.count(1)
    return AggregationBuilder(
        id_factory=lambda: f"crop-{next(counter)}",
        clock=lambda: FIXED_NOW,
    )


SAMPLE_RECORDS: tuple[CanonicalRecord, ...] = (
    make_record("Karnataka", "Vegetables", "Tomato", "Bangalore", 100.0, "High"),
    make_record("Karnataka", "Vegetables", "Tomato", "Mysore", 50.0, "Medium"),
    make_record("Karnataka", "Fruits", "Mango", "Bangalore", 30.0, "Medium"),
    make_record("Telangana", "Vegetables", "Tomato", "Hyderabad", 70.0, "High"),
    make_record("Telangana", "Spices", "Chilli", "Hyderabad", 20.0, "Low"),
    # A Karnataka district that shares its name with the Telangana capital.
    make_record("Karnataka", "Spices", "Pepper", "Hyderabad", 5.0, "Medium"),
)


@pytest.fixture()
def record_factory() -> Callable[..., CanonicalRecord]:
    return make_record


@pytest.fixture()
def builder() -> AggregationBuilder:
    return make_builder()


@pytest.fixture()
def snapshot() -> HierarchySnapshot:
    builder = make_builder()
    builder.add_all(SAMPLE_RECORDS)
    return builder.build()
