from __future__ import annotations

import json
from pathlib import Path

import pytest

from demand.document import (
    format_timestamp,
    parse_timestamp,
    projection_to_dict,
    read_snapshot,
    snapshot_from_document,
    snapshot_to_document,
    write_snapshot,
)
from demand.errors import SnapshotDocumentError
from demand.models import HierarchySnapshot
from demand.projection import CityProjector

from tests.conftest import FIXED_NOW


def test_document_shape(snapshot: HierarchySnapshot) -> None:
    document = snapshot_to_document(snapshot)

    karnataka = document[0]
    assert set(karnataka) == {"state", "categories", "summary"}
    assert karnataka["summary"] == {
        "totalCategories": 15,
        "totalCrops": 3,
        "totalDemand": 185.0,
        "unit": "tons per week",
        "lastUpdated": "2026-01-15T08:30:00.123456Z",
    }
    vegetables = karnataka["categories"][0]
    assert vegetables["name"] == "Vegetables"
    assert vegetables["count"] == 1
    assert vegetables["crops"][0] == {
        "cropId": "crop-1",
        "cropName": "Tomato",
        "scientificName": "",
        "categoryId": {"_id": "vegetables", "name": "Vegetables"},
        "demandQuantity": 150.0,
        "regionalSuitability": [
            {"geography": "India", "district": "Bangalore", "state": "Karnataka", "suitability": "High"},
            {"geography": "India", "district": "Mysore", "state": "Karnataka", "suitability": "Medium"},
        ],
    }


def test_round_trip_is_lossless(snapshot: HierarchySnapshot) -> None:
    encoded = json.dumps(snapshot_to_document(snapshot))
    restored = snapshot_from_document(json.loads(encoded))

    assert restored == snapshot
    assert restored.generated_at == FIXED_NOW


def test_file_round_trip(snapshot: HierarchySnapshot, tmp_path: Path) -> None:
    path = write_snapshot(snapshot, tmp_path / "nested" / "demand.json")

    assert path.exists()
    assert not path.with_suffix(".json.tmp").exists()
    assert read_snapshot(path) == snapshot


def test_integer_quantities_from_external_documents_load_as_floats() -> None:
    document = [
        {
            "state": "Goa",
            "categories": [
                {
                    "name": "Fruits",
                    "count": 1,
                    "crops": [
                        {
                            "cropId": "abc",
                            "cropName": "Cashew",
                            "scientificName": "",
                            "categoryId": {"_id": "fruits", "name": "Fruits"},
                            "demandQuantity": 12,
                            "regionalSuitability": [
                                {"geography": "India", "district": "Panaji", "state": "Goa", "suitability": "High"}
                            ],
                        }
                    ],
                }
            ],
            "summary": {
                "totalCategories": 15,
                "totalCrops": 1,
                "totalDemand": 12,
                "unit": "tons per week",
                "lastUpdated": "2025-11-05T10:00:00.000Z",
            },
        }
    ]

    snapshot = snapshot_from_document(document)

    crop = next(snapshot.iter_crops())
    assert crop.demand_quantity == 12.0
    assert isinstance(crop.demand_quantity, float)
    assert snapshot.districts() == ["Panaji"]


@pytest.mark.parametrize(
    "document",
    [
        {"state": "Goa"},
        [{"state": "Goa", "categories": [], "summary": {"totalCrops": 0}}],
        [{"state": 5, "categories": [], "summary": {}}],
        [{"state": "Goa", "categories": [{"name": "Fruits", "count": 2, "crops": []}],
          "summary": {"totalCategories": 1, "totalCrops": 0, "totalDemand": 0, "unit": "tons per week"}}],
        [{"state": "Goa", "categories": [], "summary": {"totalCategories": 1, "totalCrops": 0,
          "totalDemand": 0, "unit": "tons per week", "lastUpdated": "yesterday"}}],
        [{"state": "Goa", "categories": [], "summary": {"totalCategories": 1, "totalCrops": 0,
          "totalDemand": 0, "unit": "tons per week", "lastUpdated": 12345}}],
        [{"state": "Goa", "categories": [], "summary": {"totalCategories": 1, "totalCrops": 0,
          "totalDemand": 0, "unit": 7}}],
        [{"state": "Goa", "categories": [{"name": "Fruits", "count": 1, "crops": [
            {"cropId": "abc", "cropName": "Cashew", "scientificName": 5,
             "categoryId": {"_id": "fruits", "name": "Fruits"}, "demandQuantity": 1,
             "regionalSuitability": []}]}],
          "summary": {"totalCategories": 1, "totalCrops": 1, "totalDemand": 1, "unit": "tons per week"}}],
    ],
)
def test_malformed_documents_raise(document: object) -> None:
    with pytest.raises(SnapshotDocumentError):
        snapshot_from_document(document)


def test_invalid_json_file_raises(tmp_path: Path) -> None:
    path = tmp_path / "demand.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(SnapshotDocumentError):
        read_snapshot(path)


def test_non_utf8_file_raises(tmp_path: Path) -> None:
    path = tmp_path / "demand.json"
    path.write_bytes(b"\xff\xfe[]")
    with pytest.raises(SnapshotDocumentError):
        read_snapshot(path)


def test_timestamp_helpers() -> None:
    assert format_timestamp(FIXED_NOW) == "2026-01-15T08:30:00.123456Z"
    assert parse_timestamp("2026-01-15T08:30:00.123456Z") == FIXED_NOW


def test_projection_payload(snapshot: HierarchySnapshot) -> None:
    payload = projection_to_dict(CityProjector().project(snapshot, "Hyderabad", state="telangana"))

    assert payload["city"] == "Hyderabad"
    assert payload["filters"] == {"state": "telangana", "category": "all"}
    assert payload["summary"] == {
        "totalStates": 1,
        "totalCategories": 2,
        "totalCrops": 2,
        "totalDemand": 90.0,
        "unit": "tons per week",
    }
    assert "lastUpdated" not in payload["data"][0]["summary"]
