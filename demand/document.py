"""
demand/document.py

JSON document codec for snapshots and query results.

The snapshot document is a list of state objects::

    [
      {
        "state": "Karnataka",
        "categories": [
          {
            "name": "Vegetables",
            "count": 1,
            "crops": [
              {
                "cropId": "...",
                "cropName": "Tomato",
                "scientificName": "",
                "categoryId": {"_id": "vegetables", "name": "Vegetables"},
                "demandQuantity": 150.0,
                "regionalSuitability": [
                  {"geography": "India", "district": "Bangalore",
                   "state": "Karnataka", "suitability": "High"}
                ]
              }
            ]
          }
        ],
        "summary": {"totalCategories": 15, "totalCrops": 1, "totalDemand": 150.0,
                    "unit": "tons per week", "lastUpdated": "2026-01-01T00:00:00Z"}
      }
    ]

Loading validates shape and raises :class:`~demand.errors.SnapshotDocumentError`
on anything malformed. Round-tripping a snapshot is lossless.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from demand.errors import SnapshotDocumentError
from demand.models import (
    GEOGRAPHY,
    UNIT,
    CategoryDemand,
    CategoryRef,
    CityEntry,
    CityIndex,
    CityProjection,
    Crop,
    DemandSummary,
    HierarchySnapshot,
    ProjectionSummary,
    RegionFact,
    StateDemand,
)

logger = logging.getLogger(__name__)


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    iso = value.astimezone(timezone.utc).isoformat()
    return iso[:-6] + "Z" if iso.endswith("+00:00") else iso


def parse_timestamp(raw: str) -> datetime:
    if not isinstance(raw, str):
        raise SnapshotDocumentError(f"Invalid lastUpdated timestamp {raw!r}.")
    normalized = raw[:-1] + "+00:00" if raw.endswith("Z") else raw
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError as exc:
        raise SnapshotDocumentError(f"Invalid lastUpdated timestamp '{raw}'.") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def region_to_dict(region: RegionFact) -> dict[str, Any]:
    return {
        "geography": region.geography,
        "district": region.district,
        "state": region.state,
        "suitability": region.suitability,
    }


def crop_to_dict(crop: Crop) -> dict[str, Any]:
    return {
        "cropId": crop.crop_id,
        "cropName": crop.crop_name,
        "scientificName": crop.scientific_name,
        "categoryId": {"_id": crop.category_ref.id, "name": crop.category_ref.name},
        "demandQuantity": crop.demand_quantity,
        "regionalSuitability": [region_to_dict(region) for region in crop.regions],
    }


def category_to_dict(category: CategoryDemand) -> dict[str, Any]:
    return {
        "name": category.name,
        "count": category.count,
        "crops": [crop_to_dict(crop) for crop in category.crops],
    }


def summary_to_dict(summary: DemandSummary) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "totalCategories": summary.total_categories,
        "totalCrops": summary.total_crops,
        "totalDemand": summary.total_demand,
        "unit": summary.unit,
    }
    if summary.last_updated is not None:
        payload["lastUpdated"] = format_timestamp(summary.last_updated)
    return payload


def state_to_dict(state: StateDemand) -> dict[str, Any]:
    return {
        "state": state.name,
        "categories": [category_to_dict(category) for category in state.categories],
        "summary": summary_to_dict(state.summary),
    }


def projection_summary_to_dict(summary: ProjectionSummary) -> dict[str, Any]:
    return {
        "totalStates": summary.total_states,
        "totalCategories": summary.total_categories,
        "totalCrops": summary.total_crops,
        "totalDemand": summary.total_demand,
        "unit": summary.unit,
    }


def snapshot_to_document(snapshot: HierarchySnapshot) -> list[dict[str, Any]]:
    return [state_to_dict(state) for state in snapshot.states]


def projection_to_dict(projection: CityProjection) -> dict[str, Any]:
    return {
        "city": projection.city,
        "filters": {
            "state": projection.state_filter or "all",
            "category": projection.category_filter or "all",
        },
        "data": [state_to_dict(state) for state in projection.states],
        "summary": projection_summary_to_dict(projection.summary),
    }


def city_entry_to_dict(entry: CityEntry) -> dict[str, Any]:
    return {
        "city": entry.city,
        "data": [state_to_dict(state) for state in entry.states],
        "summary": projection_summary_to_dict(entry.summary),
    }


def city_index_to_dict(index: CityIndex) -> dict[str, Any]:
    return {
        "totalCities": len(index),
        "cities": [city_entry_to_dict(entry) for entry in index.cities],
    }


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def _require(payload: Any, key: str, expected: type | tuple[type, ...], where: str) -> Any:
    if not isinstance(payload, dict):
        raise SnapshotDocumentError(f"{where} must be an object.")
    if key not in payload:
        raise SnapshotDocumentError(f"{where} is missing '{key}'.")
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, expected):
        raise SnapshotDocumentError(f"{where}.{key} has an invalid type.")
    return value


def _optional(payload: dict[str, Any], key: str, expected: type, where: str, default: Any) -> Any:
    if payload.get(key) is None:
        return default
    return _require(payload, key, expected, where)


def _region_from_dict(payload: Any, where: str) -> RegionFact:
    return RegionFact(
        district=_require(payload, "district", str, where),
        state=_require(payload, "state", str, where),
        suitability=_require(payload, "suitability", str, where),
        geography=_optional(payload, "geography", str, where, GEOGRAPHY),
    )


def _crop_from_dict(payload: Any, where: str) -> Crop:
    category_ref = _require(payload, "categoryId", dict, where)
    regions = _require(payload, "regionalSuitability", list, where)
    return Crop(
        crop_id=_require(payload, "cropId", str, where),
        crop_name=_require(payload, "cropName", str, where),
        scientific_name=_optional(payload, "scientificName", str, where, ""),
        category_ref=CategoryRef(
            id=_require(category_ref, "_id", str, f"{where}.categoryId"),
            name=_require(category_ref, "name", str, f"{where}.categoryId"),
        ),
        demand_quantity=float(_require(payload, "demandQuantity", (int, float), where)),
        regions=tuple(
            _region_from_dict(region, f"{where}.regionalSuitability[{i}]")
            for i, region in enumerate(regions)
        ),
    )


def _category_from_dict(payload: Any, where: str) -> CategoryDemand:
    crops = _require(payload, "crops", list, where)
    category = CategoryDemand(
        name=_require(payload, "name", str, where),
        crops=tuple(_crop_from_dict(crop, f"{where}.crops[{i}]") for i, crop in enumerate(crops)),
    )
    count = payload.get("count", category.count)
    if count != category.count:
        raise SnapshotDocumentError(
            f"{where}.count is {count} but {category.count} crops are listed."
        )
    return category


def _summary_from_dict(payload: dict[str, Any], where: str) -> DemandSummary:
    last_updated = _optional(payload, "lastUpdated", str, where, None)
    return DemandSummary(
        total_categories=_require(payload, "totalCategories", int, where),
        total_crops=_require(payload, "totalCrops", int, where),
        total_demand=float(_require(payload, "totalDemand", (int, float), where)),
        unit=_optional(payload, "unit", str, where, UNIT),
        last_updated=parse_timestamp(last_updated) if last_updated else None,
    )


def snapshot_from_document(document: Any) -> HierarchySnapshot:
    if not isinstance(document, list):
        raise SnapshotDocumentError("Snapshot document must be a list of states.")

    states: list[StateDemand] = []
    for i, payload in enumerate(document):
        where = f"states[{i}]"
        categories = _require(payload, "categories", list, where)
        states.append(
            StateDemand(
                name=_require(payload, "state", str, where),
                categories=tuple(
                    _category_from_dict(category, f"{where}.categories[{j}]")
                    for j, category in enumerate(categories)
                ),
                summary=_summary_from_dict(
                    _require(payload, "summary", dict, where), f"{where}.summary"
                ),
            )
        )

    generated_at = states[0].summary.last_updated if states else None
    return HierarchySnapshot(states=tuple(states), generated_at=generated_at)


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


def write_snapshot(snapshot: HierarchySnapshot, path: str | Path) -> Path:
    """
    Write the snapshot document atomically (temp file + replace).
    """

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = target.with_suffix(f"{target.suffix}.tmp")
    try:
        with tmp_path.open("w", encoding="utf-8") as handle:
            json.dump(snapshot_to_document(snapshot), handle, indent=2, ensure_ascii=False)
        tmp_path.replace(target)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    logger.debug("Snapshot written path=%s states=%d", target, len(snapshot))
    return target


def read_snapshot(path: str | Path) -> HierarchySnapshot:
    source = Path(path)
    try:
        document = json.loads(source.read_text(encoding="utf-8"))
    except UnicodeDecodeError as exc:
        raise SnapshotDocumentError(f"Snapshot file '{source}' is not UTF-8 encoded.") from exc
    except json.JSONDecodeError as exc:
        raise SnapshotDocumentError(f"Snapshot file '{source}' is not valid JSON.") from exc
    return snapshot_from_document(document)
