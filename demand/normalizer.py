"""
demand/normalizer.py

Maps raw heterogeneous rows onto :class:`~demand.models.CanonicalRecord`.

Input rows come from several export formats, so each logical field is read
from an ordered list of header aliases; the first non-blank value wins.
Invalid rows are rejected, never raised: ``normalize`` returns the record
or a :class:`~demand.errors.RowRejection` explaining the drop.
"""

from __future__ import annotations

import math
from typing import Any, Final, Mapping, Sequence

from demand.categories import CategoryClassifier
from demand.errors import (
    REJECT_EMPTY_ROW,
    REJECT_INVALID_QUANTITY,
    REJECT_MISSING_CATEGORY,
    REJECT_MISSING_CROP_NAME,
    REJECT_MISSING_STATE,
    REJECT_NON_POSITIVE_QUANTITY,
    REJECT_UNKNOWN_CATEGORY,
    RowRejection,
)
from demand.models import DEFAULT_SUITABILITY, SUITABILITY_LEVELS, CanonicalRecord

DEFAULT_FIELD_ALIASES: Final[dict[str, tuple[str, ...]]] = {
    "state": ("state", "State Name", "State"),
    "category": ("category", "Group"),
    "district": ("district", "District Name", "District"),
    "crop_name": ("crop_name", "Commodity", "Variety"),
    "scientific_name": ("scientific_name", "Scientific Name"),
    "quantity": ("demand_quantity", "Arrivals (Tonnes)", "Arrivals"),
    "suitability": ("suitability", "Suitability"),
}

PLACEHOLDER_CROP_NAMES: Final[frozenset[str]] = frozenset(
    {"other", "others", "na", "n/a", "-", "none"}
)

_SUITABILITY_BY_LOWER: Final[dict[str, str]] = {
    level.lower(): level for level in SUITABILITY_LEVELS
}

NormalizeResult = tuple[CanonicalRecord | None, RowRejection | None]


class RecordNormalizer:
    """
    Pure row -> canonical record mapper.
    """

    def __init__(
        self,
        *,
        aliases: Mapping[str, Sequence[str]] | None = None,
        classifier: CategoryClassifier | None = None,
        placeholder_crop_names: frozenset[str] = PLACEHOLDER_CROP_NAMES,
    ) -> None:
        merged = dict(DEFAULT_FIELD_ALIASES)
        if aliases:
            merged.update({field: tuple(values) for field, values in aliases.items()})
        self._aliases = merged
        self._classifier = classifier or CategoryClassifier()
        self._placeholders = frozenset(name.lower() for name in placeholder_crop_names)

    def normalize(
        self,
        row: Mapping[str, Any],
        *,
        fallback_crop_name: str | None = None,
        row_number: int | None = None,
        source: str | None = None,
    ) -> NormalizeResult:
        """
        Normalize one row.

        *fallback_crop_name* is used when the row's own crop name is absent
        or a placeholder such as ``"Other"`` (CSV sources pass the file stem).
        """

        def reject(reason: str, message: str) -> NormalizeResult:
            return None, RowRejection(
                reason=reason,
                message=message,
                row_number=row_number,
                source=source,
            )

        if self.is_completely_empty_row(row):
            return reject(REJECT_EMPTY_ROW, "Completely empty row.")

        state = self._first_value(row, "state")
        if not state:
            return reject(REJECT_MISSING_STATE, "State is missing.")

        raw_category = self._first_value(row, "category")
        if not raw_category:
            return reject(REJECT_MISSING_CATEGORY, "Category is missing.")

        crop_name = self._resolve_crop_name(row, fallback_crop_name)
        if not crop_name:
            return reject(REJECT_MISSING_CROP_NAME, "Crop name is missing.")

        quantity = self._parse_quantity(self._first_value(row, "quantity"))
        if quantity is None:
            return reject(REJECT_INVALID_QUANTITY, "Demand quantity is not a number.")
        if quantity <= 0:
            return reject(REJECT_NON_POSITIVE_QUANTITY, "Demand quantity must be positive.")

        category = self._classifier.classify(raw_category)
        if category is None:
            return reject(REJECT_UNKNOWN_CATEGORY, f"Unsupported category '{raw_category}'.")

        return (
            CanonicalRecord(
                state=state,
                category=category,
                crop_name=crop_name,
                scientific_name=self._first_value(row, "scientific_name"),
                district=self._first_value(row, "district"),
                quantity=quantity,
                suitability=self._parse_suitability(self._first_value(row, "suitability")),
            ),
            None,
        )

    def is_completely_empty_row(self, row: Mapping[str, Any]) -> bool:
        return all(self._is_blank(value) for value in row.values())

    def _first_value(self, row: Mapping[str, Any], field: str) -> str:
        for alias in self._aliases.get(field, ()):
            value = row.get(alias)
            if not self._is_blank(value):
                return str(value).strip()
        return ""

    def _resolve_crop_name(self, row: Mapping[str, Any], fallback: str | None) -> str:
        own = self._first_value(row, "crop_name")
        if own and own.lower() not in self._placeholders:
            return own
        if fallback and fallback.strip():
            return fallback.strip()
        return own

    @staticmethod
    def _parse_quantity(raw: str) -> float | None:
        if not raw:
            return 0.0
        try:
            value = float(raw.replace(",", ""))
        except ValueError:
            return None
        if math.isnan(value) or math.isinf(value):
            return None
        return value

    @staticmethod
    def _parse_suitability(raw: str) -> str:
        return _SUITABILITY_BY_LOWER.get(raw.lower(), DEFAULT_SUITABILITY)

    @staticmethod
    def _is_blank(value: Any) -> bool:
        if value is None:
            return True
        return str(value).strip() == ""
