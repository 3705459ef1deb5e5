"""
demand/errors.py

Exception hierarchy and row rejection codes for the demand engine.

Row-level problems are never raised: the normalizer returns a
:class:`RowRejection` and the caller decides whether to count or log it.
Query-level problems are raised and mapped to HTTP responses by the router.
"""

from __future__ import annotations

from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Row rejection reasons
# ---------------------------------------------------------------------------

REJECT_EMPTY_ROW = "empty_row"
REJECT_MISSING_STATE = "missing_state"
REJECT_MISSING_CATEGORY = "missing_category"
REJECT_MISSING_CROP_NAME = "missing_crop_name"
REJECT_UNKNOWN_CATEGORY = "unknown_category"
REJECT_INVALID_QUANTITY = "invalid_quantity"
REJECT_NON_POSITIVE_QUANTITY = "non_positive_quantity"

INVALID_RECORD_REASONS = frozenset(
    {
        REJECT_EMPTY_ROW,
        REJECT_MISSING_STATE,
        REJECT_MISSING_CATEGORY,
        REJECT_MISSING_CROP_NAME,
        REJECT_UNKNOWN_CATEGORY,
        REJECT_INVALID_QUANTITY,
        REJECT_NON_POSITIVE_QUANTITY,
    }
)

# UnknownCategory is the only named subset of InvalidRecord.
UNKNOWN_CATEGORY_REASONS = frozenset({REJECT_UNKNOWN_CATEGORY})


@dataclass(frozen=True)
class RowRejection:
    """
    One dropped input row.
    """

    reason: str
    message: str
    row_number: int | None = None
    source: str | None = None

    @property
    def is_unknown_category(self) -> bool:
        return self.reason in UNKNOWN_CATEGORY_REASONS


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class DemandError(Exception):
    """Base exception for demand engine failures."""


class DemandQueryError(DemandError):
    """Base exception for read-side query failures."""


class MissingQueryParameterError(DemandQueryError):
    """Raised when a required query argument is absent or blank."""

    def __init__(self, parameter: str) -> None:
        super().__init__(f"Query parameter '{parameter}' is required.")
        self.parameter = parameter


class CityNotFoundError(DemandQueryError):
    """Raised when a city projection retains no data after filtering."""

    def __init__(
        self,
        city: str,
        *,
        state: str | None = None,
        category: str | None = None,
    ) -> None:
        super().__init__(f"No crop demand data found for city/district: {city}")
        self.city = city
        self.state = state
        self.category = category


class SnapshotUnavailableError(DemandQueryError):
    """Raised when no aggregation has been published yet."""


class SnapshotDocumentError(DemandError, ValueError):
    """Raised when a persisted snapshot document is malformed."""
