"""
app/domain/ingestion.py

Domain models used by the CSV snapshot build flow.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

from demand.errors import RowRejection
from demand.models import CanonicalRecord


@dataclass(frozen=True)
class FileIngestionResult:
    """
    Normalized output of one source file (one partition).
    """

    file_name: str
    rows_read: int
    records: tuple[CanonicalRecord, ...]
    rejections: tuple[RowRejection, ...] = ()

    @property
    def rows_accepted(self) -> int:
        return len(self.records)

    @property
    def rows_rejected(self) -> int:
        return len(self.rejections)


@dataclass(frozen=True)
class IngestionSummary:
    """
    End-of-run snapshot build summary.
    """

    files: tuple[str, ...]
    rows_read: int
    rows_accepted: int
    rows_rejected: int
    rejections_by_reason: dict[str, int] = field(default_factory=dict)
    total_states: int = 0
    total_crops: int = 0
    total_demand: float = 0.0

    @classmethod
    def from_results(
        cls,
        results: list[FileIngestionResult],
        *,
        total_states: int,
        total_crops: int,
        total_demand: float,
    ) -> "IngestionSummary":
        reasons: Counter[str] = Counter(
            rejection.reason for result in results for rejection in result.rejections
        )
        return cls(
            files=tuple(result.file_name for result in results),
            rows_read=sum(result.rows_read for result in results),
            rows_accepted=sum(result.rows_accepted for result in results),
            rows_rejected=sum(result.rows_rejected for result in results),
            rejections_by_reason=dict(sorted(reasons.items())),
            total_states=total_states,
            total_crops=total_crops,
            total_demand=total_demand,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "files": list(self.files),
            "rows_read": self.rows_read,
            "rows_accepted": self.rows_accepted,
            "rows_rejected": self.rows_rejected,
            "rejections_by_reason": dict(self.rejections_by_reason),
            "total_states": self.total_states,
            "total_crops": self.total_crops,
            "total_demand": self.total_demand,
        }
