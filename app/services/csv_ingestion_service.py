"""
app/services/csv_ingestion_service.py

Builds a demand snapshot from a folder of CSV exports.

Each file is one partition: a worker thread streams it, normalizes every
row and returns the accepted records. The calling thread owns the single
AggregationBuilder and merges partition results in sorted file-name order,
so no two threads ever touch the aggregation maps and the resulting
insertion order does not depend on thread scheduling.

A file that cannot be decoded or parsed aborts the whole run. Callers keep
serving the previously published snapshot and re-run wholesale.
"""

from __future__ import annotations

import csv
import logging
from concurrent.futures import ThreadPoolExecutor
from functools import lru_cache
from pathlib import Path

from app.config import get_demand_settings
from app.domain.ingestion import FileIngestionResult, IngestionSummary
from app.logging_utils import log_event, log_rejection
from demand.builder import AggregationBuilder
from demand.errors import RowRejection
from demand.models import CanonicalRecord, HierarchySnapshot
from demand.normalizer import RecordNormalizer

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class CSVSourceError(RuntimeError):
    """
    Raised when the CSV source folder or one of its files is unusable.
    """


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def crop_name_from_file(path: Path) -> str:
    """
    File stem used as the fallback crop name (``Tomato.csv`` -> ``Tomato``).
    """

    return path.stem.strip()


def discover_csv_files(data_dir: Path) -> list[Path]:
    if not data_dir.is_dir():
        raise CSVSourceError(f"Data folder not found at {data_dir}.")
    files = sorted(
        (path for path in data_dir.iterdir() if path.is_file() and path.suffix.lower() == ".csv"),
        key=lambda path: path.name,
    )
    if not files:
        raise CSVSourceError(f"No CSV files found in {data_dir}.")
    return files


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class CSVIngestionService:
    """
    Coordinates CSV reading, row normalization and aggregation.
    """

    def __init__(
        self,
        *,
        max_workers: int,
        max_logged_rejections: int,
        normalizer: RecordNormalizer | None = None,
    ) -> None:
        self._max_workers = max(1, max_workers)
        self._max_logged_rejections = max(0, max_logged_rejections)
        self._normalizer = normalizer or RecordNormalizer()

    def build_snapshot(
        self,
        data_dir: str | Path,
        *,
        builder: AggregationBuilder | None = None,
    ) -> tuple[HierarchySnapshot, IngestionSummary]:
        """
        Read every ``*.csv`` under *data_dir* and aggregate them into one snapshot.
        """

        files = discover_csv_files(Path(data_dir))
        workers = min(self._max_workers, len(files))
        logger.info("Building demand snapshot from %d CSV file(s) with %d worker(s)", len(files), workers)

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="csv-ingest") as pool:
            # map() yields in submission order and re-raises worker errors here.
            results = list(pool.map(self.read_file, files))

        builder = builder or AggregationBuilder()
        for result in results:
            builder.add_all(result.records)
        snapshot = builder.build()

        summary = IngestionSummary.from_results(
            results,
            total_states=len(snapshot),
            total_crops=snapshot.total_crops,
            total_demand=snapshot.total_demand,
        )
        self._log_rejections(results)
        log_event(
            logger,
            logging.INFO,
            "snapshot_built",
            files=len(summary.files),
            rows_read=summary.rows_read,
            rows_accepted=summary.rows_accepted,
            rows_rejected=summary.rows_rejected,
            states=summary.total_states,
            crops=summary.total_crops,
            total_demand=round(summary.total_demand, 4),
        )
        return snapshot, summary

    def read_file(self, path: Path) -> FileIngestionResult:
        """
        Stream and normalize one CSV file. Safe to call from worker threads.
        """

        fallback_crop_name = crop_name_from_file(path)
        records: list[CanonicalRecord] = []
        rejections: list[RowRejection] = []
        rows_read = 0

        try:
            with path.open("r", encoding="utf-8-sig", newline="") as handle:
                reader = csv.DictReader(handle)
                if not reader.fieldnames:
                    raise CSVSourceError(f"CSV header row is missing in {path.name}.")

                for row_number, raw_row in enumerate(reader, start=2):
                    rows_read += 1
                    record, rejection = self._normalizer.normalize(
                        raw_row,
                        fallback_crop_name=fallback_crop_name,
                        row_number=row_number,
                        source=path.name,
                    )
                    if rejection is not None:
                        rejections.append(rejection)
                    elif record is not None:
                        records.append(record)
        except UnicodeDecodeError as exc:
            raise CSVSourceError(f"{path.name} must be UTF-8 encoded.") from exc
        except csv.Error as exc:
            raise CSVSourceError(f"Invalid CSV format in {path.name}: {exc}") from exc
        except OSError as exc:
            raise CSVSourceError(f"Unable to read {path.name}: {exc}") from exc

        log_event(
            logger,
            logging.INFO,
            "csv_file_ingested",
            file=path.name,
            rows_read=rows_read,
            rows_accepted=len(records),
            rows_rejected=len(rejections),
        )
        return FileIngestionResult(
            file_name=path.name,
            rows_read=rows_read,
            records=tuple(records),
            rejections=tuple(rejections),
        )

    def _log_rejections(self, results: list[FileIngestionResult]) -> None:
        logged = 0
        for result in results:
            for rejection in result.rejections:
                if logged >= self._max_logged_rejections:
                    return
                log_rejection(logger, rejection)
                logged += 1


@lru_cache(maxsize=1)
def get_csv_ingestion_service() -> CSVIngestionService:
    """
    Build a cached CSV ingestion service from configuration.
    """

    settings = get_demand_settings()
    return CSVIngestionService(
        max_workers=settings.ingest_max_workers,
        max_logged_rejections=settings.max_logged_rejections,
    )
