from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from app.services.csv_ingestion_service import (
    CSVIngestionService,
    CSVSourceError,
    crop_name_from_file,
    discover_csv_files,
)
from demand.categories import VALID_CATEGORIES

from tests.conftest import make_builder

MARKET_HEADER = "State Name,District Name,Market Name,Group,Variety,Arrivals (Tonnes)\n"


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture()
def data_dir(tmp_path: Path) -> Path:
    folder = tmp_path / "data"
    folder.mkdir()
    _write(
        folder / "Tomato.csv",
        MARKET_HEADER
        + "Karnataka,Bangalore,Binny Mill,Vegetables,Other,100\n"
        + "Karnataka,Mysore,Bandipalya,Vegetables,Other,50\n"
        + "Karnataka,Mysore,Bandipalya,Vegetables,Other,0\n"
        + "Telangana,Hyderabad,Bowenpally,Vegetables,Local,70\n",
    )
    _write(
        folder / "Groundnut.csv",
        MARKET_HEADER
        + "Telangana,Hyderabad,Malakpet,oilseeds,Other,25.5\n"
        + "Telangana,Warangal,Enumamula,Dairy,Other,10\n"
        + ",,,,,\n",
    )
    _write(folder / "notes.txt", "not a csv")
    return folder


@pytest.fixture()
def service() -> CSVIngestionService:
    return CSVIngestionService(max_workers=2, max_logged_rejections=10)


def test_discovers_only_csv_files_sorted(data_dir: Path) -> None:
    assert [path.name for path in discover_csv_files(data_dir)] == ["Groundnut.csv", "Tomato.csv"]


def test_crop_name_from_file() -> None:
    assert crop_name_from_file(Path("/data/Green Chilli.csv")) == "Green Chilli"


def test_read_file_normalizes_rows(service: CSVIngestionService, data_dir: Path) -> None:
    result = service.read_file(data_dir / "Tomato.csv")

    assert result.file_name == "Tomato.csv"
    assert result.rows_read == 4
    assert result.rows_accepted == 3
    assert [rejection.reason for rejection in result.rejections] == ["non_positive_quantity"]
    assert result.rejections[0].row_number == 4
    assert [record.crop_name for record in result.records] == ["Tomato", "Tomato", "Local"]


def test_build_snapshot_merges_all_partitions(service: CSVIngestionService, data_dir: Path) -> None:
    snapshot, summary = service.build_snapshot(data_dir, builder=make_builder())

    assert summary.files == ("Groundnut.csv", "Tomato.csv")
    assert summary.rows_read == 7
    assert summary.rows_accepted == 4
    assert summary.rows_rejected == 3
    assert summary.rejections_by_reason == {
        "empty_row": 1,
        "non_positive_quantity": 1,
        "unknown_category": 1,
    }
    # Groundnut.csv is merged first, so Telangana is the first state seen.
    assert [state.name for state in snapshot.states] == ["Telangana", "Karnataka"]
    assert summary.total_states == 2
    assert summary.total_crops == 3
    assert summary.total_demand == pytest.approx(100 + 50 + 70 + 25.5)

    for state in snapshot.states:
        assert tuple(category.name for category in state.categories) == VALID_CATEGORIES

    karnataka = snapshot.states[1]
    tomato = karnataka.categories[0].crops[0]
    assert tomato.demand_quantity == pytest.approx(150.0)
    assert [region.district for region in tomato.regions] == ["Bangalore", "Mysore"]


def test_summary_serializes(service: CSVIngestionService, data_dir: Path) -> None:
    _, summary = service.build_snapshot(data_dir)
    payload = summary.to_dict()

    assert payload["files"] == ["Groundnut.csv", "Tomato.csv"]
    assert payload["rows_accepted"] == 4


def test_missing_folder_raises(service: CSVIngestionService, tmp_path: Path) -> None:
    with pytest.raises(CSVSourceError):
        service.build_snapshot(tmp_path / "absent")


def test_folder_without_csv_raises(service: CSVIngestionService, tmp_path: Path) -> None:
    _write(tmp_path / "readme.md", "nothing here")
    with pytest.raises(CSVSourceError):
        service.build_snapshot(tmp_path)


def test_undecodable_file_aborts_run(service: CSVIngestionService, data_dir: Path) -> None:
    (data_dir / "Broken.csv").write_bytes(b"State Name,Group\n\xff\xfe\xfa,Vegetables\n")
    with pytest.raises(CSVSourceError):
        service.build_snapshot(data_dir)


def test_empty_file_without_header_aborts_run(service: CSVIngestionService, data_dir: Path) -> None:
    _write(data_dir / "Empty.csv", "")
    with pytest.raises(CSVSourceError):
        service.build_snapshot(data_dir)


def test_unknown_categories_are_logged_as_warnings(
    service: CSVIngestionService, data_dir: Path, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.DEBUG, logger="app.services.csv_ingestion_service")
    service.build_snapshot(data_dir)

    rejected = [
        (record.levelno, json.loads(record.getMessage()))
        for record in caplog.records
        if '"csv_row_rejected"' in record.getMessage()
    ]
    warnings = [payload for level, payload in rejected if level == logging.WARNING]
    assert len(rejected) == 3
    assert [payload["reason"] for payload in warnings] == ["unknown_category"]
    assert warnings[0]["file"] == "Groundnut.csv"


def test_logged_rejections_are_capped(data_dir: Path, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="app.services.csv_ingestion_service")
    CSVIngestionService(max_workers=1, max_logged_rejections=1).build_snapshot(data_dir)

    assert sum('"csv_row_rejected"' in record.getMessage() for record in caplog.records) == 1
